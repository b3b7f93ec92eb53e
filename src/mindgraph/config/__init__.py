"""
Configuration layer for mindgraph.

Defines the configuration contracts for the per-action rate-limit
policy table that gates AI-triggered operations.

Configuration in mindgraph is:
- Explicit (passed, not global)
- Typed (validated at construction time)
- Immutable once built
"""

from mindgraph.config.settings import (
    DEFAULT_RATE_LIMITS,
    RateLimitPolicy,
    RateLimitConfig,
    MindGraphConfig,
)

__all__ = [
    "DEFAULT_RATE_LIMITS",
    "RateLimitPolicy",
    "RateLimitConfig",
    "MindGraphConfig",
]
