"""
Fixed-window rate limiting for AI-triggered operations.
"""

from mindgraph.ratelimit.limiter import (
    RateLimiter,
    RateLimitStatus,
    RateLimitResult,
)

__all__ = [
    "RateLimiter",
    "RateLimitStatus",
    "RateLimitResult",
]
