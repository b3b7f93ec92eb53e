from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

# ---------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class RateLimitPolicy:
    """
    Fixed-window budget for a single action.

    At most ``max_requests`` increments are accepted per window of
    ``window_ms`` milliseconds, counted per user.
    """

    max_requests: int
    window_ms: int

    def __post_init__(self) -> None:
        if self.max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if self.window_ms < 1:
            raise ValueError("window_ms must be >= 1")


DEFAULT_RATE_LIMITS: Mapping[str, RateLimitPolicy] = MappingProxyType(
    {
        "ai:extractTopic": RateLimitPolicy(max_requests=30, window_ms=60_000),
        "ai:searchTopic": RateLimitPolicy(max_requests=20, window_ms=60_000),
        "ai:generateMindMap": RateLimitPolicy(max_requests=10, window_ms=60_000),
        "ai:expandNode": RateLimitPolicy(max_requests=15, window_ms=60_000),
    }
)


@dataclass(frozen=True)
class RateLimitConfig:
    """
    Static action policy table consulted by the rate limiter.

    Actions absent from the table are never limited.
    """

    enabled: bool = True
    policies: Mapping[str, RateLimitPolicy] = field(
        default_factory=lambda: DEFAULT_RATE_LIMITS
    )

    def __post_init__(self) -> None:
        # freeze caller-supplied dicts
        object.__setattr__(self, "policies", MappingProxyType(dict(self.policies)))


# ---------------------------------------------------------------------
# Root configuration object
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class MindGraphConfig:
    """
    Root configuration object for mindgraph.

    This object is intended to be:
    - constructed explicitly
    - passed through all major subsystems
    - treated as immutable system policy
    """

    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
