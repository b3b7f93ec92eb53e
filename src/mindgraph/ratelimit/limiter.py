from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from mindgraph.config.settings import RateLimitConfig, RateLimitPolicy
from mindgraph.errors import RateLimitExceeded
from mindgraph.graph.graph_schema import RateLimitRecord
from mindgraph.graph.graph_store import GraphStore
from mindgraph.utils.time import now_ms

logger = logging.getLogger("mindgraph.ratelimit")


@dataclass(frozen=True)
class RateLimitStatus:
    """
    Read-only view of a user's budget for one action.

    ``remaining`` is ``math.inf`` for actions without a policy.
    """

    allowed: bool
    remaining: float
    reset_at: int


@dataclass(frozen=True)
class RateLimitResult:
    success: bool
    error: Optional[str] = None
    reset_at: Optional[int] = None


class RateLimiter:
    """
    Fixed-window request counter per (user, action).

    A window is active while ``window_start >= now - window_ms``; once it
    is older than that the next increment opens a fresh window. The worst
    case burst across a window boundary is twice ``max_requests``.
    """

    def __init__(
        self,
        store: GraphStore,
        policies: Mapping[str, RateLimitPolicy],
        *,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.policies: Mapping[str, RateLimitPolicy] = MappingProxyType(dict(policies))
        self.clock = clock

    @classmethod
    def from_config(
        cls,
        store: GraphStore,
        config: RateLimitConfig,
        *,
        clock: Callable[[], int] = now_ms,
    ) -> "RateLimiter":
        policies = config.policies if config.enabled else {}
        return cls(store, policies, clock=clock)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check(self, user_id: str, action: str) -> RateLimitStatus:
        policy = self.policies.get(action)
        if policy is None:
            return RateLimitStatus(allowed=True, remaining=math.inf, reset_at=0)

        now = self.clock()
        with self.store.locked() as store:
            record = store.get_rate_limit(user_id, action)

        if not self._is_active(record, policy, now):
            return RateLimitStatus(
                allowed=True,
                remaining=policy.max_requests,
                reset_at=now + policy.window_ms,
            )

        remaining = max(0, policy.max_requests - record.count)
        return RateLimitStatus(
            allowed=remaining > 0,
            remaining=remaining,
            reset_at=record.window_start + policy.window_ms,
        )

    def increment(self, user_id: str, action: str) -> RateLimitResult:
        policy = self.policies.get(action)
        if policy is None:
            return RateLimitResult(success=True)

        now = self.clock()
        with self.store.transaction() as store:
            record = store.get_rate_limit(user_id, action)

            if not self._is_active(record, policy, now):
                if record is None:
                    store.insert_rate_limit(
                        RateLimitRecord.create(user_id=user_id, action=action, now=now)
                    )
                else:
                    store.patch_rate_limit(user_id, action, window_start=now, count=1)
                return RateLimitResult(success=True)

            if record.count >= policy.max_requests:
                reset_at = record.window_start + policy.window_ms
                logger.warning(
                    "rate limit exceeded user=%s action=%s reset_at=%d",
                    user_id,
                    action,
                    reset_at,
                )
                return RateLimitResult(
                    success=False,
                    error="Rate limit exceeded",
                    reset_at=reset_at,
                )

            store.patch_rate_limit(user_id, action, count=record.count + 1)
            return RateLimitResult(success=True)

    def enforce(self, user_id: str, action: str) -> None:
        """
        Consume one request or raise :class:`RateLimitExceeded`.
        """
        result = self.increment(user_id, action)
        if not result.success:
            raise RateLimitExceeded(action, result.reset_at)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _is_active(
        record: Optional[RateLimitRecord],
        policy: RateLimitPolicy,
        now: int,
    ) -> bool:
        return record is not None and record.window_start >= now - policy.window_ms
