"""TTL cache for final ABAC decisions."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import NamedTuple

from gatekeeper.models import AccessRequest, CachedDecision, Decision

DEFAULT_TTL = timedelta(minutes=5)
DEFAULT_MAX_ENTRIES = 1000


class CacheKey(NamedTuple):
    user_id: str
    action: str
    resource_type: str
    resource_id: str

    @classmethod
    def for_request(cls, request: AccessRequest) -> CacheKey:
        # Attributes are not part of the key: a decision may outlive a
        # change in progress or enrollment for up to one TTL.
        return cls(
            request.subject.user_id,
            request.action,
            request.resource.type,
            request.resource.id,
        )


class DecisionCache:
    """Expiring decision store with sweep-on-write cleanup.

    Not thread-safe on its own; ``PolicyEngine`` holds its lock around every
    call. Once more than ``max_entries`` keys are stored, each ``put`` drops
    all expired entries before returning.
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock or (lambda: datetime.now(UTC))
        self._entries: dict[CacheKey, CachedDecision] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: CacheKey) -> Decision | None:
        cached = self._entries.get(key)
        if cached is None or cached.is_expired(self._clock()):
            return None
        return cached.decision

    def put(self, key: CacheKey, decision: Decision) -> None:
        self._entries[key] = CachedDecision(
            decision=decision,
            expires_at=self._clock() + self.ttl,
        )
        if len(self._entries) > self.max_entries:
            self.sweep()

    def sweep(self) -> int:
        """Delete expired entries. Returns how many were removed."""
        now = self._clock()
        expired = [k for k, v in self._entries.items() if v.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def invalidate_user(self, user_id: str) -> int:
        stale = [k for k in self._entries if k.user_id == user_id]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
