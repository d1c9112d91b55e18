"""
Ephemeral status cache — short-TTL memoisation of derived per-account status
(verification state, ban state).

Key schema
----------
(account_id, "verification")   VerificationStatusResponse
(account_id, "ban")            BanStatusResponse

A hit is served only while ``now - stored_at < ttl``.  Writers that change an
account's status call ``invalidate_subject`` after committing and before
responding.  A compute that was already running when the invalidation landed
does not store its (possibly stale) result.

Process memory only; several worker processes need a shared cache instead.
"""
from __future__ import annotations

import time
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

T = TypeVar("T")

CacheKey = tuple[uuid.UUID, str]


@dataclass(frozen=True)
class _Entry:
    value: Any
    stored_at: float


class StatusCache:
    def __init__(
        self,
        ttl_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[CacheKey, _Entry] = {}
        self._inflight: dict[CacheKey, object] = {}

    async def get(self, key: CacheKey, compute: Callable[[], Awaitable[T]]) -> T:
        entry = self._entries.get(key)
        if entry is not None and self._clock() - entry.stored_at < self.ttl_seconds:
            return entry.value

        token = object()
        self._inflight[key] = token
        try:
            value = await compute()
        finally:
            owned = self._inflight.get(key) is token
            if owned:
                del self._inflight[key]
        if owned:
            self._entries[key] = _Entry(value=value, stored_at=self._clock())
        return value

    def invalidate(self, key: CacheKey) -> None:
        self._entries.pop(key, None)
        self._inflight.pop(key, None)

    def invalidate_subject(self, subject_id: uuid.UUID) -> int:
        """Drop every key derived from ``subject_id``; returns how many were cached."""
        stale = [k for k in self._entries if k[0] == subject_id]
        for key in stale:
            del self._entries[key]
        for key in [k for k in self._inflight if k[0] == subject_id]:
            del self._inflight[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
        self._inflight.clear()

    def __len__(self) -> int:
        return len(self._entries)
