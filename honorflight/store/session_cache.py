"""Shared cache for the document store session cookie.

One slot per (endpoint, account). Entries expire after a fixed TTL measured
from issue time; a refresh replaces the slot wholesale. Concurrent refreshes
are not serialized: the login call is idempotent, so the last writer wins.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

DEFAULT_SESSION_TTL_SECONDS = 3 * 60


@dataclass(frozen=True)
class SessionEntry:
    """A cached session token and the moment it was issued."""

    token: str
    issued_at: float


def session_key(endpoint: str, account: str) -> str:
    """Cache key for a store endpoint/account pair."""
    return f"AuthSession_{endpoint}_{account}"


class SessionCache:
    """In-process session store with get/set/invalidate/clear and TTL expiry.

    Usage:
        cache = SessionCache(ttl_seconds=180)
        cache.set(key, "AuthSession=abc")
        token = cache.get(key)  # None once expired
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, SessionEntry] = {}

    def get(self, key: str) -> str | None:
        """Return the cached token, dropping it if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.is_expired(entry):
            self._entries.pop(key, None)
            return None
        return entry.token

    def set(self, key: str, token: str) -> SessionEntry:
        entry = SessionEntry(token=token, issued_at=self._clock())
        self._entries[key] = entry
        return entry

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every cached session. Used by tests."""
        self._entries.clear()

    def is_expired(self, entry: SessionEntry) -> bool:
        return self._clock() - entry.issued_at >= self.ttl_seconds
