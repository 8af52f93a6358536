from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol


class AggregateCache(Protocol):
    """
    Read-through cache for derived store aggregates.

    Implementations report a miss immediately (``None``) and never recompute;
    the caller computes the value and calls :meth:`put`. Connectivity failures
    are raised as :class:`~storerate.services._shared.errors.DependencyError`
    so that callers can degrade to the uncached path.
    """

    def get(self, key: str) -> list[dict[str, Any]] | None:
        """Return the cached value for ``key`` or ``None`` on a miss."""

    def put(self, key: str, value: list[dict[str, Any]], ttl_seconds: int) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``, replacing any entry."""

    def invalidate_namespace(self, prefix: str) -> int:
        """
        Remove every key starting with ``prefix``.

        :returns: Number of keys removed.
        """

    def version(self, namespace: str) -> int:
        """Return the namespace version embedded in listing keys (``0`` if never bumped)."""

    def bump_version(self, namespace: str) -> int:
        """
        Increment and return the namespace version.

        Listings computed under an older version are stored under keys that
        readers no longer build, so a slow reader cannot republish a result
        from before the write.
        """


@dataclass(slots=True)
class _Entry:
    value: list[dict[str, Any]]
    expires_at: float


class InMemoryAggregateCache(AggregateCache):
    """
    Process-local cache with TTL semantics.

    .. note::
       Used when no Redis URL is configured and in unit tests; the clock is
       injectable so expiry can be exercised without sleeping.
    """

    def __init__(self, *, clock: Callable[[], float] | None = None) -> None:
        self._entries: dict[str, _Entry] = {}
        self._versions: dict[str, int] = {}
        self._clock = clock or time.monotonic
        self._lock = threading.Lock()

    def get(self, key: str) -> list[dict[str, Any]] | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                return None
            return entry.value

    def put(self, key: str, value: list[dict[str, Any]], ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = _Entry(
                value=value,
                expires_at=self._clock() + max(1, int(ttl_seconds)),
            )

    def invalidate_namespace(self, prefix: str) -> int:
        with self._lock:
            doomed = [k for k in self._entries if k.startswith(prefix)]
            for k in doomed:
                del self._entries[k]
            return len(doomed)

    def version(self, namespace: str) -> int:
        with self._lock:
            return self._versions.get(namespace, 0)

    def bump_version(self, namespace: str) -> int:
        with self._lock:
            self._versions[namespace] = self._versions.get(namespace, 0) + 1
            return self._versions[namespace]

    def keys(self) -> list[str]:
        """Return live keys (test helper)."""
        with self._lock:
            now = self._clock()
            return sorted(k for k, e in self._entries.items() if e.expires_at > now)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._versions.clear()
