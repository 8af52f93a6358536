# comments in English; reST docstrings
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from storerate.services._shared.errors import DependencyError
from storerate.services._shared.ports import AggregateCache


@dataclass(slots=True)
class RedisAggregateCache(AggregateCache):
    """
    Redis-backed aggregate cache.

    Values are JSON documents stored with ``SET key value EX ttl``; namespace
    invalidation walks ``SCAN MATCH prefix*`` and deletes in batches, which is
    O(active keys) per write. The namespace version is a plain counter at
    ``<namespace>.version``, outside the ``<namespace>:`` prefix, so a
    namespace sweep never resets it.

    :param r: A Redis client (already configured).
    :param scan_count: ``COUNT`` hint for each ``SCAN`` round-trip.
    """

    r: redis.Redis
    scan_count: int = 500

    def get(self, key: str) -> list[dict[str, Any]] | None:
        try:
            raw = self.r.get(key)
        except RedisError as exc:
            raise DependencyError(f"cache get failed for {key!r}") from exc
        if raw is None:
            return None
        try:
            value = json.loads(raw)
        except ValueError:
            # Unreadable entry: treat as a miss so the caller recomputes it.
            return None
        return value if isinstance(value, list) else None

    def put(self, key: str, value: list[dict[str, Any]], ttl_seconds: int) -> None:
        payload = json.dumps(value, default=str, separators=(",", ":"))
        try:
            self.r.set(key, payload, ex=max(1, int(ttl_seconds)))
        except RedisError as exc:
            raise DependencyError(f"cache put failed for {key!r}") from exc

    def invalidate_namespace(self, prefix: str) -> int:
        removed = 0
        batch: list[Any] = []
        try:
            for key in self.r.scan_iter(match=f"{prefix}*", count=self.scan_count):
                batch.append(key)
                if len(batch) >= self.scan_count:
                    removed += int(self.r.delete(*batch))
                    batch.clear()
            if batch:
                removed += int(self.r.delete(*batch))
        except RedisError as exc:
            raise DependencyError(f"cache invalidation failed for {prefix!r}") from exc
        return removed

    @staticmethod
    def version_key(namespace: str) -> str:
        return f"{namespace}.version"

    def version(self, namespace: str) -> int:
        try:
            raw = self.r.get(self.version_key(namespace))
        except RedisError as exc:
            raise DependencyError(f"cache version read failed for {namespace!r}") from exc
        return int(raw) if raw is not None else 0

    def bump_version(self, namespace: str) -> int:
        try:
            return int(self.r.incr(self.version_key(namespace)))
        except RedisError as exc:
            raise DependencyError(f"cache version bump failed for {namespace!r}") from exc
