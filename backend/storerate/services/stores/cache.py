"""Cache keys and best-effort cache access for store listings."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from storerate.services._shared.errors import DependencyError
from storerate.services._shared.ports import AggregateCache

log = logging.getLogger(__name__)

ANONYMOUS = "anon"
ALL = "all"
SORT_FIELDS = ("name", "rating")
SORT_ORDERS = ("asc", "desc")


def normalize_sort(sort_by: str | None, order: str | None) -> tuple[str, str]:
    """Collapse free-form sort inputs: ``rating`` or else ``name``; ``desc`` or else ``asc``."""
    field = "rating" if (sort_by or "").strip().lower() == "rating" else "name"
    direction = "desc" if (order or "").strip().lower() == "desc" else "asc"
    return field, direction


def normalize_search(search: str | None) -> str:
    """Trim and lowercase; the search is case-insensitive so case must not split keys."""
    return (search or "").strip().lower()


def build_cache_key(
    namespace: str,
    *,
    version: int = 0,
    requester_id: int | None,
    search: str | None,
    sort_by: str | None,
    order: str | None,
) -> str:
    """
    Deterministic key for a store listing query.

    ``<namespace>:v<version>:<requester id|anon>:<~search|all>:<sort>:<order>``.
    The version is read before the query runs, so a listing computed before a
    write lands under a key nobody reads after the write bumps it. The search
    segment is percent-encoded so a ``:`` typed by a user can never shift the
    other segments, and carries a ``~`` marker so searching for the word
    "all" cannot alias the unfiltered listing.

    >>> build_cache_key("stores", version=3, requester_id=7, search=" Pizza ", sort_by="rating", order="DESC")
    'stores:v3:7:~pizza:rating:desc'
    """
    field, direction = normalize_sort(sort_by, order)
    term = normalize_search(search)
    who = str(int(requester_id)) if requester_id is not None else ANONYMOUS
    what = f"~{quote(term, safe='')}" if term else ALL
    return f"{namespace}:v{int(version)}:{who}:{what}:{field}:{direction}"


def namespace_prefix(namespace: str) -> str:
    return f"{namespace}:"


def cache_version(cache: AggregateCache, namespace: str) -> int | None:
    """Current namespace version, or ``None`` when the backend is unavailable."""
    try:
        return cache.version(namespace)
    except DependencyError as exc:
        log.warning("cache.version degraded namespace=%s error=%s", namespace, exc)
        return None


def cache_get(cache: AggregateCache, key: str) -> list[dict[str, Any]] | None:
    """Probe the cache; a backend failure counts as a miss."""
    try:
        return cache.get(key)
    except DependencyError as exc:
        log.warning("cache.get degraded key=%s error=%s", key, exc)
        return None


def cache_put(cache: AggregateCache, key: str, value: list[dict[str, Any]], ttl_seconds: int) -> None:
    try:
        cache.put(key, value, ttl_seconds)
    except DependencyError as exc:
        log.warning("cache.put degraded key=%s error=%s", key, exc)


def invalidate_aggregates(cache: AggregateCache, namespace: str) -> int:
    """
    Drop every cached listing in ``namespace``.

    Called after any committed write to stores or ratings. The namespace
    version is bumped first so that listings still being computed from
    pre-write rows are stored under a retired key; the sweep then frees the
    old entries. Returns the number of keys removed, or ``0`` when the backend
    is unavailable; entries then age out through their TTL.
    """
    try:
        cache.bump_version(namespace)
    except DependencyError as exc:
        log.warning("cache.bump_version degraded namespace=%s error=%s", namespace, exc)
    prefix = namespace_prefix(namespace)
    try:
        removed = cache.invalidate_namespace(prefix)
    except DependencyError as exc:
        log.warning("cache.invalidate degraded prefix=%s error=%s", prefix, exc)
        return 0
    log.debug("cache.invalidated prefix=%s removed=%s", prefix, removed)
    return removed
