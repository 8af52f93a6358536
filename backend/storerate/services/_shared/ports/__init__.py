"""
storerate.services._shared.ports
================================

Collection of *ports* (hexagonal interfaces) that keep the service layer
independent from infrastructure.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`, the abstraction for JWT creation and decoding.

- :mod:`aggregate_cache`:
    Defines :class:`~.AggregateCache` (get / put-with-ttl / namespace
    invalidation) and the process-local :class:`~.InMemoryAggregateCache`.

- :mod:`notifications`:
    Defines :class:`~.RatingBroadcaster` and :class:`~.Mailer` plus their
    in-memory and null implementations.

Concrete adapters (Redis, SMTP, Flask-JWT-Extended) live under
``storerate.infra``.
"""

from __future__ import annotations

from .aggregate_cache import AggregateCache, InMemoryAggregateCache
from .notifications import (
    NEW_RATING_EVENT,
    InMemoryRatingBroadcaster,
    Mailer,
    NullMailer,
    RatingBroadcaster,
    RatingChangedEvent,
)
from .token_provider import TokenProvider

__all__ = [
    "AggregateCache",
    "InMemoryAggregateCache",
    "InMemoryRatingBroadcaster",
    "Mailer",
    "NEW_RATING_EVENT",
    "NullMailer",
    "RatingBroadcaster",
    "RatingChangedEvent",
    "TokenProvider",
]
