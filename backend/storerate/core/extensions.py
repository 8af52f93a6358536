"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import logging
from typing import Any

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

log = logging.getLogger(__name__)

# Global naming convention for all constraints.
# Composite unique constraints spell out every column so that the rating
# pair constraint is named ``uq_ratings_user_id_store_id``.
convention = {
    "ix": "ix_%(table_name)s_%(column_0_N_name)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
redis_client: redis.Redis | None = None

AGGREGATE_CACHE_KEY = "aggregate_cache"
RATING_BROADCASTER_KEY = "rating_broadcaster"
MAILER_KEY = "mailer"


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, JWT and the side-channel clients.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`storerate.models` package to ensure SQLAlchemy metadata is ready
        for migrations.

    Notes
    -----
    Redis is optional. When ``REDIS_URL`` is unset the aggregate cache and the
    rating broadcaster fall back to in-process implementations. An unreachable
    Redis at boot is logged at ``WARNING`` and does not prevent startup; the
    Redis-backed adapters degrade per call instead.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from storerate import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)

    _init_redis(app)
    _init_side_channels(app)


def _init_redis(app: Flask) -> None:
    global redis_client
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        redis_client = None
        app.extensions.pop("redis_client", None)
        return

    redis_client = redis.Redis.from_url(
        redis_url,
        socket_connect_timeout=2,
        socket_timeout=2,
    )
    try:
        redis_client.ping()
    except RedisError as exc:
        log.warning("redis.unavailable url=%s error=%s", redis_url, exc)
    app.extensions["redis_client"] = redis_client


def _init_side_channels(app: Flask) -> None:
    from storerate.services._shared.ports.aggregate_cache import InMemoryAggregateCache
    from storerate.services._shared.ports.notifications import (
        InMemoryRatingBroadcaster,
        NullMailer,
    )

    client = app.extensions.get("redis_client")
    if client is not None:
        from storerate.infra.redis.redis_aggregate_cache import RedisAggregateCache
        from storerate.infra.redis.redis_rating_broadcaster import RedisRatingBroadcaster

        app.extensions[AGGREGATE_CACHE_KEY] = RedisAggregateCache(client)
        app.extensions[RATING_BROADCASTER_KEY] = RedisRatingBroadcaster(
            client, channel=app.config.get("RATINGS_CHANNEL", "ratings")
        )
    else:
        app.extensions[AGGREGATE_CACHE_KEY] = InMemoryAggregateCache()
        app.extensions[RATING_BROADCASTER_KEY] = InMemoryRatingBroadcaster()

    if app.config.get("SMTP_HOST"):
        from storerate.infra.mail.smtp_mailer import SMTPMailer

        app.extensions[MAILER_KEY] = SMTPMailer(
            host=app.config["SMTP_HOST"],
            port=int(app.config.get("SMTP_PORT", 587)),
            username=app.config.get("SMTP_USER"),
            password=app.config.get("SMTP_PASSWORD"),
            use_tls=bool(app.config.get("SMTP_USE_TLS", True)),
            sender=app.config["EMAIL_FROM"],
        )
    else:
        app.extensions[MAILER_KEY] = NullMailer()


def _extension(key: str) -> Any:
    try:
        return current_app.extensions[key]
    except KeyError as exc:
        raise RuntimeError(f"{key} is not initialized. Call init_app() first.") from exc


def get_aggregate_cache() -> Any:
    """Return the aggregate cache bound to the current application."""
    return _extension(AGGREGATE_CACHE_KEY)


def get_rating_broadcaster() -> Any:
    """Return the rating broadcaster bound to the current application."""
    return _extension(RATING_BROADCASTER_KEY)


def get_mailer() -> Any:
    """Return the outbound mailer bound to the current application."""
    return _extension(MAILER_KEY)
