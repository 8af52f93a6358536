"""Idempotent database seed helpers for local development environments."""

from __future__ import annotations

import logging
from typing import Any, TypeVar, cast

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import select
from sqlalchemy.orm import Session

from storerate.models.rating import Rating
from storerate.models.store import Store
from storerate.models.user import Role, User

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

USER_FIXTURES: list[dict[str, Any]] = [
    {
        "name": "System Administrator User",
        "email": "admin@store.com",
        "password": "Admin@123",
        "address": "123 Admin St, Central City",
        "role": Role.ADMIN,
    },
    {
        "name": "Standard Registered User",
        "email": "user@store.com",
        "password": "User@123",
        "address": "456 User Ave, Downtown",
        "role": Role.USER,
    },
    {
        "name": "Store Owner Representative",
        "email": "owner@store.com",
        "password": "Owner@123",
        "address": "789 Business Rd, Market",
        "role": Role.STORE_OWNER,
    },
]

STORE_FIXTURES: list[dict[str, Any]] = [
    {
        "name": "Pizza Hut",
        "email": "pizza@store.com",
        "address": "123 Food St",
        "owner_email": "owner@store.com",
        "latitude": 12.9716,
        "longitude": 77.5946,
    },
    {
        "name": "Burger King",
        "email": "burger@store.com",
        "address": "456 Fast Food Ave",
        "owner_email": "owner@store.com",
        "latitude": 12.9345,
        "longitude": 77.6101,
    },
    {
        "name": "Domino's Pizza",
        "email": "dominos@store.com",
        "address": "789 Pizza Rd",
        "owner_email": "owner@store.com",
        "latitude": 12.9784,
        "longitude": 77.6408,
    },
]

RATING_FIXTURES: list[dict[str, Any]] = [
    {"user_email": "user@store.com", "store_email": "pizza@store.com", "value": 5},
    {"user_email": "user@store.com", "store_email": "burger@store.com", "value": 4},
    {"user_email": "user@store.com", "store_email": "dominos@store.com", "value": 5},
]


def _session(database: SQLAlchemy) -> Session:
    """Return the current SQLAlchemy session."""
    return cast(Session, database.session)


def _touch(summary: dict[str, dict[str, int]], table: str, created: bool) -> None:
    """Update summary counters for the given table."""
    entry = summary.setdefault(table, {"created": 0, "existing": 0})
    if created:
        entry["created"] += 1
    else:
        entry["existing"] += 1


def _get_or_create(
    session: Session,
    model: type[T],
    *,
    defaults: dict[str, Any] | None = None,
    **filters: Any,
) -> tuple[T, bool]:
    """Fetch ``model`` by ``filters`` or create it using ``defaults``."""
    instance = session.execute(select(model).filter_by(**filters)).scalar_one_or_none()
    if instance is not None:
        return instance, False
    params = dict(defaults or {})
    params.update(filters)
    instance = cast(T, model(**params))
    session.add(instance)
    return instance, True


def seed_users(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Create the sample admin, user and store-owner accounts."""
    if verbose:
        LOGGER.info("Seeding users...")
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}

    with session.begin():
        for fixture in USER_FIXTURES:
            email = str(fixture["email"]).strip().lower()
            user = session.execute(select(User).filter_by(email=email)).scalar_one_or_none()
            created = user is None
            if user is None:
                user = User(
                    name=fixture["name"],
                    email=email,
                    address=fixture["address"],
                    role=fixture["role"],
                )
                user.password = fixture["password"]
                session.add(user)
            _touch(summary, "users", created)
    return summary


def seed_stores_and_ratings(
    database: SQLAlchemy, *, verbose: bool = False
) -> dict[str, dict[str, int]]:
    """Create the sample stores (owned by the store owner) and their ratings."""
    if verbose:
        LOGGER.info("Seeding stores and ratings...")
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}

    with session.begin():
        users = {u.email: u for u in session.execute(select(User)).scalars()}
        stores: dict[str, Store] = {}
        for fixture in STORE_FIXTURES:
            owner = users.get(fixture["owner_email"])
            store, created = _get_or_create(
                session,
                Store,
                defaults={
                    "name": fixture["name"],
                    "address": fixture["address"],
                    "owner_id": owner.id if owner else None,
                    "latitude": fixture["latitude"],
                    "longitude": fixture["longitude"],
                },
                email=fixture["email"],
            )
            session.flush()
            stores[fixture["email"]] = store
            _touch(summary, "stores", created)

        for fixture in RATING_FIXTURES:
            user = users.get(fixture["user_email"])
            store = stores.get(fixture["store_email"])
            if user is None or store is None:
                raise RuntimeError(f"Rating fixture references unknown rows: {fixture}")
            _, created = _get_or_create(
                session,
                Rating,
                defaults={"value": fixture["value"]},
                user_id=user.id,
                store_id=store.id,
            )
            _touch(summary, "ratings", created)
    return summary


def run_all(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Run all seeders in foreign-key order."""
    if verbose:
        LOGGER.info("Running full seed pipeline...")
    combined: dict[str, dict[str, int]] = {}
    for func in (seed_users, seed_stores_and_ratings):
        result = func(database, verbose=verbose)
        for table, counters in result.items():
            entry = combined.setdefault(table, {"created": 0, "existing": 0})
            entry["created"] += counters.get("created", 0)
            entry["existing"] += counters.get("existing", 0)
    return combined


__all__ = ["seed_users", "seed_stores_and_ratings", "run_all"]
