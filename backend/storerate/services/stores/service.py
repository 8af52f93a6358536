"""
StoreService
============

Store listings (read-through cached aggregates) and store administration.
"""

from __future__ import annotations

from storerate.models.store import Store
from storerate.models.user import Role
from storerate.services._shared.base import BaseService, ServiceContext
from storerate.services._shared.errors import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from storerate.services._shared.ports import AggregateCache
from storerate.services.stores.cache import (
    build_cache_key,
    cache_get,
    cache_put,
    cache_version,
    invalidate_aggregates,
    normalize_sort,
)
from storerate.services.stores.dto import (
    StoreAggregateOut,
    StoreCreateIn,
    StoreOut,
    StoreQueryIn,
    StoreUpdateIn,
)

DEFAULT_TTL_SECONDS = 60
DEFAULT_NAMESPACE = "stores"

# Column widths on ``stores``.
NAME_MAX_LENGTH = 255
ADDRESS_MAX_LENGTH = 400
EMAIL_MAX_LENGTH = 254


def _check_lengths(*, name: str | None, address: str | None, email: str | None) -> None:
    if len((name or "").strip()) > NAME_MAX_LENGTH:
        raise ValidationError(f"Name must be at most {NAME_MAX_LENGTH} characters")
    if len((address or "").strip()) > ADDRESS_MAX_LENGTH:
        raise ValidationError(f"Address must be at most {ADDRESS_MAX_LENGTH} characters")
    if len((email or "").strip()) > EMAIL_MAX_LENGTH:
        raise ValidationError(f"Email must be at most {EMAIL_MAX_LENGTH} characters")


def _store_out(store: Store) -> StoreOut:
    return StoreOut(
        id=store.id,
        name=store.name,
        address=store.address,
        email=store.email,
        owner_id=store.owner_id,
        latitude=store.latitude,
        longitude=store.longitude,
    )


class StoreService(BaseService):
    """
    Application service for the `Store` aggregate.

    Listing protocol
    ----------------
    1. Read the namespace version and build the key from (version, requester,
       normalized search, sort, order). Without a version the cache is down
       and the query is served directly.
    2. Probe the cache; a hit is returned as-is.
    3. On a miss (or cache failure) run the aggregation query, round the
       means for display and ``put`` the projection with the TTL.

    Every committed store write drops the whole namespace afterwards.
    """

    def __init__(
        self,
        *,
        cache: AggregateCache,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        namespace: str = DEFAULT_NAMESPACE,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.namespace = namespace

    # --------------------------------------------------------------------- #
    # Listing
    # --------------------------------------------------------------------- #

    def _requester(self, dto: StoreQueryIn) -> int | None:
        if dto.user_id is None or dto.user_id == self.ctx.actor_id:
            return self.ctx.actor_id
        if self.ctx.actor_role != Role.ADMIN:
            raise AuthorizationError()
        return dto.user_id

    def list_stores(self, dto: StoreQueryIn) -> list[StoreAggregateOut]:
        """
        Return store aggregates, consulting the cache first.

        :raises AuthorizationError: When ``user_id`` names someone else and the
            caller is not an admin.
        """
        requester_id = self._requester(dto)
        sort_by, order = normalize_sort(dto.sort_by, dto.order)
        version = cache_version(self.cache, self.namespace)
        if version is None:
            return self.aggregate(
                search=dto.search, sort_by=sort_by, order=order, requester_id=requester_id
            )

        key = build_cache_key(
            self.namespace,
            version=version,
            requester_id=requester_id,
            search=dto.search,
            sort_by=sort_by,
            order=order,
        )

        cached = cache_get(self.cache, key)
        if cached is not None:
            self.log.debug("stores.cache_hit key=%s", key)
            return [StoreAggregateOut.from_row(row) for row in cached]

        items = self.aggregate(
            search=dto.search, sort_by=sort_by, order=order, requester_id=requester_id
        )
        cache_put(self.cache, key, [item.to_dict() for item in items], self.ttl_seconds)
        return items

    def aggregate(
        self,
        *,
        search: str | None,
        sort_by: str,
        order: str,
        requester_id: int | None,
    ) -> list[StoreAggregateOut]:
        """Run the aggregation query directly, bypassing the cache."""
        with self.ro_uow() as uow:
            rows = uow.stores.aggregate(
                search=search,
                sort_by=sort_by,
                descending=order == "desc",
                requester_id=requester_id,
            )
        return [StoreAggregateOut.from_row(row) for row in rows]

    # --------------------------------------------------------------------- #
    # Administration
    # --------------------------------------------------------------------- #

    def _ensure_owner_exists(self, uow, owner_id: int | None) -> None:
        if owner_id is not None and uow.users.get(owner_id) is None:
            raise NotFoundError("User", owner_id)

    def create_store(self, dto: StoreCreateIn) -> StoreOut:
        """
        Create a store (admin only) and invalidate cached listings.

        :raises ValidationError: When name or address is blank or too long.
        :raises NotFoundError: When ``owner_id`` names no user.
        """
        self.ensure_role(Role.ADMIN)
        if not (dto.name or "").strip() or not (dto.address or "").strip():
            raise ValidationError("Name and address required")
        _check_lengths(name=dto.name, address=dto.address, email=dto.email)

        with self.rw_uow() as uow:
            self._ensure_owner_exists(uow, dto.owner_id)
            store = uow.stores.add(
                Store(
                    name=dto.name,
                    address=dto.address,
                    email=dto.email,
                    owner_id=dto.owner_id,
                    latitude=dto.latitude,
                    longitude=dto.longitude,
                )
            )
            out = _store_out(store)

        invalidate_aggregates(self.cache, self.namespace)
        self.log.info("store.created id=%s owner_id=%s", out.id, out.owner_id)
        return out

    def update_store(self, store_id: int, dto: StoreUpdateIn) -> StoreOut:
        """
        Replace a store's name, address and email (admin only).

        :raises ValidationError: When name, address or email is blank or too long.
        :raises NotFoundError: When the store (or new owner) does not exist.
        """
        self.ensure_role(Role.ADMIN)
        if not all((v or "").strip() for v in (dto.name, dto.address, dto.email)):
            raise ValidationError("Name, address, and email are required")
        _check_lengths(name=dto.name, address=dto.address, email=dto.email)

        updates = {"name": dto.name, "address": dto.address, "email": dto.email}
        for optional in ("latitude", "longitude", "owner_id"):
            if optional in dto.provided:
                updates[optional] = getattr(dto, optional)

        with self.rw_uow() as uow:
            store = uow.stores.get(store_id)
            if store is None:
                raise NotFoundError("Store", store_id)
            if "owner_id" in updates:
                self._ensure_owner_exists(uow, updates["owner_id"])
            uow.stores.update(store, **updates)
            out = _store_out(store)

        invalidate_aggregates(self.cache, self.namespace)
        self.log.info("store.updated id=%s", store_id)
        return out
