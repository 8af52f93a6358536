"""
RatingService
=============

One-rating-per-(user, store) upsert, post-commit side effects, and the
rating listings and statistics built on the ratings relation.
"""

from __future__ import annotations

from markupsafe import escape
from sqlalchemy.exc import IntegrityError

from storerate.models.base import utcnow
from storerate.models.rating import (
    COMMENT_MAX_LEN,
    RATING_MAX,
    RATING_MIN,
    UQ_RATINGS_USER_STORE,
    Rating,
)
from storerate.models.user import Role
from storerate.services._shared.base import BaseService, ServiceContext
from storerate.services._shared.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    violates,
)
from storerate.services._shared.ports import (
    AggregateCache,
    Mailer,
    RatingBroadcaster,
    RatingChangedEvent,
)
from storerate.services.ratings.dto import (
    OwnerRatingOut,
    RatingAckOut,
    RatingSubmitIn,
    StatsOut,
    UserRatingOut,
)
from storerate.services.stores.cache import invalidate_aggregates
from storerate.services.stores.service import DEFAULT_NAMESPACE

_PAIR_COLUMNS = ("ratings.user_id", "ratings.store_id")


def validate_rating(value, comment: str | None) -> None:
    """
    :raises ValidationError: Value outside 1-5 (or not an integer), or comment too long.
    """
    if isinstance(value, bool) or not isinstance(value, int) or not RATING_MIN <= value <= RATING_MAX:
        raise ValidationError(f"Rating must be {RATING_MIN}-{RATING_MAX}")
    if comment is not None and len(comment) > COMMENT_MAX_LEN:
        raise ValidationError(f"Comment too long (max {COMMENT_MAX_LEN} chars)")


def _new_rating_email(*, store_name: str, value: int, comment: str | None, user_name: str | None):
    subject = f"New rating received for {store_name}"
    lines = [
        f'Your store "{store_name}" just received a new rating.',
        "",
        f"Rating: {value} / 5",
    ]
    if user_name:
        lines.append(f"From: {user_name}")
    lines.append(f"Comment: {comment}" if comment else "No written comment provided.")
    lines += ["", "This is an automated notification from the Store Rating Platform."]
    html = (
        f"<h2>New rating received for <strong>{escape(store_name)}</strong></h2>"
        f"<p><strong>Rating:</strong> {int(value)} / 5</p>"
        + (f"<p><strong>From:</strong> {escape(user_name)}</p>" if user_name else "")
        + f"<p><strong>Comment:</strong> {escape(comment or 'No written comment provided.')}</p>"
    )
    return subject, "\n".join(lines), html


class RatingService(BaseService):
    """
    Application service for the `Rating` aggregate.

    ``submit_rating`` commits first, then (in order) invalidates cached store
    listings, broadcasts a change event and emails the store owner. The three
    side effects are best-effort: failures are logged and never undo or fail
    the submission.
    """

    def __init__(
        self,
        *,
        cache: AggregateCache,
        broadcaster: RatingBroadcaster,
        mailer: Mailer,
        namespace: str = DEFAULT_NAMESPACE,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.cache = cache
        self.broadcaster = broadcaster
        self.mailer = mailer
        self.namespace = namespace

    # --------------------------------------------------------------------- #
    # Submission (upsert)
    # --------------------------------------------------------------------- #

    def submit_rating(self, dto: RatingSubmitIn) -> RatingAckOut:
        """
        Insert or overwrite the caller's rating of a store.

        The existing row for the pair is updated in place. When none exists an
        insert is attempted inside a savepoint; if it trips the pair's unique
        constraint, another request inserted first and the row it created is
        updated instead.

        :raises ValidationError: Out-of-range value or oversize comment.
        :raises AuthorizationError: Rating on behalf of someone else without admin.
        :raises NotFoundError: Unknown user or store.
        """
        validate_rating(dto.value, dto.comment)
        self.ensure_owner_or_admin(dto.user_id)

        with self.rw_uow() as uow:
            user = uow.users.get(dto.user_id)
            if user is None:
                raise NotFoundError("User", dto.user_id)
            store = uow.stores.get(dto.store_id)
            if store is None:
                raise NotFoundError("Store", dto.store_id)

            rating, created = self._upsert(uow, dto)
            ack = RatingAckOut(
                id=rating.id,
                user_id=rating.user_id,
                store_id=rating.store_id,
                value=rating.value,
                comment=rating.comment,
                rated_at=rating.rated_at,
                created=created,
            )
            recipient = (store.owner.email if store.owner is not None else None) or store.email
            store_name = store.name
            user_name = user.name

        self.log.info(
            "rating.submitted",
            extra={"user_id": dto.user_id, "store_id": dto.store_id},
        )
        self._after_commit(ack, recipient=recipient, store_name=store_name, user_name=user_name)
        return ack

    def _upsert(self, uow, dto: RatingSubmitIn) -> tuple[Rating, bool]:
        fields = {"value": dto.value, "comment": dto.comment, "rated_at": utcnow()}

        existing = uow.ratings.get_for_pair(dto.user_id, dto.store_id, for_update=True)
        if existing is not None:
            uow.ratings.update(existing, **fields)
            return existing, False

        try:
            with uow.session.begin_nested():
                rating = uow.ratings.add(
                    Rating(user_id=dto.user_id, store_id=dto.store_id, **fields)
                )
            return rating, True
        except IntegrityError as exc:
            if not violates(exc, UQ_RATINGS_USER_STORE, columns=_PAIR_COLUMNS):
                raise
            self.log.info(
                "rating.concurrent_insert retrying as update",
                extra={"user_id": dto.user_id, "store_id": dto.store_id},
            )

        existing = uow.ratings.get_for_pair(dto.user_id, dto.store_id, for_update=True)
        if existing is None:
            # The competing row vanished between the conflict and the re-read.
            raise RuntimeError("Rating row disappeared after unique-constraint conflict.")
        uow.ratings.update(existing, **fields)
        return existing, False

    def _after_commit(
        self,
        ack: RatingAckOut,
        *,
        recipient: str | None,
        store_name: str,
        user_name: str | None,
    ) -> None:
        invalidate_aggregates(self.cache, self.namespace)

        event = RatingChangedEvent(store_id=ack.store_id, value=ack.value, user_id=ack.user_id)
        try:
            self.broadcaster.broadcast(event)
        except DependencyError as exc:
            self.log.warning("rating.broadcast degraded store_id=%s error=%s", ack.store_id, exc)

        if not recipient:
            return
        subject, text, html = _new_rating_email(
            store_name=store_name, value=ack.value, comment=ack.comment, user_name=user_name
        )
        try:
            self.mailer.send(to=recipient, subject=subject, text=text, html=html)
        except (DependencyError, OSError) as exc:
            self.log.warning("rating.email degraded to=%s error=%s", recipient, exc)

    # --------------------------------------------------------------------- #
    # Listings
    # --------------------------------------------------------------------- #

    def list_user_ratings(self, user_id: int) -> list[UserRatingOut]:
        """A user's ratings with store name and address, newest first (self or admin)."""
        self.ensure_owner_or_admin(user_id)
        with self.ro_uow() as uow:
            rows = uow.ratings.list_by_user(user_id)
        return [UserRatingOut(**row) for row in rows]

    def list_owner_ratings(self, owner_id: int) -> list[OwnerRatingOut]:
        """Ratings on every store owned by ``owner_id``, newest first (that owner or admin)."""
        self.ensure_owner_or_admin(owner_id)
        with self.ro_uow() as uow:
            rows = uow.ratings.list_for_owner(owner_id)
        return [OwnerRatingOut(**row) for row in rows]

    def stats(self) -> StatsOut:
        """Row counts for the dashboard (admin or store owner)."""
        self.ensure_role(Role.ADMIN, Role.STORE_OWNER)
        with self.ro_uow() as uow:
            return StatsOut(
                total_users=uow.users.count(),
                total_stores=uow.stores.count(),
                total_ratings=uow.ratings.count(),
            )
