from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Protocol

log = logging.getLogger(__name__)

NEW_RATING_EVENT = "new_rating"


@dataclass(frozen=True, slots=True)
class RatingChangedEvent:
    """
    Hint that a store's aggregate changed.

    Observers must re-fetch; the event is never the source of truth.

    :ivar store_id: Store that received the rating.
    :ivar value: Submitted rating value (1-5).
    :ivar user_id: Author of the rating.
    :ivar event: Event name relayed to observers.
    """

    store_id: int
    value: int
    user_id: int
    event: str = NEW_RATING_EVENT

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)


class RatingBroadcaster(Protocol):
    """Best-effort emit-to-all channel for rating-change events."""

    def broadcast(self, event: RatingChangedEvent) -> None: ...


class Mailer(Protocol):
    """Fire-and-forget outbound email sender."""

    def send(self, *, to: str, subject: str, text: str, html: str | None = None) -> None: ...


@dataclass
class InMemoryRatingBroadcaster(RatingBroadcaster):
    """Collects events in a list; used in tests and single-process development."""

    events: list[RatingChangedEvent] = field(default_factory=list)

    def broadcast(self, event: RatingChangedEvent) -> None:
        self.events.append(event)

    def clear(self) -> None:
        self.events.clear()


@dataclass
class NullMailer(Mailer):
    """Mailer used when no SMTP relay is configured; records and logs only."""

    outbox: list[dict[str, Any]] = field(default_factory=list)

    def send(self, *, to: str, subject: str, text: str, html: str | None = None) -> None:
        self.outbox.append({"to": to, "subject": subject, "text": text, "html": html})
        log.info("mail.disabled to=%s subject=%s", to, subject)

    def clear(self) -> None:
        self.outbox.clear()
