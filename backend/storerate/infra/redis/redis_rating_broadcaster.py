# comments in English; reST docstrings
from __future__ import annotations

import json
from dataclasses import dataclass

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from storerate.services._shared.errors import DependencyError
from storerate.services._shared.ports import RatingBroadcaster, RatingChangedEvent


@dataclass(slots=True)
class RedisRatingBroadcaster(RatingBroadcaster):
    """
    Publish rating-change events on a Redis Pub/Sub channel.

    A realtime gateway subscribes to the channel and relays each message to
    its connected observers. Publishing is fire-and-forget: zero subscribers
    is not an error.

    :param r: A Redis client (already configured).
    :param channel: Pub/Sub channel name.
    """

    r: redis.Redis
    channel: str = "ratings"

    def broadcast(self, event: RatingChangedEvent) -> None:
        message = json.dumps(event.to_payload(), separators=(",", ":"))
        try:
            self.r.publish(self.channel, message)
        except RedisError as exc:
            raise DependencyError(f"publish failed on {self.channel!r}") from exc
