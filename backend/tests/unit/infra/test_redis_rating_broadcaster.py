"""Rating-change events published on Redis Pub/Sub."""

from __future__ import annotations

import json

import fakeredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from storerate.infra.redis.redis_rating_broadcaster import RedisRatingBroadcaster
from storerate.services._shared.errors import DependencyError
from storerate.services._shared.ports import RatingChangedEvent


@pytest.fixture
def fake_redis():
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


def _next_message(pubsub, attempts: int = 10):
    for _ in range(attempts):
        message = pubsub.get_message(ignore_subscribe_messages=True, timeout=0.1)
        if message is not None:
            return message
    return None


def test_broadcast_publishes_json_event(fake_redis):
    pubsub = fake_redis.pubsub()
    pubsub.subscribe("ratings")
    broadcaster = RedisRatingBroadcaster(r=fake_redis, channel="ratings")

    broadcaster.broadcast(RatingChangedEvent(store_id=7, value=5, user_id=3))

    message = _next_message(pubsub)
    assert message is not None
    assert json.loads(message["data"]) == {
        "store_id": 7,
        "value": 5,
        "user_id": 3,
        "event": "new_rating",
    }


def test_broadcast_without_subscribers_is_not_an_error(fake_redis):
    RedisRatingBroadcaster(r=fake_redis).broadcast(RatingChangedEvent(store_id=1, value=1, user_id=1))


def test_publish_failure_is_a_dependency_error():
    class DownRedis:
        def publish(self, *args, **kwargs):
            raise RedisConnectionError("connection refused")

    broadcaster = RedisRatingBroadcaster(r=DownRedis())
    with pytest.raises(DependencyError):
        broadcaster.broadcast(RatingChangedEvent(store_id=1, value=3, user_id=2))
