"""Factory Boy definitions for stores and ratings."""

from __future__ import annotations

import factory

from storerate.models.rating import Rating
from storerate.models.store import Store
from tests.factories import BaseFactory
from tests.factories.user import OwnerFactory, UserFactory


class StoreFactory(BaseFactory):
    class Meta:
        model = Store

    id = None
    name = factory.Sequence(lambda n: f"Store {n:04d}")
    address = factory.Sequence(lambda n: f"{n} Market Street")
    email = factory.Sequence(lambda n: f"store{n}@example.com")
    owner = factory.SubFactory(OwnerFactory)
    latitude = None
    longitude = None


class RatingFactory(BaseFactory):
    class Meta:
        model = Rating

    id = None
    user = factory.SubFactory(UserFactory)
    store = factory.SubFactory(StoreFactory)
    value = 4
    comment = None
