"""User and Store model validators and constraints."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from storerate.models.store import Store
from storerate.models.user import Role, User
from tests.factories.store import StoreFactory
from tests.factories.user import UserFactory


class TestUserModel:
    def test_email_is_normalized(self, session):
        user = UserFactory(email="  Mixed.Case@Example.COM ")

        assert user.email == "mixed.case@example.com"

    @pytest.mark.parametrize("email", ["", "no-at-sign", "user@nodot"])
    def test_malformed_email_rejected(self, email):
        with pytest.raises(ValueError):
            User(name="Valid Name", email=email, role=Role.USER)

    @pytest.mark.parametrize("name", ["Abcd", "x" * 61])
    def test_name_length_enforced(self, name):
        with pytest.raises(ValueError, match="Name must be 5-60 characters"):
            User(name=name, email="ok@example.com")

    def test_address_length_enforced(self):
        with pytest.raises(ValueError, match="Address too long"):
            User(name="Valid Name", email="ok@example.com", address="x" * 401)

    def test_password_is_write_only_and_hashed(self, session):
        user = UserFactory(password="Secret@123")

        assert user.password_hash != "Secret@123"
        assert user.verify_password("Secret@123")
        assert not user.verify_password("secret@123")
        with pytest.raises(AttributeError):
            _ = user.password

    def test_role_coerced_from_string(self):
        user = User(name="Valid Name", email="ok@example.com", role="store_owner")

        assert user.role is Role.STORE_OWNER

    def test_duplicate_email_rejected_by_database(self, session):
        UserFactory(email="dup@example.com")

        with pytest.raises(IntegrityError), session.begin_nested():
            clash = User(name="Another Name", email="DUP@example.com", role=Role.USER)
            clash.password = "Secret@123"
            session.add(clash)
            session.flush()


class TestStoreModel:
    def test_required_fields_are_stripped(self, session):
        store = StoreFactory(name="  Pizza Hut ", address=" 1 Main St ")

        assert store.name == "Pizza Hut"
        assert store.address == "1 Main St"

    @pytest.mark.parametrize("field", ["name", "address"])
    def test_blank_required_field_rejected(self, field):
        kwargs = {"name": "Pizza Hut", "address": "1 Main St", field: "   "}
        with pytest.raises(ValueError, match="is required"):
            Store(**kwargs)

    def test_blank_email_becomes_none(self):
        assert Store(name="Pizza Hut", address="1 Main St", email="  ").email is None

    def test_owner_relationship(self, session):
        store = StoreFactory()

        assert store.owner is not None
        assert store in store.owner.stores
        assert store.owner.role is Role.STORE_OWNER
