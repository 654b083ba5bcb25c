"""
StoreRate Backend — Store Registry Tests
=========================================

What:  Store creation, uniqueness, owner-scoped listing, update and the
       cascade of ratings on deletion.
"""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from storerate.exceptions import (
    DuplicateNameError,
    InsufficientRoleError,
    NotFoundError,
    NotOwnerError,
    ValidationError,
)
from storerate.models import Rating, Store, UserRole


class TestCreate:
    @pytest.mark.asyncio
    async def test_owner_creates_store_with_null_average(self, services, make_user):
        owner = await make_user(UserRole.STORE_OWNER)

        store = await services.stores.create(
            name="Cafe X", email="Hello@CafeX.com", address=" 5 Elm St ", owner=owner
        )

        assert store.owner_id == owner.id
        assert store.average_rating is None
        assert store.email == "hello@cafex.com"
        assert store.address == "5 Elm St"

    @pytest.mark.asyncio
    async def test_normal_user_cannot_create(self, services, make_user):
        user = await make_user()
        with pytest.raises(InsufficientRoleError):
            await services.stores.create(name="Nope", email=None, address=None, owner=user)

    @pytest.mark.asyncio
    async def test_admin_can_create(self, services, make_user):
        admin = await make_user(UserRole.SYSTEM_ADMINISTRATOR)
        store = await services.stores.create(name="HQ", email=None, address=None, owner=admin)
        assert store.owner_id == admin.id

    @pytest.mark.asyncio
    async def test_duplicate_name_rejected(self, services, make_user, make_store):
        owner = await make_user(UserRole.STORE_OWNER)
        other = await make_user(UserRole.STORE_OWNER)
        await make_store(owner, name="Cafe X")

        with pytest.raises(DuplicateNameError):
            await make_store(other, name="Cafe X")

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, services, make_user):
        owner = await make_user(UserRole.STORE_OWNER)
        with pytest.raises(ValidationError):
            await services.stores.create(name="  ", email=None, address=None, owner=owner)


class TestListAndGet:
    @pytest.mark.asyncio
    async def test_listing_scoped_to_owner(self, services, make_user, make_store):
        owner_a = await make_user(UserRole.STORE_OWNER)
        owner_b = await make_user(UserRole.STORE_OWNER)
        await make_store(owner_a, name="Alpha")
        await make_store(owner_a, name="Beta")
        await make_store(owner_b, name="Gamma")

        everything = await services.stores.list()
        only_a = await services.stores.list(owner_only=owner_a)

        assert [s.name for s in everything] == ["Alpha", "Beta", "Gamma"]
        assert [s.name for s in only_a] == ["Alpha", "Beta"]

    @pytest.mark.asyncio
    async def test_get_missing_store(self, services):
        with pytest.raises(NotFoundError):
            await services.stores.get(uuid4())


class TestUpdate:
    @pytest.mark.asyncio
    async def test_other_owner_forbidden_admin_allowed(self, services, make_user, make_store):
        owner = await make_user(UserRole.STORE_OWNER)
        intruder = await make_user(UserRole.STORE_OWNER)
        admin = await make_user(UserRole.SYSTEM_ADMINISTRATOR)
        store = await make_store(owner, name="Cafe X")

        with pytest.raises(NotOwnerError):
            await services.stores.update(store.id, {"name": "Hijacked"}, intruder)
        assert store.name == "Cafe X"

        updated = await services.stores.update(store.id, {"name": "Cafe Y"}, admin)
        assert updated.name == "Cafe Y"
        assert updated.owner_id == owner.id

    @pytest.mark.asyncio
    async def test_keeping_own_name_is_not_a_conflict(self, services, make_user, make_store):
        owner = await make_user(UserRole.STORE_OWNER)
        store = await make_store(owner, name="Cafe X")

        updated = await services.stores.update(
            store.id, {"name": "Cafe X", "address": "New address"}, owner
        )
        assert updated.address == "New address"

    @pytest.mark.asyncio
    async def test_rename_to_taken_name_rejected(self, services, make_user, make_store):
        owner = await make_user(UserRole.STORE_OWNER)
        await make_store(owner, name="Alpha")
        beta = await make_store(owner, name="Beta")

        with pytest.raises(DuplicateNameError):
            await services.stores.update(beta.id, {"name": "Alpha"}, owner)

    @pytest.mark.asyncio
    async def test_email_can_be_cleared(self, services, make_user, make_store):
        owner = await make_user(UserRole.STORE_OWNER)
        store = await make_store(owner)
        assert store.email is not None

        await services.stores.update(store.id, {"email": None}, owner)
        assert store.email is None


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_removes_ratings(self, services, session, make_user, make_store):
        owner = await make_user(UserRole.STORE_OWNER)
        rater_a = await make_user()
        rater_b = await make_user()
        doomed = await make_store(owner, name="Doomed")
        survivor = await make_store(owner, name="Survivor")
        await services.ratings.create(rater_a, doomed.id, 5)
        await services.ratings.create(rater_b, doomed.id, 1)
        await services.ratings.create(rater_a, survivor.id, 3)

        await services.stores.delete(doomed.id, owner)

        assert await session.get(Store, doomed.id) is None
        count_doomed = await session.scalar(
            select(func.count()).select_from(Rating).where(Rating.store_id == doomed.id)
        )
        count_survivor = await session.scalar(
            select(func.count()).select_from(Rating).where(Rating.store_id == survivor.id)
        )
        assert count_doomed == 0
        assert count_survivor == 1

    @pytest.mark.asyncio
    async def test_non_owner_cannot_delete(self, services, make_user, make_store):
        owner = await make_user(UserRole.STORE_OWNER)
        user = await make_user()
        store = await make_store(owner)

        with pytest.raises(NotOwnerError):
            await services.stores.delete(store.id, user)
