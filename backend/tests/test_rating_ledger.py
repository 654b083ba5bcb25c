"""
StoreRate Backend — Rating Ledger & Aggregator Tests
=====================================================

What:  Rating create/update/delete and the average kept on the store.
How:   Real in-memory database; failures of collaborators are injected with
       unittest.mock so rollback behaviour can be observed.

What we test:
    ✅ The Cafe X walk-through: 3.00 → 3.50 → 5.00 → null
    ✅ One rating per (user, store), also when the pre-check is bypassed
    ✅ Value range, unknown stores, author-only mutation
    ✅ A failed recomputation rolls the rating write back
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from storerate.exceptions import (
    AggregationError,
    DuplicateRatingError,
    NotFoundError,
    NotOwnerError,
    StoreNotFoundError,
    ValidationError,
)
from storerate.models import Rating, Store, UserRole
from storerate.services.rating_aggregator import compute_average


class TestComputeAverage:
    def test_empty_is_none(self):
        assert compute_average([]) is None

    def test_two_decimal_places(self):
        assert compute_average([4, 2]) == Decimal("3.00")
        assert compute_average([5, 4, 4]) == Decimal("4.33")

    def test_half_rounds_up(self):
        # 4.125 → 4.13
        assert compute_average([5, 5, 5, 4, 4, 4, 4, 2]) == Decimal("4.13")
        assert compute_average([1, 2]) == Decimal("1.50")


class TestCafeXScenario:
    @pytest.mark.asyncio
    async def test_average_follows_every_change(self, services, session, make_user, make_store):
        owner = await make_user(UserRole.STORE_OWNER)
        user_b = await make_user()
        user_c = await make_user()
        store = await make_store(owner, name="Cafe X")

        rating_b = await services.ratings.create(user_b, store.id, 4)
        rating_c = await services.ratings.create(user_c, store.id, 2)
        assert store.average_rating == Decimal("3.00")

        await services.ratings.update(rating_b.id, {"value": 5}, user_b)
        assert store.average_rating == Decimal("3.50")

        await services.ratings.delete(rating_c.id, user_c)
        assert store.average_rating == Decimal("5.00")

        await services.ratings.delete(rating_b.id, user_b)
        assert store.average_rating is None

        await session.commit()
        reloaded = await session.get(Store, store.id, populate_existing=True)
        assert reloaded.average_rating is None


class TestCreate:
    @pytest.mark.asyncio
    async def test_duplicate_rejected_and_average_unchanged(self, services, make_user, make_store):
        owner = await make_user(UserRole.STORE_OWNER)
        user = await make_user()
        store = await make_store(owner)
        await services.ratings.create(user, store.id, 4)

        with pytest.raises(DuplicateRatingError) as exc_info:
            await services.ratings.create(user, store.id, 1)

        assert "already rated" in exc_info.value.message
        assert store.average_rating == Decimal("4.00")

    @pytest.mark.asyncio
    async def test_unique_constraint_backs_the_duplicate_check(
        self, services, session, make_user, make_store
    ):
        owner = await make_user(UserRole.STORE_OWNER)
        user = await make_user()
        store = await make_store(owner)
        await services.ratings.create(user, store.id, 4)
        await session.commit()

        # Simulate a concurrent writer that passed the pre-check too
        with patch.object(services.ratings._ratings, "find_by_pair", AsyncMock(return_value=None)):
            with pytest.raises(DuplicateRatingError):
                await services.ratings.create(user, store.id, 2)
        await session.rollback()

        count = await session.scalar(
            select(func.count()).select_from(Rating).where(Rating.store_id == store.id)
        )
        reloaded = await session.get(Store, store.id, populate_existing=True)
        assert count == 1
        assert reloaded.average_rating == Decimal("4.00")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [0, 6, -1])
    async def test_value_out_of_range(self, services, make_user, make_store, value):
        owner = await make_user(UserRole.STORE_OWNER)
        user = await make_user()
        store = await make_store(owner)

        with pytest.raises(ValidationError) as exc_info:
            await services.ratings.create(user, store.id, value)
        assert exc_info.value.field == "value"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [True, 3.5, "4"])
    async def test_value_must_be_an_integer(self, services, make_user, make_store, value):
        owner = await make_user(UserRole.STORE_OWNER)
        user = await make_user()
        store = await make_store(owner)

        with pytest.raises(ValidationError):
            await services.ratings.create(user, store.id, value)

    @pytest.mark.asyncio
    async def test_unknown_store(self, services, make_user):
        user = await make_user()
        with pytest.raises(StoreNotFoundError):
            await services.ratings.create(user, uuid4(), 3)

    @pytest.mark.asyncio
    async def test_owner_may_rate_own_store(self, services, make_user, make_store):
        owner = await make_user(UserRole.STORE_OWNER)
        store = await make_store(owner)
        rating = await services.ratings.create(owner, store.id, 5, comment="  biased  ")
        assert rating.comment == "biased"
        assert store.average_rating == Decimal("5.00")


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_missing_value_keeps_current_and_comment_can_be_cleared(
        self, services, make_user, make_store
    ):
        owner = await make_user(UserRole.STORE_OWNER)
        user = await make_user()
        store = await make_store(owner)
        rating = await services.ratings.create(user, store.id, 3, comment="ok")

        updated = await services.ratings.update(rating.id, {"comment": None}, user)
        assert updated.value == 3
        assert updated.comment is None

        updated = await services.ratings.update(rating.id, {"value": None, "comment": "better"}, user)
        assert updated.value == 3
        assert updated.comment == "better"

    @pytest.mark.asyncio
    async def test_only_author_mutates(self, services, make_user, make_store):
        owner = await make_user(UserRole.STORE_OWNER)
        author = await make_user()
        other = await make_user()
        store = await make_store(owner)
        rating = await services.ratings.create(author, store.id, 3)

        with pytest.raises(NotOwnerError):
            await services.ratings.update(rating.id, {"value": 1}, other)
        with pytest.raises(NotOwnerError):
            await services.ratings.delete(rating.id, owner)
        assert store.average_rating == Decimal("3.00")

    @pytest.mark.asyncio
    async def test_invalid_update_value(self, services, make_user, make_store):
        owner = await make_user(UserRole.STORE_OWNER)
        user = await make_user()
        store = await make_store(owner)
        rating = await services.ratings.create(user, store.id, 3)

        with pytest.raises(ValidationError):
            await services.ratings.update(rating.id, {"value": 9}, user)
        assert rating.value == 3

    @pytest.mark.asyncio
    async def test_missing_rating(self, services, make_user):
        user = await make_user()
        with pytest.raises(NotFoundError):
            await services.ratings.update(uuid4(), {"value": 2}, user)
        with pytest.raises(NotFoundError):
            await services.ratings.delete(uuid4(), user)


class TestAggregationFailure:
    @pytest.mark.asyncio
    async def test_failed_recompute_rolls_back_the_rating(
        self, services, session, make_user, make_store
    ):
        owner = await make_user(UserRole.STORE_OWNER)
        user = await make_user()
        store = await make_store(owner)
        await session.commit()

        failing = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("disk I/O error")))
        with patch.object(services.aggregator._ratings, "values_for_store", failing):
            with pytest.raises(AggregationError):
                await services.ratings.create(user, store.id, 4)
        await session.rollback()

        count = await session.scalar(select(func.count()).select_from(Rating))
        reloaded = await session.get(Store, store.id, populate_existing=True)
        assert count == 0
        assert reloaded.average_rating is None

    @pytest.mark.asyncio
    async def test_deleted_store_reports_not_found(self, services, make_user):
        with pytest.raises(StoreNotFoundError):
            await services.aggregator.recompute(uuid4())


class TestListing:
    @pytest.mark.asyncio
    async def test_store_ratings_newest_first(self, services, session, make_user, make_store):
        owner = await make_user(UserRole.STORE_OWNER)
        store = await make_store(owner)
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        for offset, value in enumerate([2, 5, 3]):
            rater = await make_user()
            session.add(
                Rating(
                    rater_id=rater.id,
                    store_id=store.id,
                    value=value,
                    created_at=base + timedelta(days=offset),
                )
            )
        await session.flush()

        ratings = await services.ratings.list_by_store(store.id)
        assert [r.value for r in ratings] == [3, 5, 2]

    @pytest.mark.asyncio
    async def test_listing_unknown_store(self, services):
        with pytest.raises(StoreNotFoundError):
            await services.ratings.list_by_store(uuid4())

    @pytest.mark.asyncio
    async def test_list_all_spans_stores(self, services, make_user, make_store):
        owner = await make_user(UserRole.STORE_OWNER)
        user = await make_user()
        first = await make_store(owner)
        second = await make_store(owner)
        await services.ratings.create(user, first.id, 1)
        await services.ratings.create(user, second.id, 5)

        ratings = await services.ratings.list_all()
        assert {r.store_id for r in ratings} == {first.id, second.id}

    @pytest.mark.asyncio
    async def test_reads_carry_rater_and_store(self, services, session, make_user, make_store):
        owner = await make_user(UserRole.STORE_OWNER)
        rater = await make_user(name="Rita")
        store = await make_store(owner, name="Cafe X")
        created = await services.ratings.create(rater, store.id, 4)
        assert created.rater is rater
        assert created.store is store
        await session.commit()
        session.expunge_all()

        [listed] = await services.ratings.list_by_store(store.id)
        fetched = await services.ratings.get_by_id(created.id)

        assert listed.rater.name == "Rita"
        assert listed.store.name == "Cafe X"
        assert fetched.store.id == store.id
