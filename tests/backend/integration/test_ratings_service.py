"""
Service-level tests for the rating ledger: upsert semantics and aggregates.
"""
import asyncio

import pytest
from tortoise.exceptions import ValidationError as ModelValidationError

from store_rating.core.errors import NotFound, ValidationError
from store_rating.models import Rating
from store_rating.services.ratings import (
    RatingOutcome,
    StoreAggregate,
    compute_store_aggregate,
    compute_store_aggregates,
    delete_rating,
    get_user_ratings_for_stores,
    submit_rating,
)


pytestmark = pytest.mark.asyncio


async def test_first_submission_creates_then_updates(db, create_user, create_store):
    user, _ = await create_user()
    store = await create_store()

    outcome, row = await submit_rating(user.id, store.id, 3, "ok")
    assert outcome is RatingOutcome.CREATED
    assert row.rating == 3

    outcome, row = await submit_rating(user.id, store.id, 5, None)
    assert outcome is RatingOutcome.UPDATED
    assert row.rating == 5
    assert row.comment is None
    assert await Rating.filter(user_id=user.id, store_id=store.id).count() == 1


async def test_last_write_wins(db, create_user, create_store):
    user, _ = await create_user()
    store = await create_store()
    for value in (1, 4, 2):
        await submit_rating(user.id, store.id, value)
    assert (await Rating.get(user_id=user.id, store_id=store.id)).rating == 2


async def test_concurrent_submissions_leave_one_row(db, create_user, create_store):
    user, _ = await create_user()
    store = await create_store()

    results = await asyncio.gather(*(submit_rating(user.id, store.id, v) for v in (1, 2, 3, 4, 5)))

    outcomes = [outcome for outcome, _ in results]
    assert outcomes.count(RatingOutcome.CREATED) == 1
    assert await Rating.filter(user_id=user.id, store_id=store.id).count() == 1
    stored = (await Rating.get(user_id=user.id, store_id=store.id)).rating
    assert stored in {1, 2, 3, 4, 5}


async def test_submit_for_missing_store(db, create_user):
    user, _ = await create_user()
    with pytest.raises(NotFound) as exc_info:
        await submit_rating(user.id, 9999, 4)
    assert exc_info.value.code == "STORE_NOT_FOUND"
    assert await Rating.all().count() == 0


async def test_aggregate_of_unrated_store_is_zero(db, create_store):
    store = await create_store()
    assert await compute_store_aggregate(store.id) == StoreAggregate(average=0.0, count=0)


async def test_aggregate_average_and_count(db, create_user, create_store):
    store = await create_store()
    for value in (5, 5, 4, 3):
        user, _ = await create_user()
        await submit_rating(user.id, store.id, value)

    agg = await compute_store_aggregate(store.id)
    assert agg.count == 4
    assert agg.average == pytest.approx(4.25)


async def test_aggregates_cover_every_requested_store(db, create_user, create_store):
    rated = await create_store()
    unrated = await create_store()
    user, _ = await create_user()
    await submit_rating(user.id, rated.id, 2)

    aggregates = await compute_store_aggregates([rated.id, unrated.id])
    assert aggregates[rated.id] == StoreAggregate(average=2.0, count=1)
    assert aggregates[unrated.id] == StoreAggregate()
    assert await compute_store_aggregates([]) == {}


async def test_user_ratings_for_stores(db, create_user, create_store):
    a, b, c = await create_store(), await create_store(), await create_store()
    me, _ = await create_user()
    other, _ = await create_user()
    await submit_rating(me.id, a.id, 4)
    await submit_rating(other.id, b.id, 1)

    assert await get_user_ratings_for_stores(me.id, [a.id, b.id, c.id]) == {a.id: 4}


async def test_delete_rating(db, create_user, create_store):
    user, _ = await create_user()
    store = await create_store()
    await submit_rating(user.id, store.id, 4)

    await delete_rating(user.id, store.id)
    assert await compute_store_aggregate(store.id) == StoreAggregate()

    with pytest.raises(NotFound) as exc_info:
        await delete_rating(user.id, store.id)
    assert exc_info.value.code == "RATING_NOT_FOUND"


@pytest.mark.parametrize("value", [0, 6, 9, -3])
async def test_submit_rejects_out_of_range_value(db, create_user, create_store, value):
    user, _ = await create_user()
    store = await create_store()

    with pytest.raises(ValidationError) as exc_info:
        await submit_rating(user.id, store.id, value)
    assert exc_info.value.code == "RATING_OUT_OF_RANGE"
    assert await Rating.all().count() == 0


async def test_update_path_rejects_out_of_range_value(db, create_user, create_store):
    user, _ = await create_user()
    store = await create_store()
    await submit_rating(user.id, store.id, 4)

    with pytest.raises(ValidationError):
        await submit_rating(user.id, store.id, 9)
    assert await compute_store_aggregate(store.id) == StoreAggregate(average=4.0, count=1)


@pytest.mark.parametrize("value", [0, 6])
async def test_model_rejects_out_of_range_value(db, create_user, create_store, value):
    user, _ = await create_user()
    store = await create_store()

    with pytest.raises(ModelValidationError):
        await Rating.create(user=user, store=store, rating=value)
    assert await Rating.all().count() == 0
