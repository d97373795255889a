"""
Rating ledger operations.

Submission is an upsert keyed on the (user, store) unique constraint and the
per-store aggregates are recomputed from the ledger on every read.
"""
import datetime as dt
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from tortoise.exceptions import IntegrityError
from tortoise.functions import Count, Sum

from store_rating.core.errors import NotFound, ValidationError
from store_rating.models.rating import RATING_MAX, RATING_MIN, Rating
from store_rating.models.store import Store

logger = logging.getLogger("uvicorn.error")


class RatingOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"


@dataclass(frozen=True)
class StoreAggregate:
    """Average star value and number of ratings for one store."""
    average: float = 0.0
    count: int = 0


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


async def _update_existing(user_id: int, store_id: int, rating: int, comment: Optional[str]) -> int:
    return await Rating.filter(user_id=user_id, store_id=store_id).update(
        rating=rating,
        comment=comment,
        updated_at=utc_now(),
    )


async def submit_rating(
    user_id: int,
    store_id: int,
    rating: int,
    comment: Optional[str] = None,
) -> tuple[RatingOutcome, Rating]:
    """
    Create or overwrite the caller's rating for a store.

    Each step is a single statement against the (user, store) unique
    constraint: update in place, else insert, and if the insert loses a race
    with a concurrent insert for the same pair, update the row that won.

    Raises:
        ValidationError: If the rating is outside 1-5
        NotFound: If the store does not exist
    """
    # The UPDATE path skips model validators
    if not RATING_MIN <= rating <= RATING_MAX:
        raise ValidationError(
            f"Rating must be between {RATING_MIN} and {RATING_MAX}", code="RATING_OUT_OF_RANGE"
        )
    if not await Store.filter(id=store_id).exists():
        raise NotFound("Store not found", code="STORE_NOT_FOUND")

    if not await _update_existing(user_id, store_id, rating, comment):
        try:
            row = await Rating.create(user_id=user_id, store_id=store_id, rating=rating, comment=comment)
        except IntegrityError:
            # Concurrent insert for the same pair, or the store vanished meanwhile
            if not await _update_existing(user_id, store_id, rating, comment):
                raise NotFound("Store not found", code="STORE_NOT_FOUND")
        else:
            logger.info("[ratings] created user=%s store=%s rating=%s", user_id, store_id, rating)
            return RatingOutcome.CREATED, row

    logger.info("[ratings] updated user=%s store=%s rating=%s", user_id, store_id, rating)
    return RatingOutcome.UPDATED, await Rating.get(user_id=user_id, store_id=store_id)


async def delete_rating(user_id: int, store_id: int) -> None:
    """
    Remove the caller's rating for a store.

    Raises:
        NotFound: If the caller has not rated the store
    """
    deleted = await Rating.filter(user_id=user_id, store_id=store_id).delete()
    if not deleted:
        raise NotFound("Rating not found", code="RATING_NOT_FOUND")
    logger.info("[ratings] deleted user=%s store=%s", user_id, store_id)


async def get_user_rating(user_id: int, store_id: int) -> Optional[Rating]:
    return await Rating.get_or_none(user_id=user_id, store_id=store_id)


async def get_user_ratings_for_stores(user_id: int, store_ids: Iterable[int]) -> dict[int, int]:
    """Map store id -> the user's star value, for the stores the user has rated."""
    ids = list(store_ids)
    if not ids:
        return {}
    rows = await Rating.filter(user_id=user_id, store_id__in=ids).values("store_id", "rating")
    return {r["store_id"]: r["rating"] for r in rows}


async def compute_store_aggregates(store_ids: Iterable[int]) -> dict[int, StoreAggregate]:
    """
    Compute average and count for several stores with one grouped query.

    Every requested store is present in the result; stores without ratings
    get average 0.0 and count 0.
    """
    ids = list(store_ids)
    result = {sid: StoreAggregate() for sid in ids}
    if not ids:
        return result

    rows = await (
        Rating.filter(store_id__in=ids)
        .annotate(total=Sum("rating"), n=Count("id"))
        .group_by("store_id")
        .values("store_id", "total", "n")
    )
    for r in rows:
        n = int(r["n"] or 0)
        if n:
            result[r["store_id"]] = StoreAggregate(average=float(r["total"]) / n, count=n)
    return result


async def compute_store_aggregate(store_id: int) -> StoreAggregate:
    return (await compute_store_aggregates([store_id]))[store_id]


async def list_user_ratings(user_id: int) -> list[Rating]:
    """All ratings by a user with their store prefetched, most recently updated first."""
    return await Rating.filter(user_id=user_id).select_related("store").order_by("-updated_at", "-id")


async def list_store_raters(store_id: int) -> list[Rating]:
    """All ratings for a store with their author prefetched, newest first."""
    return await Rating.filter(store_id=store_id).select_related("user").order_by("-created_at", "-id")
