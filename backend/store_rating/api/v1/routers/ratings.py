# store_rating/api/v1/routers/ratings.py
from fastapi import APIRouter, Depends, Path, Response, status

from store_rating.api.v1.deps import require_auth
from store_rating.api.v1.serializers import iso, rating_to_dict
from store_rating.models import MAX_INT_ID
from store_rating.models.user import User
from store_rating.schemas.rating import RatingIn
from store_rating.services import ratings as rating_service

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.post("")
async def submit_rating(body: RatingIn, response: Response, user: User = Depends(require_auth)):
    """
    Submit or update the caller's rating for a store.

    One rating exists per (user, store); a second submission overwrites the
    first. The status code tells the two apart.

    Returns:
        201 when a new rating was created, 200 when an existing one was updated.

    Errors:
        400 VALIDATION_FAILED: rating outside 1-5 or bad store_id
        404 STORE_NOT_FOUND: store does not exist
    """
    outcome, row = await rating_service.submit_rating(user.id, body.store_id, body.rating, body.comment)
    created = outcome is rating_service.RatingOutcome.CREATED
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return {
        "message": "Rating submitted successfully" if created else "Rating updated successfully",
        "created": created,
        "rating": rating_to_dict(row),
    }


@router.get("/my-ratings")
async def my_ratings(user: User = Depends(require_auth)):
    """All ratings by the caller, with store name and address, most recently updated first."""
    rows = await rating_service.list_user_ratings(user.id)
    return {
        "ratings": [
            {
                "id": r.id,
                "rating": r.rating,
                "comment": r.comment,
                "created_at": iso(r.created_at),
                "updated_at": iso(r.updated_at),
                "store_id": r.store_id,
                "store_name": r.store.name,
                "store_address": r.store.address,
            }
            for r in rows
        ]
    }


@router.get("/store/{store_id}")
async def my_rating_for_store(store_id: int = Path(le=MAX_INT_ID), user: User = Depends(require_auth)):
    """The caller's rating for one store, or null if they have not rated it."""
    r = await rating_service.get_user_rating(user.id, store_id)
    return {"rating": rating_to_dict(r) if r else None}


@router.delete("/store/{store_id}")
async def delete_rating(store_id: int = Path(le=MAX_INT_ID), user: User = Depends(require_auth)):
    """
    Delete the caller's rating for a store.

    Errors:
        404 RATING_NOT_FOUND: the caller has no rating for this store
    """
    await rating_service.delete_rating(user.id, store_id)
    return {"message": "Rating deleted successfully"}
