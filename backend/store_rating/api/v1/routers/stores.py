# store_rating/api/v1/routers/stores.py
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from store_rating.api.v1.deps import require_admin, require_admin_or_store_owner, require_auth
from store_rating.api.v1.serializers import iso, store_to_dict
from store_rating.core.errors import NotFound
from store_rating.models import MAX_INT_ID
from store_rating.models.store import Store
from store_rating.models.user import User
from store_rating.schemas.admin import StoreCreateIn, StoreUpdateIn
from store_rating.services import directory
from store_rating.services import ratings as rating_service
from store_rating.services import stores as store_service

router = APIRouter(prefix="/stores", tags=["stores"])


async def _with_ratings(stores: list[Store], user: User) -> list[dict]:
    """Attach aggregate rating and the caller's own rating to each store."""
    ids = [s.id for s in stores]
    aggregates = await rating_service.compute_store_aggregates(ids)
    mine = await rating_service.get_user_ratings_for_stores(user.id, ids)
    return [store_to_dict(s, aggregates[s.id], mine.get(s.id)) for s in stores]


@router.get("")
async def list_stores(
    user: User = Depends(require_auth),
    search: Optional[str] = Query(default=None, description="Search by name or address"),
    sortBy: Optional[str] = Query(default="name"),
    sortOrder: Optional[str] = Query(default="ASC"),
    page: int = Query(1),
    limit: int = Query(10),
):
    """
    List stores with their rating aggregates and the caller's own rating.

    Unknown sortBy/sortOrder values fall back to name ASC; page and limit
    are clamped to sane bounds.
    """
    rows, pagination = await directory.search_stores(search, sortBy, sortOrder, page, limit)
    return {"stores": await _with_ratings(rows, user), "pagination": pagination.to_dict()}


@router.get("/owner/dashboard")
async def owner_dashboard(user: User = Depends(require_admin_or_store_owner)):
    """
    Aggregated ratings and raters for every store the caller owns.

    Errors:
        404 STORE_NOT_FOUND: the caller owns no store
    """
    stores = await store_service.owned_stores(user)
    if not stores:
        raise NotFound("No store found for this owner", code="STORE_NOT_FOUND")

    aggregates = await rating_service.compute_store_aggregates([s.id for s in stores])
    items = []
    for s in stores:
        raters = await rating_service.list_store_raters(s.id)
        items.append({
            "store": store_to_dict(s),
            "averageRating": aggregates[s.id].average,
            "totalRatings": aggregates[s.id].count,
            "raters": [
                {
                    "id": r.user.id,
                    "name": r.user.name,
                    "email": r.user.email,
                    "rating": r.rating,
                    "comment": r.comment,
                    "created_at": iso(r.created_at),
                }
                for r in raters
            ],
        })
    return {"stores": items}


@router.get("/{store_id}")
async def get_store(store_id: int = Path(le=MAX_INT_ID), user: User = Depends(require_auth)):
    s = await store_service.get_store_or_404(store_id)
    return {"store": (await _with_ratings([s], user))[0]}


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_store(body: StoreCreateIn):
    """
    Create a store (admin only).

    Errors:
        400 EMAIL_EXISTS: another store uses this email
        400 INVALID_OWNER: owner_id is not a store owner
    """
    s = await store_service.create_store(body.name, body.email, body.address, body.owner_id)
    return {"message": "Store created successfully", "store": store_to_dict(s)}


@router.put("/{store_id}", dependencies=[Depends(require_admin)])
async def update_store(body: StoreUpdateIn, store_id: int = Path(le=MAX_INT_ID)):
    """Update a store (admin only). Only the fields sent are changed."""
    s = await store_service.update_store(store_id, body.model_dump(exclude_unset=True))
    return {"message": "Store updated successfully", "store": store_to_dict(s)}


@router.delete("/{store_id}", dependencies=[Depends(require_admin)])
async def delete_store(store_id: int = Path(le=MAX_INT_ID)):
    """Delete a store and all of its ratings (admin only)."""
    await store_service.delete_store(store_id)
    return {"message": "Store deleted successfully"}
