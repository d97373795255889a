"""
Helpers converting ORM rows into the JSON shapes returned by the API.
"""
import datetime as dt
from typing import Optional

from store_rating.models.rating import Rating
from store_rating.models.store import Store
from store_rating.models.user import User
from store_rating.services.ratings import StoreAggregate


def iso(value: Optional[dt.datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def user_to_dict(u: User) -> dict:
    """Public user fields; the password hash never leaves the server."""
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "address": u.address,
        "role": str(u.role),
        "created_at": iso(u.created_at),
    }


def store_to_dict(
    s: Store,
    aggregate: Optional[StoreAggregate] = None,
    user_rating: Optional[int] = None,
) -> dict:
    data = {
        "id": s.id,
        "name": s.name,
        "email": s.email,
        "address": s.address,
        "owner_id": s.owner_id,
    }
    if aggregate is not None:
        data["average_rating"] = aggregate.average
        data["total_ratings"] = aggregate.count
        data["user_rating"] = user_rating
    return data


def rating_to_dict(r: Rating) -> dict:
    return {
        "id": r.id,
        "store_id": r.store_id,
        "user_id": r.user_id,
        "rating": r.rating,
        "comment": r.comment,
        "created_at": iso(r.created_at),
        "updated_at": iso(r.updated_at),
    }
