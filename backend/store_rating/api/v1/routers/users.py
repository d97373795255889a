# store_rating/api/v1/routers/users.py
"""
User administration routes. Every route here is admin-only.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from store_rating.api.v1.deps import require_admin
from store_rating.api.v1.serializers import user_to_dict
from store_rating.models import MAX_INT_ID
from store_rating.schemas.admin import AdminUserCreateIn, AdminUserUpdateIn
from store_rating.services import directory
from store_rating.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(require_admin)])


@router.get("/dashboard/stats")
async def dashboard_stats():
    """Platform totals: users, stores, ratings, and users per role."""
    return await user_service.dashboard_stats()


@router.get("")
async def list_users(
    search: Optional[str] = Query(default=None, description="Search by name, email or address"),
    role: Optional[str] = Query(default=None, description="admin, user, store_owner or all"),
    sortBy: Optional[str] = Query(default="name"),
    sortOrder: Optional[str] = Query(default="ASC"),
    page: int = Query(1),
    limit: int = Query(10),
):
    rows, pagination = await directory.search_users(search, role, sortBy, sortOrder, page, limit)
    return {"users": [user_to_dict(u) for u in rows], "pagination": pagination.to_dict()}


@router.get("/{user_id}")
async def get_user(user_id: int = Path(le=MAX_INT_ID)):
    """
    User detail. Store owners also carry the mean rating across their stores.

    Errors:
        404 USER_NOT_FOUND
    """
    u = await user_service.get_user_or_404(user_id)
    data = user_to_dict(u)
    data["average_rating"] = await user_service.owner_average_rating(u)
    return {"user": data}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(body: AdminUserCreateIn):
    """
    Create an account with any role.

    Errors:
        400 EMAIL_EXISTS: email already registered
        400 VALIDATION_FAILED: invalid fields or role
    """
    u = await user_service.create_user(body.name, body.email, body.password, body.address, body.role)
    return {"message": "User created successfully", "user": user_to_dict(u)}


@router.put("/{user_id}")
async def update_user(body: AdminUserUpdateIn, user_id: int = Path(le=MAX_INT_ID)):
    """
    Update any field of a user, including role and password.

    Errors:
        400 EMAIL_EXISTS: email taken by another user
        400 LAST_ADMIN_FORBIDDEN: would demote the last admin
        404 USER_NOT_FOUND
    """
    u = await user_service.update_user(user_id, body.model_dump(exclude_unset=True))
    return {"message": "User updated successfully", "user": user_to_dict(u)}


@router.delete("/{user_id}")
async def delete_user(user_id: int = Path(le=MAX_INT_ID)):
    """
    Delete a user and their ratings.

    Errors:
        400 LAST_ADMIN_FORBIDDEN: the user is the last admin
        404 USER_NOT_FOUND
    """
    await user_service.delete_user(user_id)
    return {"message": "User deleted successfully"}
