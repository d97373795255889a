"""
Store administration (admin only) and store-owner lookups.
"""
import logging
from typing import Any, Optional

from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from store_rating.core.errors import Conflict, NotFound, ValidationError
from store_rating.models.rating import Rating
from store_rating.models.store import Store
from store_rating.models.user import Role, User

logger = logging.getLogger("uvicorn.error")

UPDATABLE_FIELDS = ("name", "email", "address", "owner_id")


async def get_store_or_404(store_id: int) -> Store:
    s = await Store.get_or_none(id=store_id)
    if not s:
        raise NotFound("Store not found", code="STORE_NOT_FOUND")
    return s


async def ensure_owner(owner_id: Optional[int]) -> Optional[User]:
    """
    Resolve a prospective owner; None means "no owner".

    Raises:
        ValidationError: If the user does not exist or is not a store owner
    """
    if owner_id is None:
        return None
    owner = await User.get_or_none(id=owner_id, role=Role.STORE_OWNER)
    if not owner:
        raise ValidationError("Invalid owner ID or user is not a store owner", code="INVALID_OWNER")
    return owner


async def _ensure_email_free(email: str, exclude_id: Optional[int] = None) -> None:
    qs = Store.filter(email=email)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    if await qs.exists():
        raise Conflict("Store with this email already exists", code="EMAIL_EXISTS")


async def create_store(name: str, email: str, address: str, owner_id: Optional[int] = None) -> Store:
    await _ensure_email_free(email)
    owner = await ensure_owner(owner_id)
    try:
        s = await Store.create(name=name, email=email, address=address, owner=owner)
    except IntegrityError:
        raise Conflict("Store with this email already exists", code="EMAIL_EXISTS")
    logger.info("[stores] created id=%s owner=%s", s.id, owner_id)
    return s


async def update_store(store_id: int, changes: dict[str, Any]) -> Store:
    """
    Apply an admin edit. `changes` holds only the fields the caller sent;
    an explicit `owner_id: null` detaches the owner.
    """
    s = await get_store_or_404(store_id)
    changes = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
    if not changes:
        raise ValidationError("No fields to update", code="NO_FIELDS_TO_UPDATE")

    if changes.get("email") and changes["email"] != s.email:
        await _ensure_email_free(changes["email"], exclude_id=s.id)
        s.email = changes["email"]
    if changes.get("name"):
        s.name = changes["name"]
    if changes.get("address"):
        s.address = changes["address"]
    if "owner_id" in changes:
        s.owner = await ensure_owner(changes["owner_id"])

    try:
        await s.save()
    except IntegrityError:
        raise Conflict("Store with this email already exists", code="EMAIL_EXISTS")
    logger.info("[stores] updated id=%s fields=%s", s.id, sorted(changes))
    return s


async def delete_store(store_id: int) -> None:
    """Delete a store and every rating it received."""
    s = await get_store_or_404(store_id)
    async with in_transaction():
        await Rating.filter(store_id=s.id).delete()
        await s.delete()
    logger.info("[stores] deleted id=%s", store_id)


async def owned_stores(owner: User) -> list[Store]:
    return await Store.filter(owner_id=owner.id).order_by("name", "id")
