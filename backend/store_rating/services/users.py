"""
User administration: creation, updates, deletion and platform statistics.

Keeps two invariants the schema alone cannot express:
- at least one admin exists at all times
- a store's owner always has the store_owner role
"""
import logging
from typing import Any, Optional

from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from store_rating.core.errors import Conflict, NotFound, ValidationError
from store_rating.core.security import hash_password, verify_password
from store_rating.models.rating import Rating
from store_rating.models.store import Store
from store_rating.models.user import Role, User
from store_rating.services.ratings import compute_store_aggregates

logger = logging.getLogger("uvicorn.error")

UPDATABLE_FIELDS = ("name", "email", "address", "role", "password")


async def get_user_or_404(user_id: int) -> User:
    u = await User.get_or_none(id=user_id)
    if not u:
        raise NotFound("User not found", code="USER_NOT_FOUND")
    return u


async def _count_admins() -> int:
    """Used to prevent demoting or deleting the last admin user."""
    return await User.filter(role=Role.ADMIN).count()


async def _ensure_email_free(email: str, exclude_id: Optional[int] = None) -> None:
    qs = User.filter(email=email)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    if await qs.exists():
        raise Conflict("User with this email already exists", code="EMAIL_EXISTS")


async def create_user(
    name: str,
    email: str,
    password: str,
    address: Optional[str] = None,
    role: Role = Role.USER,
) -> User:
    """
    Create an account with a hashed password.

    Raises:
        Conflict: If the email is already registered
    """
    await _ensure_email_free(email)
    try:
        u = await User.create(
            name=name,
            email=email,
            password_hash=hash_password(password),
            address=address,
            role=role,
        )
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        raise Conflict("User with this email already exists", code="EMAIL_EXISTS")
    logger.info("[users] created id=%s role=%s", u.id, u.role)
    return u


async def update_user(user_id: int, changes: dict[str, Any]) -> User:
    """
    Apply an admin edit. `changes` holds only the fields the caller sent.

    Raises:
        NotFound: If the user does not exist
        ValidationError: If nothing is being changed
        Conflict: If the email is taken or the change would demote the last admin
    """
    u = await get_user_or_404(user_id)
    changes = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
    if not changes:
        raise ValidationError("No fields to update", code="NO_FIELDS_TO_UPDATE")

    if changes.get("email") and changes["email"] != u.email:
        await _ensure_email_free(changes["email"], exclude_id=u.id)
        u.email = changes["email"]
    if changes.get("name"):
        u.name = changes["name"]
    if "address" in changes:
        u.address = changes["address"] or None
    if changes.get("password"):
        u.password_hash = hash_password(changes["password"])

    new_role = changes.get("role")
    detach_stores = False
    if new_role and new_role != u.role:
        new_role = Role(new_role)
        if u.role == Role.ADMIN and await _count_admins() <= 1:
            raise Conflict("Cannot demote the last admin user", code="LAST_ADMIN_FORBIDDEN")
        detach_stores = u.role == Role.STORE_OWNER
        u.role = new_role

    async with in_transaction():
        if detach_stores:
            await Store.filter(owner_id=u.id).update(owner_id=None)
        try:
            await u.save()
        except IntegrityError:
            raise Conflict("User with this email already exists", code="EMAIL_EXISTS")
    logger.info("[users] updated id=%s fields=%s", u.id, sorted(changes))
    return u


async def change_own_password(user: User, current_password: str, new_password: str) -> None:
    """
    Self-service password change; requires re-proving the current password.

    Raises:
        ValidationError: If the current password is wrong
    """
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect", code="CURRENT_PASSWORD_INCORRECT")
    user.password_hash = hash_password(new_password)
    await user.save(update_fields=["password_hash"])
    logger.info("[auth] password changed id=%s", user.id)


async def delete_user(user_id: int) -> None:
    """
    Delete an account together with its ratings; stores it owned are detached.

    Raises:
        NotFound: If the user does not exist
        Conflict: If the user is the last admin
    """
    u = await get_user_or_404(user_id)
    if u.role == Role.ADMIN and await _count_admins() <= 1:
        raise Conflict("Cannot delete the last admin user", code="LAST_ADMIN_FORBIDDEN")

    # The foreign keys cascade as well; doing it explicitly keeps the intent visible
    async with in_transaction():
        await Rating.filter(user_id=u.id).delete()
        await Store.filter(owner_id=u.id).update(owner_id=None)
        await u.delete()
    logger.info("[users] deleted id=%s role=%s", user_id, u.role)


async def owner_average_rating(user: User) -> Optional[float]:
    """Mean rating across every store a store owner owns; None for other roles."""
    if user.role != Role.STORE_OWNER:
        return None
    store_ids = await Store.filter(owner_id=user.id).values_list("id", flat=True)
    aggregates = (await compute_store_aggregates(store_ids)).values()
    count = sum(a.count for a in aggregates)
    if not count:
        return 0.0
    return sum(a.average * a.count for a in aggregates) / count


async def dashboard_stats() -> dict:
    """Platform-wide totals for the admin dashboard."""
    by_role = [{"role": r.value, "count": await User.filter(role=r).count()} for r in Role]
    return {
        "totalUsers": sum(item["count"] for item in by_role),
        "totalStores": await Store.all().count(),
        "totalRatings": await Rating.all().count(),
        "usersByRole": by_role,
    }
