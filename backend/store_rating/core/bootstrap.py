# store_rating/core/bootstrap.py
"""
Bootstrap module for application initialization.
Creates the default admin on first startup so the at-least-one-admin
invariant holds from the beginning.
"""
import logging

from store_rating.config import settings
from store_rating.core.security import hash_password
from store_rating.models.user import Role, User

logger = logging.getLogger("uvicorn.error")


async def ensure_default_admin() -> None:
    """
    If no admin exists in the database, create a default admin based on settings.
    Only takes effect under the following conditions:
      - Currently no user with role="admin"
      - And ADMIN_PASSWORD is set (to avoid using a default weak password)
    Environment variables:
      ADMIN_NAME     (default: "Platform Administrator Account")
      ADMIN_EMAIL    (default: "admin@storerating.com")
      ADMIN_PASSWORD (required, otherwise won't create)
    If ADMIN_EMAIL already belongs to a non-admin account, that account is promoted.
    """
    if await User.filter(role=Role.ADMIN).exists():
        return

    if not settings.admin_password:
        logger.warning("[bootstrap] No admin present, but ADMIN_PASSWORD not set -> skip creating default admin.")
        return

    email = settings.admin_email.strip().lower()
    existing = await User.get_or_none(email=email)
    if existing:
        existing.role = Role.ADMIN
        await existing.save(update_fields=["role"])
        logger.warning("[bootstrap] Promoted existing account to admin -> email=%s id=%s", existing.email, existing.id)
        return

    u = await User.create(
        name=settings.admin_name,
        email=email,
        password_hash=hash_password(settings.admin_password),
        role=Role.ADMIN,
    )
    logger.warning("[bootstrap] Created default admin -> email=%s id=%s", u.email, u.id)
