import logging

import jwt
from fastapi import Depends, Header

from store_rating.core.errors import Forbidden, Unauthenticated
from store_rating.core.security import verify_access_token
from store_rating.models.user import Role, User

logger = logging.getLogger("uvicorn.error")


def _bearer_token(authorization: str | None) -> str | None:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return None


async def get_current_user(
    authorization: str | None = Header(default=None),
) -> User:
    """
    FastAPI dependency to get the current authenticated user.

    Extracts the bearer token from the Authorization header, verifies it and
    re-reads the user from the database, so a role change or account
    deletion takes effect on the next request even with an unexpired token.

    Raises:
        Unauthenticated (401): If no token is provided (AUTH_REQUIRED)
        Forbidden (403): If the token is invalid, tampered with or expired (AUTH_INVALID_TOKEN)
        Unauthenticated (401): If the token's user no longer exists (AUTH_USER_NOT_FOUND)

    Usage:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    token = _bearer_token(authorization)
    if not token:
        raise Unauthenticated("Access token required", code="AUTH_REQUIRED")

    try:
        claims = verify_access_token(token)
    except jwt.InvalidTokenError:
        raise Forbidden("Invalid or expired token", code="AUTH_INVALID_TOKEN")

    user = await User.get_or_none(id=claims.user_id)
    if not user:
        raise Unauthenticated("Invalid token - user not found", code="AUTH_USER_NOT_FOUND")
    return user


def require_role(*roles: Role):
    """
    Build a dependency that admits only users whose current role is in `roles`.

    Composes with `get_current_user`, so authentication failures surface
    first (401/403) and role failures after (403 FORBIDDEN_ROLE).

    Usage:
        @router.get("/stores/owner/dashboard")
        async def dashboard(user: User = Depends(require_role(Role.ADMIN, Role.STORE_OWNER))):
            ...
    """
    allowed = frozenset(Role(r) for r in roles)

    async def _check(current: User = Depends(get_current_user)) -> User:
        if Role(current.role) not in allowed:
            logger.debug("[auth] role %s rejected (allowed: %s)", current.role, sorted(allowed))
            raise Forbidden("Insufficient permissions", code="FORBIDDEN_ROLE")
        return current

    return _check


require_admin = require_role(Role.ADMIN)
require_admin_or_store_owner = require_role(Role.ADMIN, Role.STORE_OWNER)
require_auth = require_role(Role.ADMIN, Role.USER, Role.STORE_OWNER)
