# store_rating/api/v1/routers/auth.py
import logging

from fastapi import APIRouter, Depends, status

from store_rating.api.v1.deps import require_auth
from store_rating.api.v1.serializers import user_to_dict
from store_rating.core.errors import Unauthenticated
from store_rating.core.security import create_access_token, verify_password
from store_rating.models.user import Role, User
from store_rating.schemas.auth import ChangePasswordIn, LoginIn, RegisterIn
from store_rating.services import users as user_service

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger("uvicorn.error")


def _issue_token(user: User) -> str:
    return create_access_token(user.id, user.email, str(user.role))


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterIn):
    """
    Register a new user account.

    Self-registration always creates a "user"; other roles are assigned by
    an admin. The password must satisfy the policy and is hashed before
    storage. Email must be unique.

    Returns:
        dict: message, bearer token and the created user

    Errors:
        400 VALIDATION_FAILED: Invalid name/email/password/address
        400 EMAIL_EXISTS: Email already registered
    """
    u = await user_service.create_user(
        name=body.name,
        email=body.email,
        password=body.password,
        address=body.address,
        role=Role.USER,
    )
    logger.info("[auth] registered id=%s", u.id)
    return {"message": "User registered successfully", "token": _issue_token(u), "user": user_to_dict(u)}


@router.post("/login")
async def login(body: LoginIn):
    """
    Authenticate by email and password and issue a bearer token.

    Errors:
        401 AUTH_INVALID_CREDENTIALS: Unknown email or wrong password
    """
    user = await User.get_or_none(email=body.email)
    if not user or not verify_password(body.password, user.password_hash):
        raise Unauthenticated("Invalid email or password", code="AUTH_INVALID_CREDENTIALS")
    return {"message": "Login successful", "token": _issue_token(user), "user": user_to_dict(user)}


@router.get("/verify")
async def verify(user: User = Depends(require_auth)):
    """Check that the presented token is still valid and return its live user."""
    return {"valid": True, "user": user_to_dict(user)}


@router.get("/profile")
async def profile(user: User = Depends(require_auth)):
    """Return the authenticated user's profile."""
    return {"user": user_to_dict(user)}


@router.put("/password")
async def change_password(body: ChangePasswordIn, user: User = Depends(require_auth)):
    """
    Change the authenticated user's password.

    Errors:
        400 CURRENT_PASSWORD_INCORRECT: currentPassword does not match
        400 VALIDATION_FAILED: newPassword breaks the password policy
    """
    await user_service.change_own_password(user, body.currentPassword, body.newPassword)
    return {"message": "Password updated successfully"}
