# store_rating/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Defines request models for registration, login and password change.
"""
from typing import Optional

from pydantic import BaseModel, EmailStr, constr, field_validator

from store_rating.core.security import check_password_policy

# Shared field types (also used by the admin user schemas)
NameStr = constr(strip_whitespace=True, min_length=20, max_length=60)
AddressStr = constr(strip_whitespace=True, max_length=400)


def normalize_email(value: str) -> str:
    return value.strip().lower()


class RegisterIn(BaseModel):
    """
    Request model for self-registration.
    The role is always "user"; it cannot be chosen here.
    """
    name: NameStr  # Full name, 20-60 characters
    email: EmailStr  # Login email (stored lower-cased)
    password: str  # Plain text, checked against the password policy then hashed
    address: Optional[AddressStr] = None

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def _password_policy(cls, v: str) -> str:
        return check_password_policy(v)


class LoginIn(BaseModel):
    """Request model for login."""
    email: EmailStr
    password: constr(min_length=1)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return normalize_email(v)


class ChangePasswordIn(BaseModel):
    """
    Request model for a self-service password change.
    The current password must be re-proven.
    """
    currentPassword: constr(min_length=1)
    newPassword: str

    @field_validator("newPassword")
    @classmethod
    def _password_policy(cls, v: str) -> str:
        return check_password_policy(v)
