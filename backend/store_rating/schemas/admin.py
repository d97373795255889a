# store_rating/schemas/admin.py
"""
Pydantic schemas for admin user and store management endpoints.
Update models have every field optional; only the fields actually sent are applied.
"""
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, constr, field_validator

from store_rating.core.security import check_password_policy
from store_rating.models import MAX_INT_ID
from store_rating.models.user import Role
from store_rating.schemas.auth import AddressStr, NameStr, normalize_email

StoreNameStr = constr(strip_whitespace=True, min_length=1, max_length=255)
StoreAddressStr = constr(strip_whitespace=True, min_length=1, max_length=400)


# ========== Users ==========
class AdminUserCreateIn(BaseModel):
    """Request model for admin-created accounts (any role)."""
    name: NameStr
    email: EmailStr
    password: str
    address: Optional[AddressStr] = None
    role: Role = Role.USER

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def _password_policy(cls, v: str) -> str:
        return check_password_policy(v)


class AdminUserUpdateIn(BaseModel):
    """
    Request model for updating a user.
    Demoting the last admin is rejected by the service layer.
    """
    name: Optional[NameStr] = None
    email: Optional[EmailStr] = None
    address: Optional[AddressStr] = None
    role: Optional[Role] = None
    password: Optional[str] = None  # Admin reset; must satisfy the password policy

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return normalize_email(v) if v else v

    @field_validator("password")
    @classmethod
    def _password_policy(cls, v: Optional[str]) -> Optional[str]:
        return check_password_policy(v) if v is not None else v


# ========== Stores ==========
class StoreCreateIn(BaseModel):
    """Request model for creating a store; the owner must have the store_owner role."""
    name: StoreNameStr
    email: EmailStr
    address: StoreAddressStr
    owner_id: Optional[int] = Field(default=None, ge=1, le=MAX_INT_ID)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return normalize_email(v)


class StoreUpdateIn(BaseModel):
    """Request model for updating a store; send owner_id: null to detach the owner."""
    name: Optional[StoreNameStr] = None
    email: Optional[EmailStr] = None
    address: Optional[StoreAddressStr] = None
    owner_id: Optional[int] = Field(default=None, ge=1, le=MAX_INT_ID)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return normalize_email(v) if v else v
