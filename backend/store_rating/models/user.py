"""
Database model for users.
Represents an account on the platform, containing authentication credentials,
profile information, and its role.
"""
from enum import Enum
from tortoise import fields, models


class Role(str, Enum):
    """
    Closed set of user roles.

    - ADMIN: manages users and stores, sees platform statistics
    - USER: browses stores and submits ratings
    - STORE_OWNER: sees aggregated ratings for the stores they own
    """
    ADMIN = "admin"
    USER = "user"
    STORE_OWNER = "store_owner"

    def __str__(self) -> str:
        return self.value


class User(models.Model):
    """
    User database model.

    Relationships:
    - Has many Ratings (one-to-many, via related_name="ratings"; cascade on delete)
    - Has many owned Stores (one-to-many, via related_name="stores"; detached on delete)

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Email must be unique across all users and is stored lower-cased
    - At least one admin must exist at all times (enforced by services.users)
    """
    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=60)
    email = fields.CharField(max_length=255, unique=True, index=True)
    password_hash = fields.CharField(max_length=255)  # argon2 hash, never plain text
    address = fields.CharField(max_length=400, null=True)
    role = fields.CharEnumField(Role, max_length=16, default=Role.USER)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"
