"""
Database model for stores.
"""
from typing import Optional
from tortoise import fields, models


class Store(models.Model):
    """
    Store database model.

    Relationships:
    - Optionally belongs to an owner User whose role is "store_owner"
      (owner is set to NULL when that user is deleted)
    - Has many Ratings (cascade delete: removing a store removes its ratings)
    """
    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=255)
    email = fields.CharField(max_length=255, unique=True, index=True)
    address = fields.CharField(max_length=400)
    owner: Optional[fields.ForeignKeyNullableRelation["User"]] = fields.ForeignKeyField(
        "models.User",
        related_name="stores",
        null=True,
        on_delete=fields.SET_NULL,
    )
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "stores"
