"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- Role: Closed enumeration of user roles
- User: User account and authentication model
- Store: Store directory entry, optionally owned by a store owner
- Rating: One rating per (user, store) pair
"""
from .user import Role, User
from .store import Store
from .rating import Rating

# IntField primary keys are signed 32-bit
MAX_INT_ID = 2**31 - 1
