"""
Services Module

Domain operations used by the API routers:
- ratings: rating upsert, deletion and per-store aggregates
- directory: store/user search with allow-listed sorting and pagination
- users: user administration and platform statistics
- stores: store administration and owner lookups
"""

from .ratings import (
    RatingOutcome,
    StoreAggregate,
    compute_store_aggregate,
    compute_store_aggregates,
    delete_rating,
    submit_rating,
)
from .directory import (
    Pagination,
    clamp_pagination,
    resolve_sort,
    search_stores,
    search_users,
)

__all__ = [
    # Ratings
    "RatingOutcome",
    "StoreAggregate",
    "compute_store_aggregate",
    "compute_store_aggregates",
    "delete_rating",
    "submit_rating",
    # Directory
    "Pagination",
    "clamp_pagination",
    "resolve_sort",
    "search_stores",
    "search_users",
]
