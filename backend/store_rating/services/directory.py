"""
Store and user directory queries: free-text search, allow-listed sorting
and clamped offset/limit pagination.

Sort parameters never reach the query as raw text. They are looked up in a
per-listing allow-list; anything unrecognized falls back to the default.
"""
import math
from dataclasses import dataclass
from typing import Mapping, Optional

from tortoise.expressions import Q

from store_rating.config import settings
from store_rating.models.store import Store
from store_rating.models.user import Role, User

# Accepted sortBy tokens -> model field names
STORE_SORT_FIELDS: Mapping[str, str] = {
    "name": "name",
    "email": "email",
    "address": "address",
    "created_at": "created_at",
}

USER_SORT_FIELDS: Mapping[str, str] = {
    "name": "name",
    "email": "email",
    "address": "address",
    "role": "role",
    "created_at": "created_at",
}

DEFAULT_SORT_FIELD = "name"
SORT_ORDERS = ("ASC", "DESC")
MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def to_dict(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }


def resolve_sort(
    sort_by: Optional[str],
    sort_order: Optional[str],
    allowed: Mapping[str, str],
    default: str = DEFAULT_SORT_FIELD,
) -> list[str]:
    """
    Translate request sort parameters into Tortoise order_by arguments.

    Unknown fields fall back to `default`. An unknown order falls back to
    ascending on its own, so a valid field is kept: `sortBy=email&sortOrder=x`
    sorts by email ascending rather than by `default`.
    The primary key is appended as a tie-breaker so pages are stable.
    """
    field = allowed.get((sort_by or "").strip(), allowed[default])
    order = (sort_order or "").strip().upper()
    if order not in SORT_ORDERS:
        order = "ASC"
    return [field if order == "ASC" else f"-{field}", "id"]


def clamp_pagination(page: Optional[int], limit: Optional[int]) -> tuple[int, int]:
    """
    Return (page, limit) with 1 <= limit <= max_page_size and page >= 1,
    capped so the resulting offset still fits a signed 64-bit integer.
    """
    if not limit or limit < 1:
        limit = settings.default_page_size
    limit = min(limit, settings.max_page_size)
    page = page if page and page > 0 else 1
    return min(page, MAX_OFFSET // limit + 1), limit


async def search_stores(
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> tuple[list[Store], Pagination]:
    qs = Store.all()
    term = (search or "").strip()
    if term:
        qs = qs.filter(Q(name__icontains=term) | Q(address__icontains=term))

    page, limit = clamp_pagination(page, limit)
    pagination = Pagination(page=page, limit=limit, total=await qs.count())
    rows = await qs.order_by(*resolve_sort(sort_by, sort_order, STORE_SORT_FIELDS)).offset(pagination.offset).limit(limit)
    return rows, pagination


async def search_users(
    search: Optional[str] = None,
    role: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> tuple[list[User], Pagination]:
    qs = User.all()
    term = (search or "").strip()
    if term:
        qs = qs.filter(Q(name__icontains=term) | Q(email__icontains=term) | Q(address__icontains=term))
    # "all" or an unknown role means no role filter
    if role in {r.value for r in Role}:
        qs = qs.filter(role=Role(role))

    page, limit = clamp_pagination(page, limit)
    pagination = Pagination(page=page, limit=limit, total=await qs.count())
    rows = await qs.order_by(*resolve_sort(sort_by, sort_order, USER_SORT_FIELDS)).offset(pagination.offset).limit(limit)
    return rows, pagination
