# store_rating/schemas/rating.py
"""
Pydantic schemas for rating endpoints.
"""
from typing import Optional

from pydantic import BaseModel, Field

from store_rating.models import MAX_INT_ID
from store_rating.models.rating import RATING_MAX, RATING_MIN


class RatingIn(BaseModel):
    """
    Request model for submitting a rating.
    Submitting again for the same store overwrites the previous rating.
    """
    store_id: int = Field(ge=1, le=MAX_INT_ID)  # Store being rated
    rating: int = Field(ge=RATING_MIN, le=RATING_MAX)  # Star value, 1-5
    comment: Optional[str] = Field(default=None, max_length=1000)
