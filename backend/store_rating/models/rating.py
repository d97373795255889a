"""
Database model for ratings.
One row per (user, store) pair; re-rating a store updates the existing row.
"""
from tortoise import fields, models
from tortoise.validators import MaxValueValidator, MinValueValidator

RATING_MIN = 1
RATING_MAX = 5


class Rating(models.Model):
    """
    Rating database model.

    - rating: integer star value in [1, 5]
    - comment: optional free text
    - updated_at: bumped on every re-submission

    The (user, store) unique constraint is what makes rating submission an
    upsert; see services.ratings.submit_rating.
    """
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField(
        "models.User",
        related_name="ratings",
        on_delete=fields.CASCADE,
    )
    store = fields.ForeignKeyField(
        "models.Store",
        related_name="ratings",
        on_delete=fields.CASCADE,
    )
    rating = fields.SmallIntField(validators=[MinValueValidator(RATING_MIN), MaxValueValidator(RATING_MAX)])
    comment = fields.TextField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "ratings"
        unique_together = (("user", "store"),)
