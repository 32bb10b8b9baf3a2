"""Pydantic request/response schemas for the Ratings API.

Field names are snake_case in Python and camelCase on the wire. These models
are the external contract; SubmitReview is the internal domain command.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ratings.rating.product_rating import ProductRating
from ratings.review.review import Review


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class SubmitReviewRequest(_CamelModel):
    # Presence and range are checked by the domain so every input error
    # surfaces as the same 400 response.
    product_id: str | None = None
    rating: int | None = None
    comment: str | None = Field(default=None, max_length=5000)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ReviewResponse(_CamelModel):
    id: str
    product_id: str
    user_id: str
    user_name: str
    rating: int
    comment: str
    created_at: str | None = None

    @classmethod
    def from_review(cls, review: Review) -> ReviewResponse:
        return cls(
            id=str(review.id),
            product_id=str(review.product_id),
            user_id=str(review.user_id),
            user_name=review.user_name or "",
            rating=review.rating.score,
            comment=review.comment or "",
            created_at=review.created_at.isoformat() if review.created_at else None,
        )


class RatingSummaryResponse(_CamelModel):
    average_rating: float
    review_count: int

    @classmethod
    def from_rating(cls, rating: ProductRating) -> RatingSummaryResponse:
        return cls(average_rating=rating.average_rating, review_count=rating.review_count)


class ProductRatingResponse(RatingSummaryResponse):
    product_id: str

    @classmethod
    def from_rating(cls, rating: ProductRating) -> ProductRatingResponse:
        return cls(
            product_id=str(rating.product_id),
            average_rating=rating.average_rating,
            review_count=rating.review_count,
        )


class ReviewListResponse(_CamelModel):
    reviews: list[ReviewResponse]


class RatingResponse(_CamelModel):
    rating: ProductRatingResponse | None = None


class RatingsResponse(_CamelModel):
    ratings: dict[str, RatingSummaryResponse]


class SubmitReviewResponse(_CamelModel):
    success: bool = True
    review: ReviewResponse
    new_rating: float
    review_count: int


class ErrorResponse(BaseModel):
    error: str
