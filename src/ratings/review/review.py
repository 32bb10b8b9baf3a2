"""Review aggregate: one customer's star rating and comment for a product.

Reviews are write-once: there is no edit, removal or moderation path. The
one-review-per-user-per-product rule spans instances, so it is enforced by
the SubmitReview handler, not here.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text, ValueObject

from ratings.domain import ratings
from ratings.review.events import ReviewSubmitted

MIN_RATING = 1
MAX_RATING = 5


@ratings.value_object(part_of="Review")
class Rating:
    """A star rating from 1 to 5."""

    score = Integer(required=True)

    @invariant.post
    def score_must_be_in_range(self):
        if self.score is not None and (self.score < MIN_RATING or self.score > MAX_RATING):
            raise ValidationError({"rating": [f"Rating must be between {MIN_RATING} and {MAX_RATING}"]})


@ratings.aggregate
class Review:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    user_name = String(max_length=255, default="")
    rating = ValueObject(Rating, required=True)
    comment = Text(default="")
    created_at = DateTime()

    @invariant.post
    def product_id_must_not_be_blank(self):
        if self.product_id is not None and not str(self.product_id).strip():
            raise ValidationError({"product_id": ["Product ID is required"]})

    @classmethod
    def submit(cls, product_id, user_id, user_name, rating, comment=None):
        """Create a review stamped with the current server time."""
        now = datetime.now(UTC)

        review = cls(
            product_id=product_id,
            user_id=user_id,
            user_name=user_name or "",
            rating=Rating(score=rating),
            comment=comment or "",
            created_at=now,
        )

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                user_id=str(user_id),
                user_name=user_name or "",
                rating=rating,
                submitted_at=now,
            )
        )

        return review
