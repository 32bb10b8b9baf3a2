"""ProductRating aggregate: average rating and review count per product.

The aggregate keeps a histogram of star ratings. Average and count are
always recomputed from the full histogram, so each update is an atomic
accumulation rather than a read-all-reviews-then-replace cycle.

Averages are rounded half-up to one decimal place (3.25 -> 3.3), not with
Python's banker's rounding.
"""

import json
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, Text

from ratings.domain import ratings
from ratings.rating.events import ProductRatingUpdated
from ratings.review.review import MAX_RATING, MIN_RATING

_ONE_DECIMAL = Decimal("0.1")


def empty_distribution() -> dict[str, int]:
    return {str(star): 0 for star in range(MIN_RATING, MAX_RATING + 1)}


def average_of(distribution: dict[str, int]) -> float:
    total = sum(distribution.values())
    if total == 0:
        return 0.0
    weighted_sum = sum(int(star) * count for star, count in distribution.items())
    mean = Decimal(weighted_sum) / Decimal(total)
    return float(mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


@ratings.aggregate
class ProductRating:
    product_id = Identifier(identifier=True, required=True)
    average_rating = Float(default=0.0)
    review_count = Integer(default=0)
    rating_distribution = Text()  # JSON: {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}
    updated_at = DateTime()

    @invariant.post
    def count_matches_distribution(self):
        if self.rating_distribution is None:
            return
        if sum(json.loads(self.rating_distribution).values()) != self.review_count:
            raise ValidationError({"review_count": ["Review count does not match the rating distribution"]})

    @classmethod
    def start(cls, product_id):
        """An empty rating for a product with no reviews yet."""
        return cls(
            product_id=product_id,
            average_rating=0.0,
            review_count=0,
            rating_distribution=json.dumps(empty_distribution()),
        )

    @property
    def distribution(self) -> dict[str, int]:
        if not self.rating_distribution:
            return empty_distribution()
        return json.loads(self.rating_distribution)

    def record(self, score: int) -> None:
        """Account for one new review with the given star score."""
        key = str(score)
        distribution = self.distribution
        if key not in distribution:
            raise ValidationError({"rating": [f"Rating must be between {MIN_RATING} and {MAX_RATING}"]})
        distribution[key] += 1

        now = datetime.now(UTC)
        with atomic_change(self):
            self.rating_distribution = json.dumps(distribution)
            self.review_count = sum(distribution.values())
            self.average_rating = average_of(distribution)
            self.updated_at = now

        self.raise_(
            ProductRatingUpdated(
                product_id=str(self.product_id),
                average_rating=self.average_rating,
                review_count=self.review_count,
                updated_at=now,
            )
        )
