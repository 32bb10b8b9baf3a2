"""SubmitReview: record a customer's rating for a product.

Enforces one review per user per product (a cross-instance rule, so it needs
a repository query) and folds the new rating into the product's
ProductRating in the same unit of work. Either both are persisted or
neither is.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from ratings.domain import ratings
from ratings.exceptions import DuplicateReviewError
from ratings.queries import require_product_id
from ratings.rating.product_rating import ProductRating
from ratings.review.locks import product_locks
from ratings.review.review import Rating, Review

logger = structlog.get_logger(__name__)


@ratings.command(part_of="Review")
class SubmitReview:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    user_name = String(max_length=255)
    rating = Integer(required=True)
    comment = Text()


@ratings.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        product_id = str(command.product_id).strip()
        user_id = str(command.user_id)

        # Rejects an out-of-range score before the duplicate lookup
        Rating(score=command.rating)

        repo = current_domain.repository_for(Review)
        existing = repo._dao.query.filter(product_id=product_id, user_id=user_id).all()
        if existing.items:
            logger.info("Rejecting duplicate review", product_id=product_id, user_id=user_id)
            raise DuplicateReviewError(product_id, user_id)

        review = Review.submit(
            product_id=product_id,
            user_id=user_id,
            user_name=command.user_name,
            rating=command.rating,
            comment=command.comment,
        )

        rating_repo = current_domain.repository_for(ProductRating)
        try:
            product_rating = rating_repo.get(product_id)
        except ObjectNotFoundError:
            product_rating = ProductRating.start(product_id=product_id)
        product_rating.record(review.rating.score)

        repo.add(review)
        rating_repo.add(product_rating)

        logger.info(
            "Review submitted",
            product_id=product_id,
            review_id=str(review.id),
            average_rating=product_rating.average_rating,
            review_count=product_rating.review_count,
        )
        return str(review.id)


@dataclass(frozen=True)
class SubmissionResult:
    review: Review
    average_rating: float
    review_count: int


def submit_review(product_id, user_id, user_name, rating, comment=None) -> SubmissionResult:
    """Process SubmitReview while holding the product's lock and return the new aggregate."""
    product_id = require_product_id(product_id)
    command = SubmitReview(
        product_id=product_id,
        user_id=user_id,
        user_name=user_name,
        rating=rating,
        comment=comment,
    )
    with product_locks.hold(product_id):
        review_id = current_domain.process(command, asynchronous=False)
        review = current_domain.repository_for(Review).get(review_id)
        product_rating = current_domain.repository_for(ProductRating).get(product_id)

    return SubmissionResult(
        review=review,
        average_rating=product_rating.average_rating,
        review_count=product_rating.review_count,
    )
