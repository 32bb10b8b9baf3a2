"""ProductReviewsPanel: state behind a product page's reviews section.

Holds the review list and the product's displayed rating, and submits new
reviews. Rendering is left to the caller.
"""

from collections.abc import Callable

import structlog
from protean.exceptions import ValidationError

from ratings.client.cache import RatingsCache
from ratings.client.transport import RatingsClient, RatingsClientError, ReviewData, SubmittedReview
from ratings.exceptions import AuthenticationError

logger = structlog.get_logger(__name__)

STAR_CHOICES = range(1, 6)

LOAD_FAILED_MESSAGE = "Failed to load reviews. Please try again later."


class ProductReviewsPanel:
    def __init__(
        self,
        client: RatingsClient,
        product_id: str,
        initial_rating: float = 0.0,
        initial_review_count: int = 0,
        cache: RatingsCache | None = None,
        on_rating_update: Callable[[float, int], None] | None = None,
    ) -> None:
        self.client = client
        self.product_id = product_id
        self.rating = initial_rating
        self.review_count = initial_review_count
        self.cache = cache
        self.on_rating_update = on_rating_update

        self.reviews: list[ReviewData] = []
        self.loading = False
        self.submitting = False
        self.user_has_reviewed = False
        self.error: str | None = None

    async def load(self, current_user_id: str | None = None) -> list[ReviewData]:
        """Fetch the product's reviews, newest first.

        On failure the previous list is kept and ``error`` is set.
        """
        self.loading = True
        try:
            self.reviews = await self.client.fetch_reviews(self.product_id)
        except RatingsClientError as exc:
            logger.warning("Failed to load reviews", product_id=self.product_id, error=exc.message)
            self.error = LOAD_FAILED_MESSAGE
            return self.reviews
        finally:
            self.loading = False

        self.error = None
        if current_user_id is not None:
            self.user_has_reviewed = any(review.user_id == current_user_id for review in self.reviews)
        return self.reviews

    async def submit(self, token: str | None, rating: int, comment: str = "") -> SubmittedReview:
        """Post a review and fold the server's new rating into local state.

        Raises AuthenticationError without a token and ValidationError for a
        rating outside 1-5, both before any request is made. Server errors
        propagate as RatingsClientError.
        """
        if not token:
            raise AuthenticationError("Please log in to submit a review.")
        if rating not in STAR_CHOICES:
            raise ValidationError({"rating": ["Please select a rating before submitting."]})

        self.submitting = True
        try:
            result = await self.client.submit_review(token, self.product_id, rating, comment)
        finally:
            self.submitting = False

        self.reviews.insert(0, result.review)
        self.user_has_reviewed = True
        self.rating = result.new_rating
        self.review_count = result.review_count

        if self.cache is not None:
            self.cache.put(self.product_id, result.summary)
        if self.on_rating_update is not None:
            self.on_rating_update(result.new_rating, result.review_count)

        logger.info("Review submitted", product_id=self.product_id, new_rating=result.new_rating)
        return result
