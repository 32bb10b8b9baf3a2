"""DynamicRating: keep one product's rating in step with the server.

Starts from the rating the page was rendered with and replaces it once the
single-product endpoint returns one. A ``null`` rating or a failed request
keeps the current values.
"""

import structlog

from ratings.client.transport import RatingsClient, RatingsClientError, RatingSummary

logger = structlog.get_logger(__name__)


class DynamicRating:
    def __init__(
        self,
        client: RatingsClient,
        product_id: str,
        initial_rating: float = 0.0,
        initial_review_count: int = 0,
    ) -> None:
        self.client = client
        self.product_id = product_id
        self.rating = initial_rating
        self.review_count = initial_review_count
        self.is_loading = False

    @property
    def summary(self) -> RatingSummary:
        return RatingSummary(average_rating=self.rating, review_count=self.review_count)

    async def refresh(self) -> RatingSummary:
        self.is_loading = True
        try:
            fetched = await self.client.fetch_rating(self.product_id)
        except RatingsClientError as exc:
            logger.warning("Failed to fetch product rating", product_id=self.product_id, error=exc.message)
            return self.summary
        finally:
            self.is_loading = False

        if fetched is not None:
            self.rating = fetched.average_rating
            self.review_count = fetched.review_count
        return self.summary
