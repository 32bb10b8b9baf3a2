"""Client-side access to the Ratings API."""

from ratings.client.cache import BatchRatingLoader, DebounceTimer, RatingsCache, RatingsView
from ratings.client.dynamic import DynamicRating
from ratings.client.panel import ProductReviewsPanel
from ratings.client.transport import (
    RatingsClient,
    RatingsClientError,
    RatingSummary,
    ReviewData,
    SubmittedReview,
)

__all__ = [
    "BatchRatingLoader",
    "DebounceTimer",
    "DynamicRating",
    "ProductReviewsPanel",
    "RatingSummary",
    "RatingsCache",
    "RatingsClient",
    "RatingsClientError",
    "RatingsView",
    "ReviewData",
    "SubmittedReview",
]
