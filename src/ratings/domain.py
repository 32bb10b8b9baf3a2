"""Ratings & Reviews bounded context: product reviews and rating aggregates.

Customers submit one star rating (with an optional comment) per product.
Each submission updates the product's ProductRating aggregate in the same
unit of work, so the average and count shown on product pages always match
the persisted reviews.
"""

import structlog
from protean.domain import Domain

from ratings.utils.logging import configure_logging

configure_logging()

logger = structlog.get_logger(__name__)

ratings = Domain(name="ratings")
