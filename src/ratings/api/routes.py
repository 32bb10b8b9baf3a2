"""FastAPI routes for the Ratings & Reviews bounded context.

Thin adapters: query parameters and bodies in, domain calls, schemas out.
Unexpected store failures become StorageUnavailableError (HTTP 500) with a
message naming what failed.
"""

import structlog
from fastapi import APIRouter, Header, Query

from ratings.api.errors import storage_errors
from ratings.api.schemas import (
    ErrorResponse,
    ProductRatingResponse,
    RatingResponse,
    RatingsResponse,
    RatingSummaryResponse,
    ReviewListResponse,
    ReviewResponse,
    SubmitReviewRequest,
    SubmitReviewResponse,
)
from ratings.auth import authenticate
from ratings.queries import get_product_rating, get_product_ratings, list_reviews, normalize_product_ids
from ratings.review.submission import submit_review

logger = structlog.get_logger(__name__)

review_router = APIRouter(
    prefix="/reviews",
    tags=["reviews"],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


@review_router.get("", response_model=ReviewListResponse)
async def list_product_reviews(
    product_id: str | None = Query(default=None, alias="productId"),
) -> ReviewListResponse:
    """Reviews for a product, newest first."""
    with storage_errors("Failed to fetch reviews"):
        reviews = list_reviews(product_id)
    return ReviewListResponse(reviews=[ReviewResponse.from_review(review) for review in reviews])


@review_router.post(
    "",
    status_code=201,
    response_model=SubmitReviewResponse,
    responses={401: {"model": ErrorResponse}},
)
async def create_review(
    body: SubmitReviewRequest,
    authorization: str | None = Header(default=None),
) -> SubmitReviewResponse:
    """Submit a review as the bearer of the Authorization token."""
    identity = authenticate(authorization)

    with storage_errors("Failed to create review"):
        result = submit_review(
            product_id=body.product_id,
            user_id=identity.user_id,
            user_name=identity.name,
            rating=body.rating,
            comment=body.comment,
        )

    return SubmitReviewResponse(
        review=ReviewResponse.from_review(result.review),
        new_rating=result.average_rating,
        review_count=result.review_count,
    )


@review_router.get("/rating", response_model=RatingResponse)
async def product_rating(
    product_id: str | None = Query(default=None, alias="productId"),
) -> RatingResponse:
    """A single product's rating, or ``null`` when it has no reviews."""
    with storage_errors("Failed to fetch product rating"):
        rating = get_product_rating(product_id)
    return RatingResponse(rating=ProductRatingResponse.from_rating(rating) if rating else None)


@review_router.get("/ratings", response_model=RatingsResponse)
async def product_ratings(
    product_ids: str | None = Query(default=None, alias="productIds"),
) -> RatingsResponse:
    """Ratings for a comma separated list of products; unknown ids are omitted."""
    ids = normalize_product_ids(product_ids)
    with storage_errors("Failed to fetch product ratings"):
        found = get_product_ratings(ids)
    logger.debug("Batch rating lookup", requested=len(ids), found=len(found))
    return RatingsResponse(
        ratings={product_id: RatingSummaryResponse.from_rating(rating) for product_id, rating in found.items()}
    )
