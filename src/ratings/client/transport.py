"""Async HTTP client for the Ratings API.

Wraps ``httpx.AsyncClient``. Every non-2xx response and every transport
failure is raised as RatingsClientError carrying the server's ``error``
message when there is one.
"""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

import httpx
import structlog

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = os.getenv("RATINGS_API_URL", "http://localhost:8000")


class RatingsClientError(Exception):
    def __init__(self, status_code: int | None, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@contextmanager
def _parsing(path: str) -> Iterator[None]:
    """Raise RatingsClientError for a 2xx body that does not have the expected shape."""
    try:
        yield
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        logger.warning("Malformed Ratings API response", path=path, error=repr(exc))
        raise RatingsClientError(None, f"Malformed response from {path}") from exc


@dataclass(frozen=True)
class RatingSummary:
    average_rating: float
    review_count: int

    @classmethod
    def from_payload(cls, payload: dict) -> "RatingSummary":
        return cls(
            average_rating=float(payload["averageRating"]),
            review_count=int(payload["reviewCount"]),
        )


@dataclass(frozen=True)
class ReviewData:
    id: str
    product_id: str
    user_id: str
    user_name: str
    rating: int
    comment: str
    created_at: datetime | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "ReviewData":
        created_at = payload.get("createdAt")
        return cls(
            id=payload["id"],
            product_id=payload["productId"],
            user_id=payload["userId"],
            user_name=payload.get("userName") or "",
            rating=int(payload["rating"]),
            comment=payload.get("comment") or "",
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )


@dataclass(frozen=True)
class SubmittedReview:
    review: ReviewData
    new_rating: float
    review_count: int

    @property
    def summary(self) -> RatingSummary:
        return RatingSummary(average_rating=self.new_rating, review_count=self.review_count)


class RatingsClient:
    """Client for the /reviews endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        http: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = http or httpx.AsyncClient(base_url=base_url or DEFAULT_BASE_URL, transport=transport)

    async def __aenter__(self) -> "RatingsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Ratings API unreachable", method=method, path=path, error=str(exc))
            raise RatingsClientError(None, str(exc) or type(exc).__name__) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            payload = {}

        if response.is_error:
            message = payload.get("error") or response.reason_phrase or "Request failed"
            raise RatingsClientError(response.status_code, str(message))
        return payload

    async def fetch_reviews(self, product_id: str) -> list[ReviewData]:
        payload = await self._request("GET", "/reviews", params={"productId": product_id})
        with _parsing("/reviews"):
            return [ReviewData.from_payload(item) for item in payload.get("reviews") or []]

    async def fetch_rating(self, product_id: str) -> RatingSummary | None:
        payload = await self._request("GET", "/reviews/rating", params={"productId": product_id})
        rating = payload.get("rating")
        with _parsing("/reviews/rating"):
            return RatingSummary.from_payload(rating) if rating else None

    async def fetch_ratings(self, product_ids) -> dict[str, RatingSummary]:
        """Batch lookup; ids without a rating are absent from the result."""
        ids = list(dict.fromkeys(product_ids))
        payload = await self._request("GET", "/reviews/ratings", params={"productIds": ",".join(ids)})
        with _parsing("/reviews/ratings"):
            return {
                product_id: RatingSummary.from_payload(summary)
                for product_id, summary in (payload.get("ratings") or {}).items()
            }

    async def submit_review(self, token: str, product_id: str, rating: int, comment: str = "") -> SubmittedReview:
        payload = await self._request(
            "POST",
            "/reviews",
            json={"productId": product_id, "rating": rating, "comment": comment},
            headers={"Authorization": f"Bearer {token}"},
        )
        with _parsing("/reviews"):
            return SubmittedReview(
                review=ReviewData.from_payload(payload["review"]),
                new_rating=float(payload["newRating"]),
                review_count=int(payload["reviewCount"]),
            )
