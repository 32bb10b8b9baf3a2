"""Fixtures for client tests: a RatingsClient over an in-memory HTTP handler."""

import httpx
import pytest
from ratings.client import RatingsClient


class FakeRatingsServer:
    """Answers RatingsClient requests from canned data and records every request."""

    def __init__(self):
        self.ratings: dict[str, dict] = {}
        self.reviews: dict[str, list[dict]] = {}
        self.requests: list[httpx.Request] = []
        self.fail_with: httpx.Response | None = None

    def batch_requests(self) -> list[list[str]]:
        return [
            request.url.params["productIds"].split(",")
            for request in self.requests
            if request.url.path == "/reviews/ratings"
        ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return self.fail_with

        path = request.url.path
        if path == "/reviews/ratings":
            ids = request.url.params["productIds"].split(",")
            return httpx.Response(200, json={"ratings": {pid: self.ratings[pid] for pid in ids if pid in self.ratings}})
        if path == "/reviews/rating":
            pid = request.url.params["productId"]
            rating = self.ratings.get(pid)
            return httpx.Response(200, json={"rating": {"productId": pid, **rating} if rating else None})
        if path == "/reviews" and request.method == "GET":
            return httpx.Response(200, json={"reviews": self.reviews.get(request.url.params["productId"], [])})
        return httpx.Response(404, json={"error": "Not found"})


@pytest.fixture()
def server():
    return FakeRatingsServer()


@pytest.fixture()
def make_client(server):
    def _make(handler=None):
        return RatingsClient(base_url="http://ratings.test", transport=httpx.MockTransport(handler or server))

    return _make


def _review_payload(review_id="rev-1", product_id="prod-1", user_id="user-1", rating=4, **overrides):
    payload = {
        "id": review_id,
        "productId": product_id,
        "userId": user_id,
        "userName": "Ada",
        "rating": rating,
        "comment": "Nice",
        "createdAt": "2024-05-01T12:00:00+00:00",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def review_payload():
    return _review_payload
