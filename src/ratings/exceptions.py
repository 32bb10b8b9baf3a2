"""Error taxonomy for the Ratings domain.

Input problems use protean's ValidationError (HTTP 400). The duplicate-review
conflict is a ValidationError subtype so it maps to 400 as well.
"""

from protean.exceptions import ValidationError


class RatingsError(Exception):
    """Base class for non-validation failures raised by this package."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(RatingsError):
    """Bearer token missing, malformed or rejected by the verifier."""

    status_code = 401


class StorageUnavailableError(RatingsError):
    """The document store could not serve the request."""

    status_code = 500


class DuplicateReviewError(ValidationError):
    """A review already exists for this (product, user) pair."""

    def __init__(self, product_id: str, user_id: str):
        super().__init__({"review": ["You have already reviewed this product"]})
        self.product_id = product_id
        self.user_id = user_id
