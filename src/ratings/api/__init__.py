"""Ratings API package."""

from ratings.api.errors import register_error_handlers
from ratings.api.routes import review_router

__all__ = ["review_router", "register_error_handlers"]
