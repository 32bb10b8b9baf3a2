"""Read-side lookups for reviews and product ratings.

All functions are side-effect free and expect an active domain context.
"Not found" is a normal outcome here: an empty list, None, or a missing key.
"""

from collections.abc import Iterable

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from ratings.rating.product_rating import ProductRating
from ratings.review.review import Review
from ratings.utils.store import fetch_all


def require_product_id(product_id) -> str:
    """The id with surrounding whitespace removed; blank or missing ids are rejected."""
    if product_id is None or not str(product_id).strip():
        raise ValidationError({"productId": ["Product ID is required"]})
    return str(product_id).strip()


def normalize_product_ids(product_ids: Iterable[str] | str | None) -> list[str]:
    """Split/strip/de-duplicate ids, keeping first-seen order.

    Accepts either an iterable of ids or the comma separated query value.
    """
    if product_ids is None:
        raise ValidationError({"productIds": ["Product IDs are required"]})
    if isinstance(product_ids, str):
        product_ids = product_ids.split(",")

    ids = list(dict.fromkeys(pid.strip() for pid in product_ids if pid and pid.strip()))
    if not ids:
        raise ValidationError({"productIds": ["Product IDs are required"]})
    return ids


def list_reviews(product_id) -> list[Review]:
    """Reviews for a product, newest first. Empty list if there are none."""
    product_id = require_product_id(product_id)
    repo = current_domain.repository_for(Review)
    items = fetch_all(repo._dao.query.filter(product_id=product_id))
    return sorted(items, key=lambda review: review.created_at, reverse=True)


def get_product_rating(product_id) -> ProductRating | None:
    """The product's rating aggregate, or None when it has no reviews yet."""
    product_id = require_product_id(product_id)
    try:
        return current_domain.repository_for(ProductRating).get(product_id)
    except ObjectNotFoundError:
        return None


def get_product_ratings(product_ids) -> dict[str, ProductRating]:
    """Rating aggregates keyed by product id, for the ids that have one."""
    repo = current_domain.repository_for(ProductRating)
    found = {}
    for product_id in normalize_product_ids(product_ids):
        try:
            found[product_id] = repo.get(product_id)
        except ObjectNotFoundError:
            continue
    return found
