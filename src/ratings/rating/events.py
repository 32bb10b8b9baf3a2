"""Domain events for the ProductRating aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer

from ratings.domain import ratings


@ratings.event(part_of="ProductRating")
class ProductRatingUpdated:
    """A product's average rating and review count were recalculated."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    average_rating = Float(required=True)
    review_count = Integer(required=True)
    updated_at = DateTime(required=True)
