"""Domain events for the Review aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from ratings.domain import ratings


@ratings.event(part_of="Review")
class ReviewSubmitted:
    """A customer rated a product."""

    __version__ = "v1"

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    user_name = String()
    rating = Integer(required=True)
    submitted_at = DateTime(required=True)
