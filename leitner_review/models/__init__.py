from leitner_review.models.reviewable_item import ReviewableItem
from leitner_review.models.review_progress import ReviewProgress
from leitner_review.models.item_answer import ItemAnswer

__all__ = [
    "ReviewableItem",
    "ReviewProgress",
    "ItemAnswer",
]
