from leitner_review.crud.reviewable_item import (
    create_question_items,
    create_flashcard_items,
    count_items_for_user,
    get_items_by_ids,
    get_item_by_source,
    get_items_for_user,
)
from leitner_review.crud.item_answer import record_answer, get_answered_item_ids
from leitner_review.crud.review_progress import (
    get_progress,
    create_progress,
    create_progress_batch,
    update_progress,
    get_progress_for_user,
    get_due_progress,
    get_progress_for_items,
    get_progress_stats
)

__all__ = [
    "create_question_items",
    "create_flashcard_items",
    "count_items_for_user",
    "get_items_by_ids",
    "get_item_by_source",
    "get_items_for_user",
    "record_answer",
    "get_answered_item_ids",
    "get_progress",
    "create_progress",
    "create_progress_batch",
    "update_progress",
    "get_progress_for_user",
    "get_due_progress",
    "get_progress_for_items",
    "get_progress_stats",
]
