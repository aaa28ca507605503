from sqlalchemy import func
from sqlalchemy.orm import Session
from leitner_review.models import ReviewableItem
from typing import List, Optional

def create_question_items(db: Session, user_id: str, container_id: int, question_ids: List[int]) -> List[ReviewableItem]:
    """Register newly generated questions of a container as reviewable items"""
    items = [
        ReviewableItem(user_id=user_id, item_type="question", question_id=qid, container_id=container_id)
        for qid in question_ids
    ]
    db.add_all(items)
    db.commit()
    return items

def create_flashcard_items(db: Session, user_id: str, container_id: int, flashcard_ids: List[int]) -> List[ReviewableItem]:
    """Register newly generated flashcards of a container as reviewable items"""
    items = [
        ReviewableItem(user_id=user_id, item_type="flashcard", flashcard_id=fid, container_id=container_id)
        for fid in flashcard_ids
    ]
    db.add_all(items)
    db.commit()
    return items

def get_items_by_ids(db: Session, item_ids: List[int]) -> List[ReviewableItem]:
    if not item_ids:
        return []
    return db.query(ReviewableItem).filter(
        ReviewableItem.id.in_(item_ids)
    ).order_by(ReviewableItem.id).all()

def get_item_by_source(db: Session, item_type: str, source_id: int) -> Optional[ReviewableItem]:
    """Find the reviewable item backed by a question or flashcard"""
    column = ReviewableItem.question_id if item_type == "question" else ReviewableItem.flashcard_id
    return db.query(ReviewableItem).filter(
        ReviewableItem.item_type == item_type,
        column == source_id
    ).first()

def get_items_for_user(db: Session, user_id: str, container_id: Optional[int] = None) -> List[ReviewableItem]:
    """Get all reviewable items of a user, optionally within one container"""
    query = db.query(ReviewableItem).filter(ReviewableItem.user_id == user_id)
    if container_id is not None:
        query = query.filter(ReviewableItem.container_id == container_id)
    return query.order_by(ReviewableItem.id).all()


def count_items_for_user(db: Session, user_id: str, container_id: Optional[int] = None) -> int:
    """Count reviewable items of a user, optionally within one container"""
    query = db.query(func.count(ReviewableItem.id)).filter(ReviewableItem.user_id == user_id)
    if container_id is not None:
        query = query.filter(ReviewableItem.container_id == container_id)
    return query.scalar() or 0
