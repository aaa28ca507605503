from sqlalchemy.orm import Session
from leitner_review.models import ItemAnswer, ReviewableItem
from datetime import datetime, timezone
from typing import List, Optional

def record_answer(
    db: Session,
    user_id: str,
    reviewable_item_id: int,
    is_correct: bool,
    answered_at: Optional[datetime] = None
) -> ItemAnswer:
    """Append an answer to the user's answer history"""
    answer = ItemAnswer(
        user_id=user_id,
        reviewable_item_id=reviewable_item_id,
        is_correct=is_correct,
        answered_at=answered_at or datetime.now(timezone.utc)
    )
    db.add(answer)
    db.commit()
    db.refresh(answer)
    return answer

def get_answered_item_ids(db: Session, user_id: str, container_id: int) -> List[int]:
    """IDs of items in a container the user has answered at least once"""
    rows = db.query(ItemAnswer.reviewable_item_id).join(
        ReviewableItem, ReviewableItem.id == ItemAnswer.reviewable_item_id
    ).filter(
        ItemAnswer.user_id == user_id,
        ReviewableItem.container_id == container_id
    ).distinct().order_by(ItemAnswer.reviewable_item_id).all()
    return [row[0] for row in rows]
