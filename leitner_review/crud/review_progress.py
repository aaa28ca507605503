from sqlalchemy import func
from sqlalchemy.orm import Session
from leitner_review.models import ReviewProgress
from datetime import date, datetime
from typing import Any, Dict, List, Optional

def get_progress(db: Session, user_id: str, reviewable_item_id: int) -> Optional[ReviewProgress]:
    """Get progress for one (user, item) pair"""
    return db.query(ReviewProgress).filter(
        ReviewProgress.user_id == user_id,
        ReviewProgress.reviewable_item_id == reviewable_item_id
    ).first()

def create_progress(
    db: Session,
    user_id: str,
    reviewable_item_id: int,
    box_level: int,
    next_review_date: Optional[date],
    times_correct: int,
    times_incorrect: int,
    last_reviewed_at: Optional[datetime]
) -> ReviewProgress:
    """Insert a progress record"""
    progress = ReviewProgress(
        user_id=user_id,
        reviewable_item_id=reviewable_item_id,
        box_level=box_level,
        next_review_date=next_review_date,
        times_correct=times_correct,
        times_incorrect=times_incorrect,
        last_reviewed_at=last_reviewed_at
    )
    db.add(progress)
    db.commit()
    db.refresh(progress)
    return progress

def create_progress_batch(db: Session, rows: List[Dict[str, Any]]) -> List[ReviewProgress]:
    """Insert many progress records in one transaction"""
    if not rows:
        return []
    records = [ReviewProgress(**row) for row in rows]
    db.add_all(records)
    db.commit()
    return records

def update_progress(
    db: Session,
    user_id: str,
    reviewable_item_id: int,
    box_level: int,
    next_review_date: date,
    times_correct: int,
    times_incorrect: int,
    last_reviewed_at: datetime
) -> Optional[ReviewProgress]:
    """Overwrite the scheduling fields of an existing record"""
    progress = get_progress(db, user_id, reviewable_item_id)
    if progress:
        progress.box_level = box_level
        progress.next_review_date = next_review_date
        progress.times_correct = times_correct
        progress.times_incorrect = times_incorrect
        progress.last_reviewed_at = last_reviewed_at
        db.commit()
        db.refresh(progress)
    return progress

def get_progress_for_user(db: Session, user_id: str) -> List[ReviewProgress]:
    """Get all progress records for user"""
    return db.query(ReviewProgress).filter(
        ReviewProgress.user_id == user_id
    ).order_by(ReviewProgress.id).all()

def get_due_progress(db: Session, user_id: str, as_of: date) -> List[ReviewProgress]:
    """Get all progress records due on or before a date"""
    return db.query(ReviewProgress).filter(
        ReviewProgress.user_id == user_id,
        ReviewProgress.next_review_date.isnot(None),
        ReviewProgress.next_review_date <= as_of
    ).order_by(ReviewProgress.id).all()

def get_progress_for_items(db: Session, user_id: str, item_ids: List[int]) -> List[ReviewProgress]:
    if not item_ids:
        return []
    return db.query(ReviewProgress).filter(
        ReviewProgress.user_id == user_id,
        ReviewProgress.reviewable_item_id.in_(item_ids)
    ).order_by(ReviewProgress.id).all()

def get_progress_stats(db: Session, user_id: str, as_of: date, item_ids: Optional[List[int]] = None) -> Dict[str, Any]:
    """Due count, total count and per-box histogram, optionally limited to some items"""
    filters = [ReviewProgress.user_id == user_id]
    if item_ids is not None:
        if not item_ids:
            return {"due_count": 0, "total_count": 0, "box_distribution": [0, 0, 0, 0, 0]}
        filters.append(ReviewProgress.reviewable_item_id.in_(item_ids))

    due_count = db.query(func.count(ReviewProgress.id)).filter(
        *filters,
        ReviewProgress.next_review_date.isnot(None),
        ReviewProgress.next_review_date <= as_of
    ).scalar() or 0

    box_rows = db.query(ReviewProgress.box_level, func.count(ReviewProgress.id)).filter(
        *filters
    ).group_by(ReviewProgress.box_level).all()

    box_distribution = [0, 0, 0, 0, 0]  # boxes 1-5
    for box_level, count in box_rows:
        if 1 <= box_level <= 5:
            box_distribution[box_level - 1] = count

    return {
        "due_count": due_count,
        "total_count": sum(count for _, count in box_rows),
        "box_distribution": box_distribution
    }
