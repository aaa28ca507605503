from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from leitner_review.database import Base

class ReviewProgress(Base):
    """Leitner box scheduling state for one (user, reviewable item) pair"""
    __tablename__ = "review_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "reviewable_item_id", name="uq_review_progress_user_item"),
        CheckConstraint("box_level BETWEEN 1 AND 5", name="ck_review_progress_box_level"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    reviewable_item_id = Column(Integer, ForeignKey("reviewable_items.id", ondelete="CASCADE"), nullable=False)

    # Leitner fields
    box_level = Column(Integer, nullable=False, default=1)  # 1 = daily, 5 = mastered
    next_review_date = Column(Date, index=True)  # null until first scheduled
    times_correct = Column(Integer, nullable=False, default=0)
    times_incorrect = Column(Integer, nullable=False, default=0)
    last_reviewed_at = Column(DateTime)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    reviewable_item = relationship("ReviewableItem", back_populates="progress")
