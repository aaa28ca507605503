from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from leitner_review.database import Base

class ReviewableItem(Base):
    """A question or flashcard that takes part in spaced repetition"""
    __tablename__ = "reviewable_items"
    __table_args__ = (
        CheckConstraint(
            "(item_type = 'question' AND question_id IS NOT NULL AND flashcard_id IS NULL) OR "
            "(item_type = 'flashcard' AND flashcard_id IS NOT NULL AND question_id IS NULL)",
            name="ck_reviewable_items_one_source",
        ),
        UniqueConstraint("question_id", name="uq_reviewable_items_question"),
        UniqueConstraint("flashcard_id", name="uq_reviewable_items_flashcard"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    item_type = Column(String, nullable=False)  # "question" or "flashcard"
    question_id = Column(Integer)
    flashcard_id = Column(Integer)
    container_id = Column(Integer, nullable=False, index=True)  # source video / study set

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    progress = relationship("ReviewProgress", back_populates="reviewable_item", cascade="all, delete-orphan")
    answers = relationship("ItemAnswer", back_populates="reviewable_item", cascade="all, delete-orphan")

    @property
    def source_id(self):
        return self.question_id if self.item_type == "question" else self.flashcard_id
