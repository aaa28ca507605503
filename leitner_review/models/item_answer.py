from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from leitner_review.database import Base

class ItemAnswer(Base):
    """Every answer a user gave to a reviewable item, in any flow"""
    __tablename__ = "item_answers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    reviewable_item_id = Column(Integer, ForeignKey("reviewable_items.id", ondelete="CASCADE"), nullable=False)
    is_correct = Column(Boolean, nullable=False)
    answered_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    reviewable_item = relationship("ReviewableItem", back_populates="answers")
