from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
from datetime import date, datetime

ItemType = Literal["question", "flashcard"]
ItemTypeFilter = Literal["all", "question", "flashcard"]
StudyMode = Literal["due", "new", "random"]
MasteryStatus = Literal["mastered", "learning", "not_started"]

class ReviewableItemRecord(BaseModel):
    """Schema for a reviewable item"""
    id: int
    user_id: str
    item_type: ItemType
    question_id: Optional[int] = None
    flashcard_id: Optional[int] = None
    container_id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def source_id(self) -> int:
        return self.question_id if self.item_type == "question" else self.flashcard_id

class ProgressRecord(BaseModel):
    """Schema for one user's scheduling state on one item"""
    id: int
    user_id: str
    reviewable_item_id: int
    box_level: int = Field(ge=1, le=5)
    next_review_date: Optional[date] = None
    times_correct: int = 0
    times_incorrect: int = 0
    last_reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class NewProgress(BaseModel):
    """Schema for a progress row about to be inserted"""
    user_id: str
    reviewable_item_id: int
    box_level: int = Field(ge=1, le=5)
    next_review_date: Optional[date] = None
    times_correct: int = 0
    times_incorrect: int = 0
    last_reviewed_at: Optional[datetime] = None

class ProgressStats(BaseModel):
    """Aggregates over a user's progress records"""
    due_count: int
    total_count: int
    box_distribution: List[int] = Field(min_length=5, max_length=5)

class StudyModeStats(BaseModel):
    due_count: int
    new_count: int
    total_count: int

class TypeBreakdown(BaseModel):
    questions: int = 0
    flashcards: int = 0

class ReviewStats(StudyModeStats):
    box_distribution: List[int] = Field(min_length=5, max_length=5)
    by_type: TypeBreakdown = Field(default_factory=TypeBreakdown)

class InitializeResult(BaseModel):
    progress: ProgressRecord
    created: bool

class ReviewItem(BaseModel):
    """An item selected for a study session, with its progress if any"""
    item: ReviewableItemRecord
    progress: Optional[ProgressRecord] = None

class TermProgress(BaseModel):
    item_type: ItemType
    item_id: int
    mastery_status: MasteryStatus

class ContainerProgressSummary(BaseModel):
    mastered: int = 0
    learning: int = 0
    not_started: int = 0
    total: int = 0

class ContainerProgress(BaseModel):
    terms: List[TermProgress]
    summary: ContainerProgressSummary
