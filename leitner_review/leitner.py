from datetime import date, datetime, timedelta
from typing import NamedTuple, Optional, Union

from leitner_review.exceptions import InvalidBoxLevel

MIN_BOX_LEVEL = 1
MAX_BOX_LEVEL = 5

# Days until the next review for each box
BOX_INTERVALS = {
    1: 1,
    2: 3,
    3: 7,
    4: 14,
    5: 30,
}


class ProgressUpdate(NamedTuple):
    box_level: int
    next_review_date: date
    times_correct: int
    times_incorrect: int
    last_reviewed_at: datetime


def _as_date(now: Union[date, datetime]) -> date:
    # datetime is a subclass of date, check it first
    if isinstance(now, datetime):
        return now.date()
    return now


class LeitnerBoxes:
    """
    Leitner box system for spaced repetition review intervals.

    Items live in one of five boxes. A correct answer moves the item up one
    box (capped at box 5); an incorrect answer sends it back to box 1.
    """

    @staticmethod
    def validate_box_level(box_level: int) -> int:
        if isinstance(box_level, bool) or not isinstance(box_level, int):
            raise InvalidBoxLevel(box_level)
        if box_level < MIN_BOX_LEVEL or box_level > MAX_BOX_LEVEL:
            raise InvalidBoxLevel(box_level)
        return box_level

    @staticmethod
    def interval_for(box_level: int) -> int:
        """Review interval in days for a box"""
        return BOX_INTERVALS[LeitnerBoxes.validate_box_level(box_level)]

    @staticmethod
    def next_review_date(box_level: int, now: Union[date, datetime]) -> date:
        """
        Calculate the calendar date on which an item in a box becomes due.

        Args:
            box_level: Box the item is in, 1-5
            now: Reference moment; the time of day is ignored

        Returns:
            now + interval(box_level) days, as a date

        Raises:
            InvalidBoxLevel: box_level outside 1-5
        """
        interval = LeitnerBoxes.interval_for(box_level)
        return _as_date(now) + timedelta(days=interval)

    @staticmethod
    def next_box_level(current_box: int, is_correct: bool) -> int:
        if is_correct:
            return min(current_box + 1, MAX_BOX_LEVEL)
        return MIN_BOX_LEVEL

    @staticmethod
    def initial_box_level(is_correct: bool) -> int:
        """Starting box for an item first answered outside a review session"""
        return 2 if is_correct else MIN_BOX_LEVEL

    @staticmethod
    def apply_answer(
        current_box_level: int,
        is_correct: bool,
        times_correct: int,
        times_incorrect: int,
        now: datetime,
    ) -> ProgressUpdate:
        """
        Calculate every progress field to persist after an answer.

        Args:
            current_box_level: Current box, 1-5
            is_correct: Whether the answer was correct
            times_correct: Correct answers so far
            times_incorrect: Incorrect answers so far
            now: Moment of the answer

        Returns:
            ProgressUpdate with the new box, due date, counters and review stamp
        """
        new_box_level = LeitnerBoxes.next_box_level(
            LeitnerBoxes.validate_box_level(current_box_level), is_correct
        )
        return ProgressUpdate(
            box_level=new_box_level,
            next_review_date=LeitnerBoxes.next_review_date(new_box_level, now),
            times_correct=times_correct + 1 if is_correct else times_correct,
            times_incorrect=times_incorrect if is_correct else times_incorrect + 1,
            last_reviewed_at=now,
        )

    @staticmethod
    def is_due(next_review_date: Optional[date], as_of: Union[date, datetime]) -> bool:
        """Check if an item is due; unscheduled items are never due"""
        if next_review_date is None:
            return False
        return next_review_date <= _as_date(as_of)

    @staticmethod
    def days_overdue(next_review_date: date, as_of: Union[date, datetime]) -> int:
        """Calculate how many days overdue a review is"""
        as_of_date = _as_date(as_of)
        if as_of_date < next_review_date:
            return 0
        return (as_of_date - next_review_date).days

    @staticmethod
    def mastery_status(box_level: Optional[int]) -> str:
        if box_level is None:
            return "not_started"
        if box_level >= MAX_BOX_LEVEL:
            return "mastered"
        return "learning"
