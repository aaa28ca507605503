import datetime

import pytest

from leitner_review.exceptions import InvalidBoxLevel
from leitner_review.leitner import BOX_INTERVALS, LeitnerBoxes

NOW = datetime.datetime(2025, 1, 28, 23, 45)


@pytest.mark.parametrize("box_level, expected", [(1, 2), (2, 3), (3, 4), (4, 5), (5, 5)])
def test_correct_answer_moves_up_one_box(box_level, expected):
    assert LeitnerBoxes.next_box_level(box_level, True) == expected


@pytest.mark.parametrize("box_level", [1, 2, 3, 4, 5])
def test_incorrect_answer_resets_to_box_one(box_level):
    assert LeitnerBoxes.next_box_level(box_level, False) == 1


@pytest.mark.parametrize("box_level, days", [(1, 1), (2, 3), (3, 7), (4, 14), (5, 30)])
def test_next_review_date_uses_box_interval(box_level, days):
    expected = datetime.date(2025, 1, 28) + datetime.timedelta(days=days)
    assert LeitnerBoxes.next_review_date(box_level, NOW) == expected


def test_next_review_date_is_a_calendar_date():
    due = LeitnerBoxes.next_review_date(3, NOW)
    assert type(due) is datetime.date
    assert due.isoformat() == "2025-02-04"


def test_next_review_date_accepts_plain_date():
    assert LeitnerBoxes.next_review_date(1, datetime.date(2024, 12, 31)) == datetime.date(2025, 1, 1)


@pytest.mark.parametrize("box_level", [0, 6, -1, 2.5, True, "3"])
def test_next_review_date_rejects_out_of_range_box(box_level):
    with pytest.raises(InvalidBoxLevel):
        LeitnerBoxes.next_review_date(box_level, NOW)


def test_intervals_table():
    assert BOX_INTERVALS == {1: 1, 2: 3, 3: 7, 4: 14, 5: 30}
    assert LeitnerBoxes.interval_for(4) == 14


def test_apply_answer_correct():
    update = LeitnerBoxes.apply_answer(2, True, 3, 1, NOW)
    assert update.box_level == 3
    assert update.next_review_date == datetime.date(2025, 2, 4)
    assert update.times_correct == 4
    assert update.times_incorrect == 1
    assert update.last_reviewed_at == NOW


def test_apply_answer_incorrect_from_mastered():
    update = LeitnerBoxes.apply_answer(5, False, 10, 0, NOW)
    assert update.box_level == 1
    assert update.next_review_date == datetime.date(2025, 1, 29)
    assert (update.times_correct, update.times_incorrect) == (10, 1)


def test_apply_answer_rejects_invalid_current_box():
    with pytest.raises(InvalidBoxLevel):
        LeitnerBoxes.apply_answer(7, True, 0, 0, NOW)


def test_initial_box_level():
    assert LeitnerBoxes.initial_box_level(True) == 2
    assert LeitnerBoxes.initial_box_level(False) == 1


def test_is_due_and_days_overdue():
    today = datetime.date(2025, 1, 28)
    assert LeitnerBoxes.is_due(today, NOW)
    assert LeitnerBoxes.is_due(datetime.date(2025, 1, 20), NOW)
    assert not LeitnerBoxes.is_due(datetime.date(2025, 1, 29), NOW)
    assert not LeitnerBoxes.is_due(None, NOW)
    assert LeitnerBoxes.days_overdue(datetime.date(2025, 1, 25), today) == 3
    assert LeitnerBoxes.days_overdue(datetime.date(2025, 2, 1), today) == 0


def test_mastery_status():
    assert LeitnerBoxes.mastery_status(None) == "not_started"
    assert LeitnerBoxes.mastery_status(1) == "learning"
    assert LeitnerBoxes.mastery_status(4) == "learning"
    assert LeitnerBoxes.mastery_status(5) == "mastered"
