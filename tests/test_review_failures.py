"""Store failures and creation races, with the storage collaborators mocked."""
import datetime
from unittest.mock import MagicMock

import pytest

from leitner_review.exceptions import DuplicateProgress, InvalidReviewRequest, StoreFailure
from leitner_review.review_service import ReviewService
from leitner_review.schemas import ProgressRecord, ProgressStats

NOW = datetime.datetime(2025, 1, 28, 9, 30)


def make_progress(**overrides):
    fields = dict(
        id=1,
        user_id="user-1",
        reviewable_item_id=5,
        box_level=2,
        next_review_date=datetime.date(2025, 1, 28),
        times_correct=1,
        times_incorrect=0,
        last_reviewed_at=NOW,
    )
    fields.update(overrides)
    return ProgressRecord(**fields)


@pytest.fixture
def store():
    return MagicMock()


@pytest.fixture
def inventory():
    return MagicMock()


@pytest.fixture
def service(store, inventory):
    return ReviewService(store, inventory, clock=lambda: NOW)


def test_store_failure_propagates_from_lookup(service, store):
    store.find_by_user_and_item.side_effect = StoreFailure("connection lost")

    with pytest.raises(StoreFailure, match="connection lost"):
        service.process_answer("user-1", 5, True)

    store.create.assert_not_called()
    store.update.assert_not_called()


def test_store_failure_propagates_from_update_without_retry(service, store):
    store.find_by_user_and_item.return_value = make_progress()
    store.update.side_effect = StoreFailure("write failed")

    with pytest.raises(StoreFailure):
        service.process_answer("user-1", 5, True)

    assert store.update.call_count == 1


def test_store_failure_propagates_from_stats(service, store, inventory):
    inventory.count_items.return_value = 0
    store.get_stats.side_effect = StoreFailure("timeout")

    with pytest.raises(StoreFailure):
        service.get_study_mode_stats("user-1")


def test_validation_happens_before_store(service, store, inventory):
    with pytest.raises(InvalidReviewRequest):
        service.initialize_progress("", 5, True)
    with pytest.raises(InvalidReviewRequest):
        service.get_review_stats("  ")

    store.find_by_user_and_item.assert_not_called()
    inventory.list_items.assert_not_called()


def test_process_answer_race_applies_answer_to_winner(service, store):
    winner = make_progress(box_level=2, times_correct=1)
    store.find_by_user_and_item.side_effect = [None, winner]
    store.create.side_effect = DuplicateProgress("exists")
    store.update.side_effect = lambda user_id, item_id, **fields: make_progress(**fields)

    progress = service.process_answer("user-1", 5, True)

    store.update.assert_called_once_with(
        "user-1", 5,
        box_level=3,
        next_review_date=datetime.date(2025, 2, 4),
        times_correct=2,
        times_incorrect=0,
        last_reviewed_at=NOW,
    )
    assert progress.box_level == 3


def test_initialize_race_returns_winner_unchanged(service, store):
    winner = make_progress(box_level=1)
    store.find_by_user_and_item.side_effect = [None, winner]
    store.create.side_effect = DuplicateProgress("exists")

    result = service.initialize_progress("user-1", 5, True)

    assert result.created is False
    assert result.progress == winner
    store.update.assert_not_called()


def test_duplicate_without_winner_is_reraised(service, store):
    store.find_by_user_and_item.return_value = None
    store.create.side_effect = DuplicateProgress("exists")

    with pytest.raises(DuplicateProgress):
        service.initialize_progress("user-1", 5, False)


def test_study_mode_stats_counts_only_inventory_items(service, store, inventory):
    items = [MagicMock(id=i, item_type="question") for i in (1, 2, 3)]
    inventory.list_items.return_value = items
    inventory.count_items.return_value = 3
    store.get_stats.return_value = ProgressStats(due_count=1, total_count=3, box_distribution=[3, 0, 0, 0, 0])
    # item 9 has progress but is no longer in the inventory
    store.find_by_items.return_value = [make_progress(reviewable_item_id=1), make_progress(reviewable_item_id=9)]

    stats = service.get_study_mode_stats("user-1")

    assert stats.total_count == 3
    assert stats.new_count == 2
    assert stats.due_count == 1
    store.get_stats.assert_called_once_with("user-1", NOW.date())
