"""
Storage contracts consumed by the review service, and their SQLAlchemy
implementations.

The service only talks to ``ProgressStore`` and ``ItemInventory``. The
SQLAlchemy classes wrap a ``Session``, delegate the queries to
``leitner_review.crud`` and hand back pydantic records, so nothing returned
to the caller is bound to the session.
"""
from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterable, List, Optional, Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from leitner_review import crud
from leitner_review.exceptions import DuplicateProgress, ProgressNotFound, StoreFailure
from leitner_review.schemas import NewProgress, ProgressRecord, ProgressStats, ReviewableItemRecord


class ProgressStore(Protocol):
    def find_by_user_and_item(self, user_id: str, item_id: int) -> Optional[ProgressRecord]: ...

    def create(
        self,
        user_id: str,
        item_id: int,
        box_level: int,
        next_review_date: Optional[date],
        times_correct: int,
        times_incorrect: int,
        last_reviewed_at: Optional[datetime],
    ) -> ProgressRecord: ...

    def create_batch(self, items: Iterable[NewProgress]) -> List[ProgressRecord]: ...

    def update(
        self,
        user_id: str,
        item_id: int,
        box_level: int,
        next_review_date: date,
        times_correct: int,
        times_incorrect: int,
        last_reviewed_at: datetime,
    ) -> ProgressRecord: ...

    def find_all_by_user(self, user_id: str) -> List[ProgressRecord]: ...

    def find_due_for_user(self, user_id: str, as_of: date) -> List[ProgressRecord]: ...

    def find_by_items(self, user_id: str, item_ids: List[int]) -> List[ProgressRecord]: ...

    def get_stats(self, user_id: str, as_of: date, item_ids: Optional[List[int]] = None) -> ProgressStats: ...


class ItemInventory(Protocol):
    def list_items(self, user_id: str, container_id: Optional[int] = None) -> List[ReviewableItemRecord]: ...

    def count_items(self, user_id: str, container_id: Optional[int] = None) -> int: ...

    def get_items_by_ids(self, item_ids: List[int]) -> List[ReviewableItemRecord]: ...

    def find_by_source(self, item_type: str, source_id: int) -> Optional[ReviewableItemRecord]: ...

    def answered_item_ids(self, user_id: str, container_id: int) -> List[int]: ...


def _is_unique_violation(error: IntegrityError) -> bool:
    # PostgreSQL reports unique_violation as SQLSTATE 23505, SQLite in the message
    if getattr(error.orig, "pgcode", None) == "23505":
        return True
    return "unique" in str(error.orig).lower()


@contextmanager
def _store_errors(db: Session, action: str):
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        if _is_unique_violation(e):
            raise DuplicateProgress(f"{action}: progress already exists") from e
        raise StoreFailure(f"{action} failed: {e.orig}") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreFailure(f"{action} failed: {e}") from e


def _to_records(rows) -> List[ProgressRecord]:
    return [ProgressRecord.model_validate(row) for row in rows]


class SqlAlchemyProgressStore:
    """ProgressStore backed by the review_progress table"""

    def __init__(self, db: Session):
        self.db = db

    def find_by_user_and_item(self, user_id, item_id):
        with _store_errors(self.db, "find progress"):
            row = crud.get_progress(self.db, user_id, item_id)
        return ProgressRecord.model_validate(row) if row else None

    def create(self, user_id, item_id, box_level, next_review_date, times_correct, times_incorrect, last_reviewed_at):
        with _store_errors(self.db, "create progress"):
            row = crud.create_progress(
                self.db, user_id, item_id, box_level, next_review_date,
                times_correct, times_incorrect, last_reviewed_at
            )
        return ProgressRecord.model_validate(row)

    def create_batch(self, items):
        rows = [item.model_dump() for item in items]
        with _store_errors(self.db, "create progress batch"):
            created = crud.create_progress_batch(self.db, rows)
        return _to_records(created)

    def update(self, user_id, item_id, box_level, next_review_date, times_correct, times_incorrect, last_reviewed_at):
        with _store_errors(self.db, "update progress"):
            row = crud.update_progress(
                self.db, user_id, item_id, box_level, next_review_date,
                times_correct, times_incorrect, last_reviewed_at
            )
        if row is None:
            raise ProgressNotFound(f"No progress for user {user_id} on item {item_id}")
        return ProgressRecord.model_validate(row)

    def find_all_by_user(self, user_id):
        with _store_errors(self.db, "list progress"):
            return _to_records(crud.get_progress_for_user(self.db, user_id))

    def find_due_for_user(self, user_id, as_of):
        with _store_errors(self.db, "list due progress"):
            return _to_records(crud.get_due_progress(self.db, user_id, as_of))

    def find_by_items(self, user_id, item_ids):
        with _store_errors(self.db, "list progress for items"):
            return _to_records(crud.get_progress_for_items(self.db, user_id, item_ids))

    def get_stats(self, user_id, as_of, item_ids=None):
        with _store_errors(self.db, "progress stats"):
            stats = crud.get_progress_stats(self.db, user_id, as_of, item_ids)
        return ProgressStats(**stats)


class SqlAlchemyItemInventory:
    """ItemInventory backed by the reviewable_items and item_answers tables"""

    def __init__(self, db: Session):
        self.db = db

    def list_items(self, user_id, container_id=None):
        with _store_errors(self.db, "list items"):
            rows = crud.get_items_for_user(self.db, user_id, container_id)
        return [ReviewableItemRecord.model_validate(row) for row in rows]

    def count_items(self, user_id, container_id=None):
        with _store_errors(self.db, "count items"):
            return crud.count_items_for_user(self.db, user_id, container_id)

    def get_items_by_ids(self, item_ids):
        with _store_errors(self.db, "get items"):
            rows = crud.get_items_by_ids(self.db, item_ids)
        return [ReviewableItemRecord.model_validate(row) for row in rows]

    def find_by_source(self, item_type, source_id):
        with _store_errors(self.db, "find item"):
            row = crud.get_item_by_source(self.db, item_type, source_id)
        return ReviewableItemRecord.model_validate(row) if row else None

    def answered_item_ids(self, user_id, container_id):
        with _store_errors(self.db, "list answered items"):
            return crud.get_answered_item_ids(self.db, user_id, container_id)
