import datetime
import random

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from leitner_review import database
from leitner_review.crud import create_flashcard_items, create_question_items
from leitner_review.repositories import SqlAlchemyItemInventory, SqlAlchemyProgressStore
from leitner_review.review_service import ReviewService

NOW = datetime.datetime(2025, 1, 28, 9, 30)


@pytest.fixture
def db(tmp_path, monkeypatch):
    # Use a temporary SQLite DB, and rebind engine/session to it
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setattr(database, "engine", engine)
    monkeypatch.setattr(database, "SessionLocal", sessionmaker(bind=engine, expire_on_commit=False))
    database.init_db()
    session = database.SessionLocal()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def store(db):
    return SqlAlchemyProgressStore(db)


@pytest.fixture
def inventory(db):
    return SqlAlchemyItemInventory(db)


@pytest.fixture
def service(store, inventory):
    return ReviewService(store, inventory, clock=lambda: NOW, rng=random.Random(7))


@pytest.fixture
def make_items(db):
    """Create reviewable items and return their ids, questions first."""
    def _make(user_id="user-1", container_id=1, questions=(), flashcards=()):
        items = create_question_items(db, user_id, container_id, list(questions))
        items += create_flashcard_items(db, user_id, container_id, list(flashcards))
        return [item.id for item in items]
    return _make
