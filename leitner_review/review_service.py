from __future__ import annotations

import random
from datetime import date, datetime, timezone
from typing import Callable, List, Optional, Union

from leitner_review.exceptions import (
    DuplicateProgress,
    InvalidReviewRequest,
    ItemNotFound,
    UserNotAuthorized,
)
from leitner_review.leitner import MIN_BOX_LEVEL, LeitnerBoxes
from leitner_review.logger import get_logger, log_progress_change
from leitner_review.repositories import ItemInventory, ProgressStore
from leitner_review.schemas import (
    ContainerProgress,
    ContainerProgressSummary,
    InitializeResult,
    NewProgress,
    ProgressRecord,
    ReviewableItemRecord,
    ReviewItem,
    ReviewStats,
    StudyModeStats,
    TermProgress,
    TypeBreakdown,
)

LOG = get_logger()

STUDY_MODES = ("due", "new", "random")
ITEM_TYPE_FILTERS = ("all", "question", "flashcard")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _validate_user_id(user_id: str) -> None:
    if not isinstance(user_id, str) or not user_id.strip():
        raise InvalidReviewRequest('user_id is required')


def _validate_item_id(item_id: int) -> None:
    if isinstance(item_id, bool) or not isinstance(item_id, int) or item_id <= 0:
        raise InvalidReviewRequest(f'item_id must be a positive integer, got {item_id!r}')


def _as_date(moment: Union[date, datetime]) -> date:
    return moment.date() if isinstance(moment, datetime) else moment


class ReviewService:
    """
    Review use-cases on top of the Leitner box model.

    The clock is injected; every operation also accepts an explicit
    ``now``/``as_of`` that takes precedence over it.
    """

    def __init__(
        self,
        store: ProgressStore,
        inventory: ItemInventory,
        clock: Callable[[], datetime] = utc_now,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.inventory = inventory
        self.clock = clock
        self.rng = rng or random.Random()

    def _now(self, now: Optional[datetime]) -> datetime:
        return now if now is not None else self.clock()

    def _as_of(self, as_of: Optional[Union[date, datetime]]) -> date:
        return _as_date(as_of if as_of is not None else self.clock())

    # -- answering -------------------------------------------------------

    def process_answer(self, user_id: str, item_id: int, is_correct: bool, now: Optional[datetime] = None) -> ProgressRecord:
        """Record an answer given during a review session."""
        _validate_user_id(user_id)
        _validate_item_id(item_id)
        now = self._now(now)

        existing = self.store.find_by_user_and_item(user_id, item_id)
        if existing is not None:
            return self._apply_answer(existing, is_correct, now)

        # First encounter in a review session always starts in box 1
        try:
            progress = self.store.create(
                user_id,
                item_id,
                box_level=MIN_BOX_LEVEL,
                next_review_date=LeitnerBoxes.next_review_date(MIN_BOX_LEVEL, now),
                times_correct=1 if is_correct else 0,
                times_incorrect=0 if is_correct else 1,
                last_reviewed_at=now,
            )
        except DuplicateProgress:
            raced = self.store.find_by_user_and_item(user_id, item_id)
            if raced is None:
                raise
            LOG.info('progress_create_race', extra={'user_id': user_id, 'item_id': item_id})
            return self._apply_answer(raced, is_correct, now)

        log_progress_change(user_id, item_id, 'created', progress.box_level, progress.next_review_date)
        return progress

    def _apply_answer(self, existing: ProgressRecord, is_correct: bool, now: datetime) -> ProgressRecord:
        update = LeitnerBoxes.apply_answer(
            existing.box_level,
            is_correct,
            existing.times_correct,
            existing.times_incorrect,
            now,
        )
        progress = self.store.update(existing.user_id, existing.reviewable_item_id, **update._asdict())
        log_progress_change(existing.user_id, existing.reviewable_item_id, 'updated', progress.box_level, progress.next_review_date)
        return progress

    def initialize_progress(self, user_id: str, item_id: int, is_correct: bool, now: Optional[datetime] = None) -> InitializeResult:
        """
        Start tracking an item answered while first learning the material.

        Existing progress is returned untouched, so review history built up in
        review sessions is never overwritten. New progress starts in box 2 for
        a correct answer and box 1 for an incorrect one.
        """
        _validate_user_id(user_id)
        _validate_item_id(item_id)
        now = self._now(now)

        existing = self.store.find_by_user_and_item(user_id, item_id)
        if existing is not None:
            return InitializeResult(progress=existing, created=False)

        box_level = LeitnerBoxes.initial_box_level(is_correct)
        try:
            progress = self.store.create(
                user_id,
                item_id,
                box_level=box_level,
                next_review_date=LeitnerBoxes.next_review_date(box_level, now),
                times_correct=1 if is_correct else 0,
                times_incorrect=0 if is_correct else 1,
                last_reviewed_at=now,
            )
        except DuplicateProgress:
            raced = self.store.find_by_user_and_item(user_id, item_id)
            if raced is None:
                raise
            return InitializeResult(progress=raced, created=False)

        log_progress_change(user_id, item_id, 'initialized', progress.box_level, progress.next_review_date)
        return InitializeResult(progress=progress, created=True)

    def backfill_progress_for_container(self, user_id: str, container_id: int, now: Optional[datetime] = None) -> List[ProgressRecord]:
        """Enroll every answered-but-untracked item of a container in box 1."""
        _validate_user_id(user_id)
        if container_id is None:
            raise InvalidReviewRequest('container_id is required')
        now = self._now(now)

        answered = self.inventory.answered_item_ids(user_id, container_id)
        if not answered:
            return []

        tracked = {p.reviewable_item_id for p in self.store.find_by_items(user_id, answered)}
        missing = [item_id for item_id in answered if item_id not in tracked]
        if not missing:
            return []

        next_review_date = LeitnerBoxes.next_review_date(MIN_BOX_LEVEL, now)
        created = self.store.create_batch([
            NewProgress(
                user_id=user_id,
                reviewable_item_id=item_id,
                box_level=MIN_BOX_LEVEL,
                next_review_date=next_review_date,
            )
            for item_id in missing
        ])
        LOG.info('progress_backfilled', extra={'user_id': user_id, 'container_id': container_id, 'count': len(created)})
        return created

    # -- statistics ------------------------------------------------------

    def _count_new(self, user_id: str, items: List[ReviewableItemRecord]) -> int:
        if not items:
            return 0
        tracked = {p.reviewable_item_id for p in self.store.find_by_items(user_id, [i.id for i in items])}
        return sum(1 for item in items if item.id not in tracked)

    def get_study_mode_stats(self, user_id: str, as_of: Optional[Union[date, datetime]] = None) -> StudyModeStats:
        _validate_user_id(user_id)
        as_of = self._as_of(as_of)

        stats = self.store.get_stats(user_id, as_of)
        total_count = self.inventory.count_items(user_id)
        new_count = 0
        if total_count:
            new_count = self._count_new(user_id, self.inventory.list_items(user_id))
        return StudyModeStats(
            due_count=stats.due_count,
            new_count=new_count,
            total_count=total_count,
        )

    def get_review_stats(
        self,
        user_id: str,
        container_id: Optional[int] = None,
        as_of: Optional[Union[date, datetime]] = None,
    ) -> ReviewStats:
        """Due/new/total counts plus the box histogram, optionally for one container."""
        _validate_user_id(user_id)
        as_of = self._as_of(as_of)

        items = self.inventory.list_items(user_id, container_id)
        scope = [item.id for item in items] if container_id is not None else None
        stats = self.store.get_stats(user_id, as_of, scope)

        by_type = TypeBreakdown(
            questions=sum(1 for item in items if item.item_type == 'question'),
            flashcards=sum(1 for item in items if item.item_type == 'flashcard'),
        )
        return ReviewStats(
            due_count=stats.due_count,
            new_count=self._count_new(user_id, items),
            total_count=self.inventory.count_items(user_id, container_id),
            box_distribution=stats.box_distribution,
            by_type=by_type,
        )

    def get_container_progress(self, user_id: str, container_id: int) -> ContainerProgress:
        _validate_user_id(user_id)
        items = self.inventory.list_items(user_id, container_id)
        if not items:
            return ContainerProgress(terms=[], summary=ContainerProgressSummary())

        progress_by_item = {p.reviewable_item_id: p for p in self.store.find_by_items(user_id, [i.id for i in items])}
        terms = []
        for item in items:
            progress = progress_by_item.get(item.id)
            terms.append(TermProgress(
                item_type=item.item_type,
                item_id=item.source_id,
                mastery_status=LeitnerBoxes.mastery_status(progress.box_level if progress else None),
            ))

        summary = ContainerProgressSummary(
            mastered=sum(1 for t in terms if t.mastery_status == 'mastered'),
            learning=sum(1 for t in terms if t.mastery_status == 'learning'),
            not_started=sum(1 for t in terms if t.mastery_status == 'not_started'),
            total=len(terms),
        )
        return ContainerProgress(terms=terms, summary=summary)

    # -- selection -------------------------------------------------------

    def resolve_item(self, user_id: str, item_type: str, source_id: int) -> ReviewableItemRecord:
        """Map a question or flashcard id to the user's reviewable item."""
        _validate_user_id(user_id)
        if item_type not in ('question', 'flashcard'):
            raise InvalidReviewRequest(f'Unknown item type: {item_type!r}')
        _validate_item_id(source_id)

        item = self.inventory.find_by_source(item_type, source_id)
        if item is None:
            raise ItemNotFound(f'No reviewable item for {item_type} {source_id}')
        if item.user_id != user_id:
            raise UserNotAuthorized(f'{item_type} {source_id} does not belong to user {user_id}')
        return item

    def get_item(self, user_id: str, item_id: int) -> ReviewableItemRecord:
        """Load one of the user's reviewable items by its id."""
        _validate_user_id(user_id)
        _validate_item_id(item_id)

        items = self.inventory.get_items_by_ids([item_id])
        if not items:
            raise ItemNotFound(f'No reviewable item {item_id}')
        item = items[0]
        if item.user_id != user_id:
            raise UserNotAuthorized(f'Item {item_id} does not belong to user {user_id}')
        return item

    def get_items_for_review(
        self,
        user_id: str,
        mode: str = 'due',
        item_type: str = 'all',
        container_id: Optional[int] = None,
        limit: Optional[int] = None,
        as_of: Optional[Union[date, datetime]] = None,
    ) -> List[ReviewItem]:
        """
        Pick items for a study session.

        ``due`` returns due items, lowest box first; ``new`` returns items
        never answered; ``random`` returns a shuffled sample of everything in
        scope along with any progress it has.
        """
        _validate_user_id(user_id)
        if mode not in STUDY_MODES:
            raise InvalidReviewRequest(f'Unknown study mode: {mode!r}')
        if item_type not in ITEM_TYPE_FILTERS:
            raise InvalidReviewRequest(f'Unknown item type filter: {item_type!r}')
        if limit is not None and limit < 0:
            raise InvalidReviewRequest(f'limit must not be negative, got {limit}')

        if mode == 'due':
            return self._due_items(user_id, item_type, container_id, limit, self._as_of(as_of))
        if mode == 'new':
            return self._new_items(user_id, item_type, container_id, limit)
        return self._random_items(user_id, item_type, container_id, limit)

    def _due_items(self, user_id, item_type, container_id, limit, as_of) -> List[ReviewItem]:
        due = self.store.find_due_for_user(user_id, as_of)
        if not due:
            return []

        # struggling items first
        due.sort(key=lambda p: p.box_level)
        if limit:
            due = due[:limit]

        items_by_id = {item.id: item for item in self.inventory.get_items_by_ids([p.reviewable_item_id for p in due])}
        result = []
        for progress in due:
            item = items_by_id.get(progress.reviewable_item_id)
            if item is None:
                continue
            if container_id is not None and item.container_id != container_id:
                continue
            if item_type != 'all' and item.item_type != item_type:
                continue
            result.append(ReviewItem(item=item, progress=progress))
        return result

    def _scoped_items(self, user_id, item_type, container_id) -> List[ReviewableItemRecord]:
        items = self.inventory.list_items(user_id, container_id)
        if item_type != 'all':
            items = [item for item in items if item.item_type == item_type]
        return items

    def _new_items(self, user_id, item_type, container_id, limit) -> List[ReviewItem]:
        items = self._scoped_items(user_id, item_type, container_id)
        if not items:
            return []

        tracked = {p.reviewable_item_id for p in self.store.find_by_items(user_id, [i.id for i in items])}
        fresh = [item for item in items if item.id not in tracked]
        if limit:
            fresh = fresh[:limit]
        return [ReviewItem(item=item) for item in fresh]

    def _random_items(self, user_id, item_type, container_id, limit) -> List[ReviewItem]:
        items = self._scoped_items(user_id, item_type, container_id)
        if not items:
            return []

        self.rng.shuffle(items)
        if limit:
            items = items[:limit]

        progress_by_item = {p.reviewable_item_id: p for p in self.store.find_by_items(user_id, [i.id for i in items])}
        return [ReviewItem(item=item, progress=progress_by_item.get(item.id)) for item in items]
