"""Spaced-repetition review items: seeding, listing and rating."""
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from eduassist.core.exceptions import NotFoundError
from eduassist.core.logging import get_logger
from eduassist.domain.review import Difficulty, ReviewItem
from eduassist.infrastructure.store import StudyStore
from eduassist.services.scheduler import schedule_next

logger = get_logger(__name__)


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def seed_topic(
    store: StudyStore,
    assistant_id: str,
    session_id: str,
    topic: str,
    now: Optional[datetime] = None,
) -> Tuple[ReviewItem, bool]:
    """Create a review item for a topic unless the session already has one.

    New items start as "medium" with streak 0 and are first due one day out.

    Returns:
        (item, created)
    """
    topic = topic.strip()
    existing = store.find_review_item(assistant_id, session_id, topic)
    if existing is not None:
        logger.debug(f"Review topic already tracked: {topic}", extra={"session_id": session_id})
        return existing, False

    now = _now(now)
    schedule = schedule_next(Difficulty.MEDIUM, 0, now=now)
    item = store.save_review_item(ReviewItem(
        assistant_id=assistant_id,
        session_id=session_id,
        topic=topic,
        last_reviewed=now,
        next_review=schedule.next_review_date,
        difficulty=Difficulty.MEDIUM,
        streak=0,
    ))
    logger.info(
        f"Review item created for topic '{topic}'",
        extra={"assistant_id": assistant_id, "session_id": session_id},
    )
    return item, True


def list_items(store: StudyStore, assistant_id: str, session_id: str) -> List[ReviewItem]:
    return sorted(store.list_review_items(assistant_id, session_id), key=lambda item: item.next_review)


def list_due(
    store: StudyStore,
    assistant_id: str,
    session_id: str,
    now: Optional[datetime] = None,
) -> List[ReviewItem]:
    """Items whose next review is at or before `now`."""
    now = _now(now)
    return [item for item in list_items(store, assistant_id, session_id) if item.is_due(now)]


def rate_item(
    store: StudyStore,
    item_id: str,
    difficulty: Difficulty,
    now: Optional[datetime] = None,
) -> Tuple[ReviewItem, int]:
    """Apply a student's rating to a review item.

    Returns:
        (updated item, whole days until the next review)

    Raises:
        NotFoundError: unknown item id
    """
    item = store.get_review_item(item_id)
    if item is None:
        raise NotFoundError("ReviewItem", item_id)

    now = _now(now)
    new_streak = schedule_next(difficulty, item.streak, now=now).new_streak
    # Interval is taken from the post-rating streak: "hard" always comes back in one day
    next_review = schedule_next(difficulty, new_streak, now=now).next_review_date
    updated = store.save_review_item(item.model_copy(update={
        "last_reviewed": now,
        "next_review": next_review,
        "difficulty": Difficulty(difficulty),
        "streak": new_streak,
    }))

    days_until_next = (next_review - now).days
    logger.info(
        f"Review '{item.topic}' rated {Difficulty(difficulty).value}, next in {days_until_next} days",
        extra={"session_id": item.session_id},
    )
    return updated, days_until_next
