"""Tests for review item seeding, listing and rating."""
from datetime import datetime, timedelta, timezone

import pytest

from eduassist.core.exceptions import NotFoundError
from eduassist.domain.review import Difficulty
from eduassist.infrastructure.store import InMemoryStore
from eduassist.services import reviews

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return InMemoryStore()


class TestSeedTopic:
    """Creating items from extracted topics."""

    def test_new_topic_starts_medium_due_tomorrow(self, store):
        item, created = reviews.seed_topic(store, "a1", "s1", "  Célula ", now=NOW)

        assert created is True
        assert item.id is not None
        assert item.topic == "Célula"
        assert item.difficulty == Difficulty.MEDIUM
        assert item.streak == 0
        assert item.last_reviewed == NOW
        assert item.next_review == NOW + timedelta(days=1)

    def test_duplicate_topic_in_session_is_not_recreated(self, store):
        first, _ = reviews.seed_topic(store, "a1", "s1", "Célula", now=NOW)

        second, created = reviews.seed_topic(store, "a1", "s1", "célula", now=NOW)

        assert created is False
        assert second.id == first.id
        assert len(store.review_items) == 1

    def test_same_topic_in_other_session_is_separate(self, store):
        reviews.seed_topic(store, "a1", "s1", "Célula", now=NOW)
        reviews.seed_topic(store, "a1", "s2", "Célula", now=NOW)

        assert len(store.review_items) == 2


class TestListing:
    """Ordering and due filtering."""

    def test_items_sorted_by_next_review(self, store):
        late, _ = reviews.seed_topic(store, "a1", "s1", "Mitose", now=NOW + timedelta(days=3))
        early, _ = reviews.seed_topic(store, "a1", "s1", "Célula", now=NOW)

        items = reviews.list_items(store, "a1", "s1")

        assert [item.id for item in items] == [early.id, late.id]

    def test_due_only_returns_past_items(self, store):
        reviews.seed_topic(store, "a1", "s1", "Célula", now=NOW - timedelta(days=2))
        reviews.seed_topic(store, "a1", "s1", "Mitose", now=NOW)

        due = reviews.list_due(store, "a1", "s1", now=NOW)

        assert [item.topic for item in due] == ["Célula"]


class TestRateItem:
    """Rescheduling after a rating."""

    def test_easy_rating_schedules_from_new_streak(self, store):
        item, _ = reviews.seed_topic(store, "a1", "s1", "Célula", now=NOW)

        updated, days = reviews.rate_item(store, item.id, Difficulty.EASY, now=NOW)

        assert days == 2
        assert updated.streak == 1
        assert updated.difficulty == Difficulty.EASY
        assert updated.next_review == NOW + timedelta(days=2)

    def test_consecutive_ratings_grow_interval(self, store):
        item, _ = reviews.seed_topic(store, "a1", "s1", "Célula", now=NOW)
        for _ in range(3):
            reviews.rate_item(store, item.id, "easy", now=NOW)

        _updated, days = reviews.rate_item(store, item.id, "easy", now=NOW)

        assert days == 16

    def test_hard_rating_resets_streak(self, store):
        item, _ = reviews.seed_topic(store, "a1", "s1", "Célula", now=NOW)
        reviews.rate_item(store, item.id, "easy", now=NOW)

        updated, _days = reviews.rate_item(store, item.id, "hard", now=NOW)

        assert updated.streak == 0
        assert store.get_review_item(item.id).streak == 0

    def test_hard_after_long_streak_is_due_next_day(self, store):
        item, _ = reviews.seed_topic(store, "a1", "s1", "Célula", now=NOW)
        for _ in range(5):
            reviews.rate_item(store, item.id, "easy", now=NOW)

        updated, days = reviews.rate_item(store, item.id, "hard", now=NOW)

        assert days == 1
        assert updated.streak == 0
        assert updated.next_review == NOW + timedelta(days=1)

    def test_medium_rating_floors_fractional_interval(self, store):
        item, _ = reviews.seed_topic(store, "a1", "s1", "Célula", now=NOW)
        for _ in range(2):
            reviews.rate_item(store, item.id, "medium", now=NOW)

        updated, days = reviews.rate_item(store, item.id, "medium", now=NOW)

        assert updated.streak == 3
        assert days == 5

    def test_unknown_item(self, store):
        with pytest.raises(NotFoundError):
            reviews.rate_item(store, "missing", "easy", now=NOW)
