"""Tests for the persistence port and row mapping."""
from datetime import datetime, timezone
from unittest.mock import MagicMock, Mock

import pytest

from eduassist.core.exceptions import StoreError
from eduassist.domain.assistant import AssistantConfig
from eduassist.domain.chat import ConversationRecord
from eduassist.domain.profile import LearnerProfile
from eduassist.domain.review import ReviewItem
from eduassist.infrastructure.store import (
    ASSISTANTS_TABLE,
    PROFILES_TABLE,
    REVIEWS_TABLE,
    InMemoryStore,
    SupabaseStore,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_client(rows=None, error=None):
    """Supabase client double whose query builder chains onto itself."""
    query = MagicMock()
    for method in ("select", "eq", "limit", "order", "insert", "update", "upsert"):
        getattr(query, method).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = Mock(data=rows or [])

    client = Mock()
    client.table.return_value = query
    return client, query


class TestRowMapping:
    """Rows as stored in Postgres."""

    def test_assistant_from_row_reads_guardrails(self):
        row = {
            "id": 7,
            "name": "Tutor Hist",
            "subject": "História",
            "personality": "formal",
            "guardrails": {
                "creativityLevel": 80,
                "citationMode": True,
                "antiCheatMode": True,
                "instructions": "Cite datas.",
            },
            "is_published": True,
        }

        config = AssistantConfig.from_row(row)

        assert config.id == "7"
        assert config.creativity_level == 80
        assert config.citation_mode is True
        assert config.anti_cheat_mode is True
        assert config.transparency_mode is False
        assert config.instructions == "Cite datas."

    def test_assistant_from_row_defaults_without_guardrails(self):
        config = AssistantConfig.from_row({"id": "a", "name": "X", "subject": "Y"})

        assert config.creativity_level == 50
        assert config.personality == "friendly"

    def test_conversation_row_uses_student_session_column(self):
        record = ConversationRecord(assistant_id="a1", session_id="s1", message="oi", response="olá")

        row = record.to_row()

        assert row["student_session_id"] == "s1"
        assert ConversationRecord.from_row({**row, "id": "c1"}).session_id == "s1"


class TestInMemoryStore:
    """Dict-backed store behaviour."""

    def test_knowledge_keeps_insertion_order(self, memory_store, assistant_config):
        titles = [snippet.title for snippet in memory_store.list_knowledge(assistant_config.id)]

        assert titles == ["Livro Cap. 7", "Apostila Mitose"]

    def test_returned_rows_are_copies(self, memory_store, assistant_config):
        config = memory_store.get_assistant(assistant_config.id)
        config.name = "Alterado"

        assert memory_store.get_assistant(assistant_config.id).name == "Professora Bio"

    def test_save_conversation_assigns_id(self):
        store = InMemoryStore()

        saved = store.save_conversation(ConversationRecord(assistant_id="a1", message="m", response="r"))

        assert store.get_conversation(saved.id).message == "m"

    def test_feedback_on_unknown_conversation(self):
        assert InMemoryStore().set_conversation_feedback("nope", 1) is None

    def test_find_review_item_is_case_insensitive(self):
        store = InMemoryStore()
        store.save_review_item(ReviewItem(
            assistant_id="a1", session_id="s1", topic="Célula",
            last_reviewed=NOW, next_review=NOW,
        ))

        assert store.find_review_item("a1", "s1", " CÉLULA ") is not None
        assert store.find_review_item("a1", "s2", "Célula") is None


class TestSupabaseStore:
    """Query building against a mocked Supabase client."""

    def test_get_assistant(self):
        client, query = make_client(rows=[{"id": "a1", "name": "Bio", "subject": "Biologia"}])
        store = SupabaseStore(client)

        config = store.get_assistant("a1")

        client.table.assert_called_with(ASSISTANTS_TABLE)
        query.eq.assert_called_with("id", "a1")
        assert config.name == "Bio"

    def test_missing_assistant(self):
        client, _query = make_client(rows=[])

        assert SupabaseStore(client).get_assistant("a1") is None

    def test_insert_review_item(self):
        row = {
            "id": "r1", "assistant_id": "a1", "session_id": "s1", "topic": "Célula",
            "last_reviewed": NOW.isoformat(), "next_review": NOW.isoformat(),
            "difficulty": "medium", "streak": 0,
        }
        client, query = make_client(rows=[row])
        item = ReviewItem(assistant_id="a1", session_id="s1", topic="Célula", last_reviewed=NOW, next_review=NOW)

        saved = SupabaseStore(client).save_review_item(item)

        client.table.assert_called_with(REVIEWS_TABLE)
        query.insert.assert_called_once()
        assert saved.id == "r1"

    def test_update_review_item(self):
        client, query = make_client(rows=[])
        item = ReviewItem(
            id="r1", assistant_id="a1", session_id="s1", topic="Célula",
            last_reviewed=NOW, next_review=NOW, streak=2,
        )

        saved = SupabaseStore(client).save_review_item(item)

        query.update.assert_called_once()
        query.eq.assert_called_with("id", "r1")
        assert saved == item

    def test_profile_upsert_on_user_id(self):
        client, query = make_client(rows=[])

        SupabaseStore(client).save_profile(LearnerProfile(user_id="u1"))

        client.table.assert_called_with(PROFILES_TABLE)
        assert query.upsert.call_args.kwargs["on_conflict"] == "user_id"

    def test_query_failure_raises_store_error(self):
        client, _query = make_client(error=RuntimeError("connection reset"))

        with pytest.raises(StoreError) as exc_info:
            SupabaseStore(client).list_knowledge("a1")

        assert exc_info.value.details["table"] == "assistant_knowledge"
