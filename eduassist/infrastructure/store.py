"""Persistence port for assistants, knowledge, conversations, reviews and profiles.

Services receive a StudyStore instead of reaching for a global client:
SupabaseStore talks to the managed Postgres tables, InMemoryStore backs
tests and local development without credentials.
"""
import copy
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from eduassist.core.config import settings
from eduassist.core.exceptions import StoreError
from eduassist.core.logging import get_logger
from eduassist.domain.assistant import AssistantConfig, KnowledgeSnippet
from eduassist.domain.chat import ConversationRecord
from eduassist.domain.profile import LearnerProfile
from eduassist.domain.review import ReviewItem

logger = get_logger(__name__)

ASSISTANTS_TABLE = "ai_assistants"
KNOWLEDGE_TABLE = "assistant_knowledge"
CONVERSATIONS_TABLE = "student_conversations"
REVIEWS_TABLE = "spaced_repetition_items"
PROFILES_TABLE = "user_profiles"
ACTIVITIES_TABLE = "user_activities"


class StudyStore(ABC):
    """Row-level persistence operations the services depend on."""

    @abstractmethod
    def get_assistant(self, assistant_id: str) -> Optional[AssistantConfig]:
        ...

    @abstractmethod
    def list_knowledge(self, assistant_id: str) -> List[KnowledgeSnippet]:
        """Snippets in insertion order."""

    @abstractmethod
    def save_conversation(self, record: ConversationRecord) -> ConversationRecord:
        ...

    @abstractmethod
    def get_conversation(self, conversation_id: str) -> Optional[ConversationRecord]:
        ...

    @abstractmethod
    def set_conversation_feedback(self, conversation_id: str, score: int) -> Optional[ConversationRecord]:
        ...

    @abstractmethod
    def list_review_items(self, assistant_id: str, session_id: str) -> List[ReviewItem]:
        ...

    @abstractmethod
    def get_review_item(self, item_id: str) -> Optional[ReviewItem]:
        ...

    @abstractmethod
    def save_review_item(self, item: ReviewItem) -> ReviewItem:
        """Insert when item.id is None, update otherwise."""

    @abstractmethod
    def get_profile(self, user_id: str) -> Optional[LearnerProfile]:
        ...

    @abstractmethod
    def save_profile(self, profile: LearnerProfile) -> LearnerProfile:
        ...

    @abstractmethod
    def record_activity(self, user_id: str, activity_type: str, xp_earned: int, metadata: Dict[str, Any]) -> None:
        ...

    def find_review_item(self, assistant_id: str, session_id: str, topic: str) -> Optional[ReviewItem]:
        """Case-insensitive topic lookup within one assistant session."""
        wanted = topic.strip().lower()
        for item in self.list_review_items(assistant_id, session_id):
            if item.topic.strip().lower() == wanted:
                return item
        return None


class InMemoryStore(StudyStore):
    """Dict-backed store. Rows are deep-copied in and out."""

    def __init__(self):
        self.assistants: Dict[str, AssistantConfig] = {}
        self.knowledge: Dict[str, List[KnowledgeSnippet]] = {}
        self.conversations: Dict[str, ConversationRecord] = {}
        self.review_items: Dict[str, ReviewItem] = {}
        self.profiles: Dict[str, LearnerProfile] = {}
        self.activities: List[Dict[str, Any]] = []

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    def add_assistant(self, config: AssistantConfig) -> AssistantConfig:
        self.assistants[config.id] = config.model_copy(deep=True)
        self.knowledge.setdefault(config.id, [])
        return config

    def add_knowledge(self, assistant_id: str, title: str, content: str) -> KnowledgeSnippet:
        snippet = KnowledgeSnippet(id=self._new_id(), assistant_id=assistant_id, title=title, content=content)
        self.knowledge.setdefault(assistant_id, []).append(snippet)
        return snippet

    def get_assistant(self, assistant_id: str) -> Optional[AssistantConfig]:
        config = self.assistants.get(assistant_id)
        return config.model_copy(deep=True) if config else None

    def list_knowledge(self, assistant_id: str) -> List[KnowledgeSnippet]:
        return [snippet.model_copy() for snippet in self.knowledge.get(assistant_id, [])]

    def save_conversation(self, record: ConversationRecord) -> ConversationRecord:
        saved = record.model_copy(update={"id": record.id or self._new_id()}, deep=True)
        self.conversations[saved.id] = saved
        return saved.model_copy(deep=True)

    def get_conversation(self, conversation_id: str) -> Optional[ConversationRecord]:
        record = self.conversations.get(conversation_id)
        return record.model_copy(deep=True) if record else None

    def set_conversation_feedback(self, conversation_id: str, score: int) -> Optional[ConversationRecord]:
        record = self.conversations.get(conversation_id)
        if record is None:
            return None
        record.feedback = score
        return record.model_copy(deep=True)

    def list_review_items(self, assistant_id: str, session_id: str) -> List[ReviewItem]:
        return [
            item.model_copy(deep=True)
            for item in self.review_items.values()
            if item.assistant_id == assistant_id and item.session_id == session_id
        ]

    def get_review_item(self, item_id: str) -> Optional[ReviewItem]:
        item = self.review_items.get(item_id)
        return item.model_copy(deep=True) if item else None

    def save_review_item(self, item: ReviewItem) -> ReviewItem:
        saved = item.model_copy(update={"id": item.id or self._new_id()}, deep=True)
        self.review_items[saved.id] = saved
        return saved.model_copy(deep=True)

    def get_profile(self, user_id: str) -> Optional[LearnerProfile]:
        profile = self.profiles.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    def save_profile(self, profile: LearnerProfile) -> LearnerProfile:
        self.profiles[profile.user_id] = profile.model_copy(deep=True)
        return profile

    def record_activity(self, user_id: str, activity_type: str, xp_earned: int, metadata: Dict[str, Any]) -> None:
        self.activities.append({
            "user_id": user_id,
            "activity_type": activity_type,
            "xp_earned": xp_earned,
            "metadata": copy.deepcopy(metadata),
            "created_at": datetime.now(timezone.utc).isoformat(),
        })


class SupabaseStore(StudyStore):
    """Store backed by the Supabase Postgres tables."""

    def __init__(self, client):
        self.client = client

    def _execute(self, query, table: str, operation: str) -> List[Dict[str, Any]]:
        try:
            result = query.execute()
        except Exception as e:
            logger.error(f"Supabase {operation} on {table} failed: {e}", exc_info=True)
            raise StoreError(f"Failed to {operation} {table}", table=table) from e
        return result.data or []

    def _first(self, rows: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        return rows[0] if rows else None

    def get_assistant(self, assistant_id: str) -> Optional[AssistantConfig]:
        rows = self._execute(
            self.client.table(ASSISTANTS_TABLE).select("*").eq("id", assistant_id).limit(1),
            ASSISTANTS_TABLE, "select",
        )
        row = self._first(rows)
        return AssistantConfig.from_row(row) if row else None

    def list_knowledge(self, assistant_id: str) -> List[KnowledgeSnippet]:
        rows = self._execute(
            self.client.table(KNOWLEDGE_TABLE)
            .select("*")
            .eq("assistant_id", assistant_id)
            .order("created_at"),
            KNOWLEDGE_TABLE, "select",
        )
        return [KnowledgeSnippet.from_row(row) for row in rows]

    def save_conversation(self, record: ConversationRecord) -> ConversationRecord:
        rows = self._execute(
            self.client.table(CONVERSATIONS_TABLE).insert(record.to_row()),
            CONVERSATIONS_TABLE, "insert",
        )
        row = self._first(rows)
        return ConversationRecord.from_row(row) if row else record

    def get_conversation(self, conversation_id: str) -> Optional[ConversationRecord]:
        rows = self._execute(
            self.client.table(CONVERSATIONS_TABLE).select("*").eq("id", conversation_id).limit(1),
            CONVERSATIONS_TABLE, "select",
        )
        row = self._first(rows)
        return ConversationRecord.from_row(row) if row else None

    def set_conversation_feedback(self, conversation_id: str, score: int) -> Optional[ConversationRecord]:
        rows = self._execute(
            self.client.table(CONVERSATIONS_TABLE).update({"feedback": score}).eq("id", conversation_id),
            CONVERSATIONS_TABLE, "update",
        )
        row = self._first(rows)
        return ConversationRecord.from_row(row) if row else None

    def list_review_items(self, assistant_id: str, session_id: str) -> List[ReviewItem]:
        rows = self._execute(
            self.client.table(REVIEWS_TABLE)
            .select("*")
            .eq("assistant_id", assistant_id)
            .eq("session_id", session_id)
            .order("next_review"),
            REVIEWS_TABLE, "select",
        )
        return [ReviewItem.from_row(row) for row in rows]

    def get_review_item(self, item_id: str) -> Optional[ReviewItem]:
        rows = self._execute(
            self.client.table(REVIEWS_TABLE).select("*").eq("id", item_id).limit(1),
            REVIEWS_TABLE, "select",
        )
        row = self._first(rows)
        return ReviewItem.from_row(row) if row else None

    def save_review_item(self, item: ReviewItem) -> ReviewItem:
        table = self.client.table(REVIEWS_TABLE)
        if item.id is None:
            query = table.insert(item.to_row())
            operation = "insert"
        else:
            query = table.update(item.to_row()).eq("id", item.id)
            operation = "update"
        row = self._first(self._execute(query, REVIEWS_TABLE, operation))
        return ReviewItem.from_row(row) if row else item

    def get_profile(self, user_id: str) -> Optional[LearnerProfile]:
        rows = self._execute(
            self.client.table(PROFILES_TABLE).select("*").eq("user_id", user_id).limit(1),
            PROFILES_TABLE, "select",
        )
        row = self._first(rows)
        return LearnerProfile.from_row(row) if row else None

    def save_profile(self, profile: LearnerProfile) -> LearnerProfile:
        rows = self._execute(
            self.client.table(PROFILES_TABLE).upsert(profile.to_row(), on_conflict="user_id"),
            PROFILES_TABLE, "upsert",
        )
        row = self._first(rows)
        return LearnerProfile.from_row(row) if row else profile

    def record_activity(self, user_id: str, activity_type: str, xp_earned: int, metadata: Dict[str, Any]) -> None:
        self._execute(
            self.client.table(ACTIVITIES_TABLE).insert({
                "user_id": user_id,
                "activity_type": activity_type,
                "xp_earned": xp_earned,
                "metadata": metadata,
            }),
            ACTIVITIES_TABLE, "insert",
        )


_store: Optional[StudyStore] = None


def get_store() -> StudyStore:
    """Process-wide store: Supabase when configured, in-memory otherwise."""
    global _store

    if _store is None:
        if settings.supabase_configured:
            from eduassist.infrastructure.supabase_client import get_supabase_client
            _store = SupabaseStore(get_supabase_client())
            logger.info("Using Supabase store")
        else:
            logger.warning("SUPABASE_URL/SUPABASE_SERVICE_KEY not set, using in-memory store")
            _store = InMemoryStore()

    return _store
