"""Pytest configuration and shared fixtures."""
import os

# Must be set before eduassist.core.config is imported
os.environ["ENVIRONMENT"] = "test"
os.environ["REDIS_ENABLED"] = "false"
os.environ.pop("SUPABASE_URL", None)

import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

from eduassist.domain.assistant import AssistantConfig
from eduassist.infrastructure.store import InMemoryStore

API = "/api/v1"
ASSISTANT_ID = "asst-bio"
SESSION_ID = "sess-42"


@pytest.fixture
def assistant_config():
    """A published biology assistant with default guardrails."""
    return AssistantConfig(
        id=ASSISTANT_ID,
        name="Professora Bio",
        subject="Biologia",
        personality="socratic",
        creativity_level=20,
        citation_mode=True,
        transparency_mode=True,
        instructions="Responda sempre em português.",
    )


@pytest.fixture
def memory_store(assistant_config):
    """In-memory store seeded with one assistant and two knowledge snippets."""
    store = InMemoryStore()
    store.add_assistant(assistant_config)
    store.add_knowledge(ASSISTANT_ID, "Livro Cap. 7", "A célula é a unidade básica da vida.")
    store.add_knowledge(ASSISTANT_ID, "Apostila Mitose", "A mitose gera duas células idênticas.")
    return store


@pytest.fixture
def mock_llm():
    """Patch the Gemini call used by the chat pipeline."""
    with patch("eduassist.services.chat.generate_reply", new_callable=AsyncMock) as mock:
        mock.return_value = "Resposta de teste."
        yield mock


@pytest.fixture
def test_client(memory_store):
    """FastAPI test client wired to the in-memory store, no Redis."""
    from main import app
    from eduassist.api.routes import get_context_cache, get_study_store

    app.dependency_overrides[get_study_store] = lambda: memory_store
    app.dependency_overrides[get_context_cache] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()
