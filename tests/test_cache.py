"""Tests for the assistant-context cache."""
import json
from unittest.mock import Mock

import pytest
import redis

from eduassist.core.exceptions import AssistantNotFoundError
from eduassist.infrastructure.redis import CacheManager
from eduassist.services.chat import load_assistant_context


class FakeCache:
    """Dict-backed stand-in exposing the CacheManager interface."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ttl_minutes=None):
        self.data[key] = json.loads(json.dumps(value, default=str))
        return True


class TestCacheManager:

    def test_set_uses_prefix_and_ttl(self):
        client = Mock()
        cache = CacheManager(client, ttl_minutes=5, key_prefix="t:")

        assert cache.set("k", {"a": 1}) is True

        key, ttl, payload = client.setex.call_args.args
        assert key == "t:k"
        assert ttl.total_seconds() == 300
        assert json.loads(payload) == {"a": 1}

    def test_get_decodes_json(self):
        client = Mock()
        client.get.return_value = '{"a": 1}'

        assert CacheManager(client).get("k") == {"a": 1}

    def test_miss(self):
        client = Mock()
        client.get.return_value = None

        assert CacheManager(client).get("k") is None

    def test_redis_errors_are_not_raised(self):
        client = Mock()
        client.get.side_effect = redis.ConnectionError("down")
        client.setex.side_effect = redis.ConnectionError("down")
        client.delete.side_effect = redis.ConnectionError("down")
        cache = CacheManager(client)

        assert cache.get("k") is None
        assert cache.set("k", 1) is False
        assert cache.delete("k") is False


class TestLoadAssistantContext:
    """Store reads behind the cache."""

    def test_second_load_comes_from_cache(self, memory_store, assistant_config):
        cache = FakeCache()
        load_assistant_context(memory_store, assistant_config.id, cache)
        memory_store.assistants.clear()

        config, knowledge = load_assistant_context(memory_store, assistant_config.id, cache)

        assert config.name == "Professora Bio"
        assert [snippet.title for snippet in knowledge] == ["Livro Cap. 7", "Apostila Mitose"]

    def test_unpublished_assistant_is_not_found(self, memory_store, assistant_config):
        memory_store.add_assistant(assistant_config.model_copy(update={"is_published": False}))

        with pytest.raises(AssistantNotFoundError):
            load_assistant_context(memory_store, assistant_config.id)
