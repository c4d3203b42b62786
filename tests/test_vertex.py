"""Tests for the Gemini client wrapper."""
import asyncio
import time
from unittest.mock import patch

import pytest

from eduassist.core.config import settings
from eduassist.core.exceptions import LLMServiceError
from eduassist.infrastructure import vertex
from eduassist.utils.text import sanitize_text


class TestGenerateReply:
    """Timeout, failure and cleanup around the blocking SDK call."""

    def test_reply_is_sanitized(self):
        with patch.object(vertex, "_generate_blocking", return_value="Mitose  \r\n\n\n\nMeiose ") as mock_call:
            reply = asyncio.run(vertex.generate_reply("prompt"))

        assert reply == "Mitose\n\nMeiose"
        mock_call.assert_called_once_with("prompt", settings.gemini_model)

    def test_model_name_override(self):
        with patch.object(vertex, "_generate_blocking", return_value="ok") as mock_call:
            asyncio.run(vertex.generate_reply("prompt", model_name="gemini-custom"))

        mock_call.assert_called_once_with("prompt", "gemini-custom")

    def test_sdk_error_becomes_llm_error(self):
        with patch.object(vertex, "_generate_blocking", side_effect=ValueError("response blocked")):
            with pytest.raises(LLMServiceError) as exc_info:
                asyncio.run(vertex.generate_reply("prompt"))

        assert "response blocked" in exc_info.value.message
        assert exc_info.value.status_code == 502

    def test_empty_reply_is_an_error(self):
        with patch.object(vertex, "_generate_blocking", return_value="  \n "):
            with pytest.raises(LLMServiceError):
                asyncio.run(vertex.generate_reply("prompt"))

    def test_timeout(self, monkeypatch):
        monkeypatch.setattr(settings, "llm_timeout_seconds", 0.05)

        def slow(prompt, model_name):
            time.sleep(0.5)
            return "tarde demais"

        with patch.object(vertex, "_generate_blocking", side_effect=slow):
            with pytest.raises(LLMServiceError) as exc_info:
                asyncio.run(vertex.generate_reply("prompt"))

        assert "did not answer" in exc_info.value.message


class TestSanitizeText:

    def test_none(self):
        assert sanitize_text(None) == ""

    def test_control_characters_removed(self):
        assert sanitize_text("a\x00b\x07c") == "abc"

    def test_emoji_and_accents_kept(self):
        assert sanitize_text("🧠 Como cheguei a esta resposta: ação") == "🧠 Como cheguei a esta resposta: ação"
