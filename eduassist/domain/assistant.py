"""Domain models for educator-configured assistants and their knowledge."""
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class Personality(str, Enum):
    """Tone presets an educator can pick for an assistant."""
    FRIENDLY = "friendly"
    FORMAL = "formal"
    SOCRATIC = "socratic"
    CREATIVE = "creative"


class ContentType(str, Enum):
    FILE = "file"
    TEXT = "text"
    URL = "url"
    YOUTUBE = "youtube"


DEFAULT_CREATIVITY_LEVEL = 50


class AssistantSettings(BaseModel):
    """Per-request guardrail overrides sent by the chat client.

    Any field left as None keeps the value stored on the assistant.
    """
    creativity_level: Optional[int] = Field(default=None, ge=0, le=100, alias="creativityLevel")
    citation_mode: Optional[bool] = Field(default=None, alias="citationMode")
    anti_cheat_mode: Optional[bool] = Field(default=None, alias="antiCheatMode")
    transparency_mode: Optional[bool] = Field(default=None, alias="transparencyMode")

    class Config:
        populate_by_name = True


class AssistantConfig(BaseModel):
    """An assistant as read by the prompt composer.

    `personality` is a plain string: rows written by older clients may hold
    values outside Personality, and those simply get no tone sentence.
    """
    id: str
    name: str
    subject: str
    personality: str = Personality.FRIENDLY.value
    creativity_level: int = Field(default=DEFAULT_CREATIVITY_LEVEL, ge=0, le=100)
    citation_mode: bool = False
    anti_cheat_mode: bool = False
    transparency_mode: bool = False
    instructions: str = ""
    welcome_message: Optional[str] = None
    is_published: bool = True

    class Config:
        json_schema_extra = {
            "example": {
                "id": "8c1d0a52-6f0e-4c1b-9d59-0c4f3f3b1e11",
                "name": "Professora Bio",
                "subject": "Biologia",
                "personality": "socratic",
                "creativity_level": 20,
                "citation_mode": True,
                "anti_cheat_mode": False,
                "transparency_mode": True,
                "instructions": "Responda sempre em português.",
            }
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "AssistantConfig":
        """Build a config from an `ai_assistants` row and its guardrails blob."""
        guardrails = row.get("guardrails") or {}
        return cls(
            id=str(row["id"]),
            name=row.get("name") or "Assistente",
            subject=row.get("subject") or "",
            personality=row.get("personality") or Personality.FRIENDLY.value,
            creativity_level=guardrails.get("creativityLevel", DEFAULT_CREATIVITY_LEVEL),
            citation_mode=bool(guardrails.get("citationMode", False)),
            anti_cheat_mode=bool(guardrails.get("antiCheatMode", False)),
            transparency_mode=bool(guardrails.get("transparencyMode", False)),
            instructions=guardrails.get("instructions") or "",
            welcome_message=row.get("welcome_message"),
            is_published=row.get("is_published", True),
        )

    def with_overrides(self, overrides: Optional[AssistantSettings]) -> "AssistantConfig":
        """Return a copy with any non-None request settings applied."""
        if overrides is None:
            return self
        update = overrides.model_dump(exclude_none=True)
        return self.model_copy(update=update) if update else self


class KnowledgeSnippet(BaseModel):
    """One titled unit of reference text injected into every prompt."""
    title: str
    content: str
    id: Optional[str] = None
    assistant_id: Optional[str] = None
    content_type: str = ContentType.TEXT.value

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "KnowledgeSnippet":
        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            assistant_id=row.get("assistant_id"),
            title=row.get("title") or "",
            content=row.get("content") or "",
            content_type=row.get("content_type") or ContentType.TEXT.value,
        )
