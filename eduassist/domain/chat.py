"""Domain models for chat requests, turns and logged conversations."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from eduassist.domain.assistant import AssistantSettings


MAX_SUGGESTIONS = 4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ModeFlags(BaseModel):
    """Optional prompt blocks requested for a single turn."""
    practice: bool = False
    activity_generation: bool = False
    command: bool = False
    simulation: bool = False
    life_connection: bool = False
    study_planning: bool = False

    def enabled(self) -> List[str]:
        return [name for name, value in self.model_dump().items() if value]


class ChatTurn(BaseModel):
    """A prior message in the conversation.

    Clients usually send only role and content; the extracted fields are
    present on assistant turns that went through the postprocessor.
    """
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)
    citations: List[str] = Field(default_factory=list)
    reasoning: str = ""
    suggestions: List[str] = Field(default_factory=list, max_length=MAX_SUGGESTIONS)
    feedback: Optional[Literal[1, -1]] = None


class ChatRequest(BaseModel):
    """Body of POST /chat."""
    message: str = Field(min_length=1)
    assistant_id: str = Field(alias="assistantId", min_length=1)
    session_id: str = Field(default="anonymous", alias="sessionId")
    conversation_history: List[ChatTurn] = Field(default_factory=list, alias="conversationHistory")
    assistant_settings: AssistantSettings = Field(default_factory=AssistantSettings, alias="assistantSettings")
    is_command: bool = Field(default=False, alias="isCommand")
    is_practice_mode: bool = Field(default=False, alias="isPracticeMode")
    is_activity_generation: bool = Field(default=False, alias="isActivityGeneration")
    is_simulation: bool = Field(default=False, alias="isSimulation")
    is_life_connection: bool = Field(default=False, alias="isLifeConnection")
    user_id: Optional[str] = Field(default=None, alias="userId")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "message": "O que é mitose?",
                "assistantId": "8c1d0a52-6f0e-4c1b-9d59-0c4f3f3b1e11",
                "sessionId": "s-42",
                "conversationHistory": [],
                "assistantSettings": {"citationMode": True},
            }
        }

    def mode_flags(self) -> ModeFlags:
        return ModeFlags(
            practice=self.is_practice_mode,
            activity_generation=self.is_activity_generation,
            command=self.is_command,
            simulation=self.is_simulation,
            life_connection=self.is_life_connection,
        )


class ChatResponse(BaseModel):
    """Body returned by POST /chat."""
    response: str
    suggestions: List[str] = Field(default_factory=list, max_length=MAX_SUGGESTIONS)
    citations: List[str] = Field(default_factory=list)
    reasoning: str = ""
    extracted_topic: str = Field(default="", alias="extractedTopic")
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")

    class Config:
        populate_by_name = True


class PostprocessResult(BaseModel):
    """Structured side-channel data pulled out of a raw model reply."""
    text: str
    citations: List[str] = Field(default_factory=list)
    reasoning: str = ""
    extracted_topic: str = ""


class ConversationRecord(BaseModel):
    """A logged exchange in `student_conversations`."""
    id: Optional[str] = None
    assistant_id: str
    session_id: str = "anonymous"
    message: str
    response: str
    sources: List[str] = Field(default_factory=list)
    feedback: Optional[int] = None
    created_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ConversationRecord":
        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            assistant_id=row["assistant_id"],
            session_id=row.get("student_session_id") or "anonymous",
            message=row.get("message") or "",
            response=row.get("response") or "",
            sources=row.get("sources") or [],
            feedback=row.get("feedback"),
            created_at=row.get("created_at") or _utcnow(),
        )

    def to_row(self) -> Dict[str, Any]:
        row = {
            "assistant_id": self.assistant_id,
            "student_session_id": self.session_id,
            "message": self.message,
            "response": self.response,
            "sources": self.sources,
            "feedback": self.feedback,
            "created_at": self.created_at.isoformat(),
        }
        if self.id is not None:
            row["id"] = self.id
        return row


class FeedbackRequest(BaseModel):
    """Thumbs up / down on a logged reply."""
    score: Literal[1, -1]
