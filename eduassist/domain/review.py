"""Domain models for spaced-repetition review items."""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class Difficulty(str, Enum):
    """How hard the student found a review."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ReviewItem(BaseModel):
    """A topic scheduled for spaced review.

    Created when a reply carries a review-topic tag, then mutated every time
    the student rates a review. Items are never deleted.
    """
    id: Optional[str] = None
    assistant_id: str
    session_id: str
    topic: str
    last_reviewed: datetime
    next_review: datetime
    difficulty: Difficulty = Difficulty.MEDIUM
    streak: int = Field(default=0, ge=0)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "r-1",
                "assistant_id": "8c1d0a52-6f0e-4c1b-9d59-0c4f3f3b1e11",
                "session_id": "s-42",
                "topic": "Célula",
                "last_reviewed": "2026-10-19T12:00:00+00:00",
                "next_review": "2026-10-20T12:00:00+00:00",
                "difficulty": "medium",
                "streak": 0,
            }
        }

    def is_due(self, now: Optional[datetime] = None) -> bool:
        return self.next_review <= (now or datetime.now(timezone.utc))

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ReviewItem":
        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            assistant_id=row["assistant_id"],
            session_id=row["session_id"],
            topic=row["topic"],
            last_reviewed=row["last_reviewed"],
            next_review=row["next_review"],
            difficulty=row.get("difficulty") or Difficulty.MEDIUM,
            streak=row.get("streak") or 0,
        )

    def to_row(self) -> Dict[str, Any]:
        row = {
            "assistant_id": self.assistant_id,
            "session_id": self.session_id,
            "topic": self.topic,
            "last_reviewed": self.last_reviewed.isoformat(),
            "next_review": self.next_review.isoformat(),
            "difficulty": self.difficulty.value,
            "streak": self.streak,
        }
        if self.id is not None:
            row["id"] = self.id
        return row


class ScheduleResult(BaseModel):
    """Output of the scheduler for one rating."""
    interval_days: float
    next_review_date: datetime
    new_streak: int = Field(ge=0)


class CreateReviewRequest(BaseModel):
    assistant_id: str = Field(alias="assistantId", min_length=1)
    session_id: str = Field(alias="sessionId", min_length=1)
    topic: str = Field(min_length=1)

    class Config:
        populate_by_name = True


class RateReviewRequest(BaseModel):
    difficulty: Difficulty


class RateReviewResponse(BaseModel):
    item: ReviewItem
    days_until_next: int = Field(alias="daysUntilNext")

    class Config:
        populate_by_name = True
