"""Domain models for learner XP, levels and badges."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


XP_PER_LEVEL = 100


def level_for_xp(total_xp: int) -> int:
    """Levels start at 1 and go up every XP_PER_LEVEL points."""
    return total_xp // XP_PER_LEVEL + 1


class Badge(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    earned_at: Optional[datetime] = None


class LearnerProfile(BaseModel):
    """Gamification state for one student account."""
    user_id: str
    display_name: Optional[str] = None
    total_xp: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    badges: List[Badge] = Field(default_factory=list)
    preferences: Dict[str, Any] = Field(default_factory=lambda: {"theme": "light", "language": "pt"})
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def badge_ids(self) -> List[str]:
        return [badge.id for badge in self.badges]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "LearnerProfile":
        return cls(
            user_id=row["user_id"],
            display_name=row.get("display_name"),
            total_xp=row.get("total_xp") or 0,
            level=row.get("level") or 1,
            badges=row.get("badges") or [],
            preferences=row.get("preferences") or {},
            updated_at=row.get("updated_at") or datetime.now(timezone.utc),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "display_name": self.display_name,
            "total_xp": self.total_xp,
            "level": self.level,
            "badges": [badge.model_dump(mode="json") for badge in self.badges],
            "preferences": self.preferences,
            "updated_at": self.updated_at.isoformat(),
        }


class XPAwardRequest(BaseModel):
    amount: int = Field(gt=0)
    activity_type: str = Field(alias="activityType", min_length=1)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        populate_by_name = True


class XPAwardResult(BaseModel):
    profile: LearnerProfile
    leveled_up: bool = Field(alias="leveledUp")
    new_badges: List[Badge] = Field(default_factory=list, alias="newBadges")

    class Config:
        populate_by_name = True
