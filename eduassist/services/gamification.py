"""XP, levels and badges for learner profiles.

Profiles live behind the injected StudyStore; nothing here keeps state
between calls.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from eduassist.core.logging import get_logger
from eduassist.domain.profile import Badge, LearnerProfile, XPAwardResult, level_for_xp
from eduassist.infrastructure.store import StudyStore

logger = get_logger(__name__)

DEFAULT_DISPLAY_NAME = "Estudante"

MESSAGE_SENT = "message_sent"
FLASHCARD_CREATED = "flashcard_created"


@dataclass(frozen=True)
class BadgeRule:
    id: str
    name: str
    description: str
    icon: str
    condition: Callable[[int, int, str], bool]

    def to_badge(self, earned_at: datetime) -> Badge:
        return Badge(id=self.id, name=self.name, description=self.description, icon=self.icon, earned_at=earned_at)


# condition(total_xp, level, activity_type)
BADGE_RULES: List[BadgeRule] = [
    BadgeRule(
        "first_message", "Primeira Conversa", "Enviou sua primeira mensagem", "💬",
        lambda xp, level, activity: activity == MESSAGE_SENT and xp >= 10,
    ),
    BadgeRule(
        "level_5", "Estudante Dedicado", "Alcançou o nível 5", "📚",
        lambda xp, level, activity: level >= 5,
    ),
    BadgeRule(
        "flashcard_master", "Mestre dos Flashcards", "Criou 10 flashcards", "🃏",
        lambda xp, level, activity: activity == FLASHCARD_CREATED,
    ),
    BadgeRule(
        "week_streak", "Semana Consistente", "Estudou 7 dias seguidos", "🔥",
        lambda xp, level, activity: xp >= 700,
    ),
]


def get_or_create_profile(store: StudyStore, user_id: str, display_name: Optional[str] = None) -> LearnerProfile:
    profile = store.get_profile(user_id)
    if profile is not None:
        return profile

    logger.info("Creating learner profile", extra={"user_id": user_id})
    return store.save_profile(LearnerProfile(
        user_id=user_id,
        display_name=display_name or DEFAULT_DISPLAY_NAME,
    ))


def award_xp(
    store: StudyStore,
    user_id: str,
    amount: int,
    activity_type: str,
    metadata: Optional[Dict[str, Any]] = None,
) -> XPAwardResult:
    """Record an activity, add its XP and hand out any newly earned badges."""
    if amount <= 0:
        raise ValueError(f"XP amount must be positive, got {amount}")

    profile = get_or_create_profile(store, user_id)
    store.record_activity(user_id, activity_type, amount, metadata or {})

    now = datetime.now(timezone.utc)
    total_xp = profile.total_xp + amount
    level = level_for_xp(total_xp)
    leveled_up = level > profile.level

    owned = set(profile.badge_ids)
    new_badges = [
        rule.to_badge(now)
        for rule in BADGE_RULES
        if rule.id not in owned and rule.condition(total_xp, level, activity_type)
    ]

    updated = store.save_profile(profile.model_copy(update={
        "total_xp": total_xp,
        "level": level,
        "badges": profile.badges + new_badges,
        "updated_at": now,
    }))

    logger.info(
        f"+{amount} XP for {activity_type} (level {level})",
        extra={"user_id": user_id, "operation": "award_xp"},
    )
    return XPAwardResult(profile=updated, leveled_up=leveled_up, new_badges=new_badges)
