"""Spaced-repetition interval scheduling.

Each difficulty bucket grows its interval exponentially with the streak,
with a per-bucket cap:

    easy    min(30, 2.0 ** streak)
    medium  min(21, 1.8 ** streak)
    hard    min(14, 1.5 ** streak)

The interval is computed from the streak passed in; the returned streak is
reset to 0 on "hard" and incremented otherwise. Fractional days are dropped
when the date is computed.
"""
import math
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from eduassist.domain.review import Difficulty, ScheduleResult

# difficulty -> (base, cap in days)
INTERVAL_CURVES = {
    Difficulty.EASY: (2.0, 30),
    Difficulty.MEDIUM: (1.8, 21),
    Difficulty.HARD: (1.5, 14),
}


def interval_days(difficulty: Union[Difficulty, str], streak: int) -> float:
    """Days until the next review for a bucket and streak."""
    base, cap = INTERVAL_CURVES[Difficulty(difficulty)]
    if streak < 0:
        raise ValueError(f"streak must be non-negative, got {streak}")
    # Exponent past the cap point would only overflow towards the same cap
    if streak > 64:
        return float(cap)
    return min(float(cap), base ** streak)


def schedule_next(
    difficulty: Union[Difficulty, str],
    streak: int,
    now: Optional[datetime] = None,
) -> ScheduleResult:
    """Compute the next review date and streak after a rating.

    Raises:
        ValueError: unknown difficulty or negative streak
    """
    difficulty = Difficulty(difficulty)
    now = now or datetime.now(timezone.utc)

    days = interval_days(difficulty, streak)
    new_streak = 0 if difficulty is Difficulty.HARD else streak + 1

    return ScheduleResult(
        interval_days=days,
        next_review_date=now + timedelta(days=math.floor(days)),
        new_streak=new_streak,
    )
