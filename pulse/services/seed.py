"""Demo history for the seeded demo user.

Generates monthly results for the general climate survey (``s1``) with a
trend that improves early on and dips in the most recent months.
"""

import calendar
import random
from datetime import datetime, timezone
from typing import Optional

from pulse.schemas.result import SurveyResult
from pulse.services.result_repository import ResultRepository
from pulse.services.scoring import round_score
from pulse.logging_config import get_logger

logger = get_logger(__name__)

SEED_SURVEY_ID = "s1"

# (category, base value, random spread, follows the monthly trend factor)
SEED_CATEGORIES = (
    ("Carga de Trabajo", 3.0, 1.0, True),
    ("Autonomía", 3.5, 1.0, False),
    ("Liderazgo", 4.0, 0.5, False),
    ("Reconocimiento", 2.5, 1.0, False),
    ("Clima Social", 4.0, 1.0, False),
    ("eNPS", 3.0, 1.0, False),
)


def _months_ago(now: datetime, months: int) -> datetime:
    """Midnight UTC on the same day ``months`` calendar months before ``now``."""
    year, month = divmod(now.year * 12 + (now.month - 1) - months, 12)
    month += 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return datetime(year, month, day, tzinfo=timezone.utc)


def generate_seed_history(
    user_id: str,
    months: int = 6,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None
) -> list[SurveyResult]:
    """Generate one ``s1`` result per month, oldest first.

    Args:
        user_id: Owner of the generated results
        months: Number of monthly results (the last one is this month)
        now: Reference time (defaults to UTC now)
        rng: Random source, pass a seeded one for reproducible output

    Returns:
        Results ordered by timestamp ascending
    """
    now = now or datetime.now(timezone.utc)
    rng = rng or random.Random()
    history = []

    for months_back in range(months - 1, -1, -1):
        factor = 0.5 if months_back > 2 else -0.2

        raw_scores = {}
        for category, base, spread, trended in SEED_CATEGORIES:
            value = base + rng.random() * spread + (factor if trended else 0.0)
            raw_scores[category] = min(5.0, max(1.0, value))

        total = sum(raw_scores.values()) / len(raw_scores)

        history.append(SurveyResult(
            id=f"hist_{months_back}",
            survey_id=SEED_SURVEY_ID,
            user_id=user_id,
            timestamp=_months_ago(now, months_back),
            answers={},
            scores={category: round_score(value) for category, value in raw_scores.items()},
            total_score=round_score(total),
        ))

    return history


def seed_demo_history(repository: ResultRepository, user_id: str, **kwargs) -> int:
    """Append generated demo history for ``user_id`` unless it already has results.

    Returns:
        Number of results appended
    """
    if repository.list_for_user(user_id):
        logger.info("Demo history already present, skipping seed", extra={"user_id": user_id})
        return 0

    history = generate_seed_history(user_id, **kwargs)
    for result in history:
        repository.append(result)

    logger.info(f"Seeded {len(history)} demo results", extra={"user_id": user_id})
    return len(history)
