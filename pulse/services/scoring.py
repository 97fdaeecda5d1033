"""Scoring engine for completed surveys.

Averages answered Likert items into per-category sub-scores and one overall
score. Only LIKERT questions contribute; multiple choice and free text
answers are kept verbatim on the result but never scored.
"""

import math
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Mapping, Optional, Tuple

from pulse.schemas.result import SurveyResult
from pulse.schemas.survey import AnswerValue, QuestionType, Survey
from pulse.logging_config import get_logger

logger = get_logger(__name__)


def round_score(value: float, places: int = 1) -> float:
    """Round to ``places`` decimal places (one by default), halves away from zero.

    Goes through ``str`` so that 4.25 rounds to 4.3 rather than following the
    binary float representation.

    Example:
        >>> round_score(4.25)
        4.3
        >>> round_score(-2.25)
        -2.3
        >>> round_score(64.5, places=0)
        65.0
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def coerce_likert(value: Optional[AnswerValue]) -> Optional[float]:
    """Interpret a raw answer as a Likert number.

    Numbers pass through, numeric strings are parsed. Anything else (empty
    strings, text, booleans, NaN, infinities) counts as unanswered.

    Args:
        value: Raw answer value or None

    Returns:
        Float value, or None if the answer cannot be scored
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            number = float(stripped)
        except ValueError:
            return None
    else:
        return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


class ScoringEngine:
    """Turns a survey and an answer set into a SurveyResult.

    The engine is a total function over well-typed input and never raises for
    odd answers. Likert values outside 1-5 are averaged as given.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """Initialize scoring engine.

        Args:
            clock: Returns the completion timestamp (defaults to UTC now)
        """
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @staticmethod
    def aggregate(
        survey: Survey,
        answers: Mapping[str, AnswerValue]
    ) -> Tuple[dict[str, float], float]:
        """Compute category scores and the overall score.

        Args:
            survey: Survey definition
            answers: Raw answers keyed by question ID

        Returns:
            Tuple of (scores by category, total score). Both are rounded to
            one decimal; with no answered Likert item this is ({}, 0).

        Example:
            >>> scores, total = ScoringEngine.aggregate(survey, {"q1": 4, "q2": 5, "q3": 3})
            >>> total
            4.0
        """
        category_sums: dict[str, float] = defaultdict(float)
        category_counts: dict[str, int] = defaultdict(int)
        total_sum = 0.0
        total_count = 0

        for question in survey.questions:
            if question.type != QuestionType.LIKERT:
                continue

            value = coerce_likert(answers.get(question.id))
            if value is None:
                continue

            if question.category:
                category_sums[question.category] += value
                category_counts[question.category] += 1

            total_sum += value
            total_count += 1

        scores = {
            category: round_score(category_sums[category] / category_counts[category])
            for category in category_sums
        }
        total_score = round_score(total_sum / total_count) if total_count else 0.0

        return scores, total_score

    def score(
        self,
        survey: Survey,
        answers: Mapping[str, AnswerValue],
        user_id: str
    ) -> SurveyResult:
        """Score a completed survey.

        Args:
            survey: Survey definition
            answers: Raw answers keyed by question ID
            user_id: Respondent

        Returns:
            New immutable SurveyResult with a fresh ID and timestamp
        """
        scores, total_score = self.aggregate(survey, answers)

        result = SurveyResult(
            id=uuid.uuid4().hex,
            survey_id=survey.id,
            user_id=user_id,
            timestamp=self.clock(),
            answers=dict(answers),
            scores=scores,
            total_score=total_score,
        )

        logger.info(
            f"Scored survey {survey.id}: total={total_score}, categories={len(scores)}",
            extra={"result_id": result.id, "survey_id": survey.id, "user_id": user_id}
        )
        return result
