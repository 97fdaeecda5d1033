"""Pydantic schemas for scored survey results.

A SurveyResult is created once, when a survey-taking session completes, and
is never modified afterwards.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from pulse.schemas.survey import AnswerValue


class SurveyResult(BaseModel):
    """Scored outcome of one completed survey.

    Attributes:
        id: Unique result identifier
        survey_id: Survey that was answered
        user_id: Respondent
        timestamp: Completion time, normalized to UTC (naive values are taken as UTC)
        answers: Raw answers keyed by question ID
        scores: Category label -> average Likert value (one decimal)
        total_score: Average of all answered Likert values (one decimal)
    """
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(..., min_length=1)
    survey_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    timestamp: datetime
    answers: dict[str, AnswerValue] = Field(default_factory=dict)
    scores: dict[str, float] = Field(default_factory=dict)
    total_score: float = 0.0

    @field_validator('timestamp')
    @classmethod
    def timestamp_in_utc(cls, v: datetime) -> datetime:
        """Store every completion time in UTC so histories order by instant."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class ResultSubmission(BaseModel):
    """Request body for submitting a complete answer set in one call."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str = Field(..., min_length=1)
    answers: dict[str, AnswerValue] = Field(default_factory=dict)
