"""Pydantic schemas for the survey-taking session API."""

from typing import Optional

from pydantic import BaseModel, Field

from pulse.schemas.result import SurveyResult
from pulse.schemas.survey import AnswerValue, Question
from pulse.services.navigation import View


class SessionStartRequest(BaseModel):
    """Request body for starting a survey-taking session.

    Attributes:
        survey_id: Survey to take
        user_id: Respondent
        initial_answers: Prefilled answers (e.g., extracted from a photo)
    """
    survey_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    initial_answers: Optional[dict[str, AnswerValue]] = None


class AnswerRequest(BaseModel):
    value: AnswerValue


class SessionState(BaseModel):
    """Snapshot of a session returned after every interaction."""
    session_id: str
    survey_id: str
    user_id: str
    current_step: int
    total_steps: int
    progress: float
    current_question: Optional[Question]
    answers: dict[str, AnswerValue]
    can_proceed: bool
    is_last_question: bool
    completed: bool
    result: Optional[SurveyResult] = None
    view: View
