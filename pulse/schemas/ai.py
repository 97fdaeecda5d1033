"""Pydantic schemas for the AI insight and answer extraction endpoints."""

from typing import Optional

from pydantic import BaseModel

from pulse.schemas.survey import AnswerValue


class InsightResponse(BaseModel):
    """AI report for the dashboard.

    ``text`` always holds displayable content; when ``available`` is false it
    is the fallback message for ``reason``.
    """
    available: bool
    text: str
    reason: Optional[str] = None


class ExtractionResponse(BaseModel):
    """Answers read from a photographed paper survey."""
    survey_id: str
    answers: dict[str, AnswerValue]
