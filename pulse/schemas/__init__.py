"""Pydantic schemas for data validation.

This package contains all Pydantic models for surveys, results, dashboard
metrics, survey-taking sessions and AI responses.
"""

from pulse.schemas.survey import (
    AnswerValue,
    LIKERT_MAX,
    LIKERT_MIN,
    QuestionType,
    Question,
    Survey,
)
from pulse.schemas.result import SurveyResult, ResultSubmission
from pulse.schemas.dashboard import (
    RiskLevel,
    BurnoutRisk,
    KPIMetric,
    TrendPoint,
    RadarPoint,
    BenchmarkPoint,
    DashboardMetrics,
    EmptyDashboard,
)
from pulse.schemas.session import SessionStartRequest, AnswerRequest, SessionState
from pulse.schemas.ai import InsightResponse, ExtractionResponse

__all__ = [
    "AnswerValue",
    "LIKERT_MAX",
    "LIKERT_MIN",
    "QuestionType",
    "Question",
    "Survey",
    "SurveyResult",
    "ResultSubmission",
    "RiskLevel",
    "BurnoutRisk",
    "KPIMetric",
    "TrendPoint",
    "RadarPoint",
    "BenchmarkPoint",
    "DashboardMetrics",
    "EmptyDashboard",
    "SessionStartRequest",
    "AnswerRequest",
    "SessionState",
    "InsightResponse",
    "ExtractionResponse",
]
