"""Pydantic schemas for derived dashboard metrics."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class RiskLevel(str, Enum):
    """Burnout risk band."""
    HEALTHY = "Healthy"
    MODERATE = "Moderate Risk"
    HIGH = "High Risk"


class BurnoutRisk(BaseModel):
    """Burnout risk index with the inputs that produced it.

    Attributes:
        value: Risk index clamped to [0, 100]
        level: Risk band for the index
        exhaustion: Exhaustion signal used (1-5 scale)
        support: Support signal used (1-5 scale)
        alert: Whether the advisory message is a warning
        advisory: Message shown next to the risk meter
    """
    value: float = Field(..., ge=0, le=100)
    level: RiskLevel
    exhaustion: float
    support: float
    alert: bool
    advisory: str


class KPIMetric(BaseModel):
    """Headline metric card."""
    label: str
    value: float
    change: Optional[float] = Field(None, description="Percent change vs previous result")
    delta: Optional[float] = Field(None, description="Absolute change vs previous result")
    is_positive: Optional[bool] = None


class TrendPoint(BaseModel):
    timestamp: datetime
    value: float


class RadarPoint(BaseModel):
    subject: str
    value: float
    full_mark: float = 5


class BenchmarkPoint(BaseModel):
    name: str
    user: float
    company: float


class DashboardMetrics(BaseModel):
    """Everything the dashboard renders for one user's history."""
    has_results: bool = True
    latest_result_id: str
    burnout_risk: BurnoutRisk
    wellbeing: KPIMetric
    enps: KPIMetric
    trend: list[TrendPoint]
    radar: list[RadarPoint]
    benchmark: list[BenchmarkPoint]


class EmptyDashboard(BaseModel):
    """Dashboard payload for a user with no results yet."""
    has_results: bool = False
    message: str
