"""Per-user endpoints: result history, dashboard metrics and AI insight."""

from typing import Union

from fastapi import APIRouter, Depends

from pulse.schemas.ai import InsightResponse
from pulse.schemas.dashboard import DashboardMetrics, EmptyDashboard
from pulse.schemas.result import SurveyResult
from pulse.services.ai import InsightService, get_insight_service
from pulse.services.result_repository import ResultRepository, get_result_repository
from pulse.services.risk import EMPTY_HISTORY_MESSAGE, EmptyHistoryError, derive_dashboard
from pulse.services.survey_loader import SurveyLoader, get_survey_loader
from pulse.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/users")

NO_RESULTS_INSIGHT = "Completa tu primera evaluación para generar un reporte de IA."


@router.get("/{user_id}/results", response_model=list[SurveyResult])
async def list_results(
    user_id: str,
    repository: ResultRepository = Depends(get_result_repository)
) -> list[SurveyResult]:
    """User's result history, oldest first."""
    return repository.list_for_user(user_id)


@router.get("/{user_id}/dashboard", response_model=Union[DashboardMetrics, EmptyDashboard])
async def get_dashboard(
    user_id: str,
    repository: ResultRepository = Depends(get_result_repository),
    loader: SurveyLoader = Depends(get_survey_loader)
) -> Union[DashboardMetrics, EmptyDashboard]:
    """Derived dashboard metrics, or the empty state before the first survey."""
    history = repository.list_for_user(user_id)
    try:
        return derive_dashboard(history, loader.load_benchmarks())
    except EmptyHistoryError:
        logger.debug("Dashboard requested with no results", extra={"user_id": user_id})
        return EmptyDashboard(message=EMPTY_HISTORY_MESSAGE)


@router.post("/{user_id}/insight", response_model=InsightResponse)
async def generate_insight(
    user_id: str,
    repository: ResultRepository = Depends(get_result_repository),
    service: InsightService = Depends(get_insight_service)
) -> InsightResponse:
    """AI report on the user's latest scores; falls back to a fixed message."""
    history = repository.list_for_user(user_id)
    if not history:
        return InsightResponse(available=False, text=NO_RESULTS_INSIGHT, reason="no_results")

    outcome = await service.generate_insight(history, history[-1])
    return InsightResponse(
        available=outcome.available,
        text=outcome.value,
        reason=outcome.reason.value if outcome.reason else None,
    )
