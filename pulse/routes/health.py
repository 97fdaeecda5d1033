"""Health check endpoint for monitoring and deployment verification.

This module provides a health check endpoint that verifies the application
is running, the result store answers, and survey content is available.
"""

from fastapi import APIRouter, Depends, HTTPException

from pulse.config import get_settings
from pulse.services.result_repository import ResultRepository, get_result_repository
from pulse.services.survey_loader import SurveyLoader, get_survey_loader
from pulse.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(
    repository: ResultRepository = Depends(get_result_repository),
    loader: SurveyLoader = Depends(get_survey_loader)
) -> dict:
    """Health check endpoint.

    Returns:
        dict: Health check status

    Raises:
        HTTPException: If the result store fails (503 Service Unavailable)

    Example response:
        {
            "status": "healthy",
            "result_store": "memory",
            "results": 6,
            "surveys": 3,
            "ai": "not_configured"
        }
    """
    settings = get_settings()
    try:
        result_count = repository.count()
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(
            status_code=503,
            detail="Service unavailable - result store failed"
        )

    logger.debug("Health check passed")

    return {
        "status": "healthy",
        "result_store": settings.result_store,
        "results": result_count,
        "surveys": len(loader.list_surveys()),
        "ai": "configured" if settings.ai_configured else "not_configured",
    }
