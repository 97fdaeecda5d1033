"""Survey endpoints: listing, bulk result submission and photo extraction."""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from pulse.schemas.ai import ExtractionResponse
from pulse.schemas.result import ResultSubmission, SurveyResult
from pulse.schemas.survey import Survey
from pulse.services.ai import AnswerExtractionService, get_extraction_service
from pulse.services.result_repository import ResultRepository, get_result_repository
from pulse.services.scoring import ScoringEngine
from pulse.services.survey_loader import SurveyLoader, SurveyNotFoundError, get_survey_loader
from pulse.services.validation import AnswerValidator
from pulse.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/surveys")

EXTRACTION_RETRY_MESSAGE = (
    "No se pudieron detectar respuestas en la imagen. Intenta con una foto más clara."
)


def load_survey_or_404(loader: SurveyLoader, survey_id: str) -> Survey:
    try:
        return loader.load_survey(survey_id)
    except SurveyNotFoundError:
        raise HTTPException(status_code=404, detail=f"Survey '{survey_id}' not found")


@router.get("", response_model=list[Survey])
async def list_surveys(loader: SurveyLoader = Depends(get_survey_loader)) -> list[Survey]:
    """List every available survey definition."""
    return loader.load_all()


@router.get("/{survey_id}", response_model=Survey)
async def get_survey(survey_id: str, loader: SurveyLoader = Depends(get_survey_loader)) -> Survey:
    return load_survey_or_404(loader, survey_id)


@router.post("/{survey_id}/results", response_model=SurveyResult, status_code=201)
async def submit_results(
    survey_id: str,
    submission: ResultSubmission,
    loader: SurveyLoader = Depends(get_survey_loader),
    repository: ResultRepository = Depends(get_result_repository)
) -> SurveyResult:
    """Score a complete answer set in one call and append it to the history.

    Raises:
        HTTPException: 404 for an unknown survey, 422 with per-question
            errors when the answer set is incomplete or invalid
    """
    survey = load_survey_or_404(loader, survey_id)

    answers, errors = AnswerValidator.validate_answers(survey, submission.answers)
    if errors:
        logger.info(
            f"Rejected submission with {len(errors)} invalid answers",
            extra={"survey_id": survey_id, "user_id": submission.user_id}
        )
        raise HTTPException(
            status_code=422,
            detail={"message": "Invalid answers", "errors": errors}
        )

    result = ScoringEngine().score(survey, answers, submission.user_id)
    repository.append(result)
    return result


@router.post("/{survey_id}/extract", response_model=ExtractionResponse)
async def extract_answers(
    survey_id: str,
    image: UploadFile = File(...),
    loader: SurveyLoader = Depends(get_survey_loader),
    service: AnswerExtractionService = Depends(get_extraction_service)
) -> ExtractionResponse:
    """Read answers from a photographed paper survey.

    The extracted answers are meant to prefill a session; nothing is scored
    here.

    Raises:
        HTTPException: 422 asking for a clearer photo when nothing usable
            was extracted
    """
    survey = load_survey_or_404(loader, survey_id)
    content = await image.read()
    mime_type = image.content_type or "image/jpeg"

    outcome = await service.extract_answers(content, mime_type, survey.questions)
    if not outcome.available:
        logger.info(
            f"Extraction unavailable: {outcome.reason.value}",
            extra={"survey_id": survey_id}
        )
        raise HTTPException(
            status_code=422,
            detail={"message": EXTRACTION_RETRY_MESSAGE, "reason": outcome.reason.value}
        )

    return ExtractionResponse(survey_id=survey_id, answers=outcome.value)
