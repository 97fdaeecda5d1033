"""Generative AI enrichments: dashboard insight and paper-survey extraction.

Both calls are best effort. They make a single attempt and never raise to
the caller: every outcome comes back as an ``AiResult`` that says whether
the service produced something usable and, if not, why.
"""

import base64
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Mapping, Optional, Sequence, TypeVar

from openai import AsyncOpenAI, OpenAIError

from pulse.config import Settings, get_settings
from pulse.schemas.result import SurveyResult
from pulse.schemas.survey import AnswerValue, Question
from pulse.services.prompt_renderer import (
    EXTRACTION_PROMPT,
    INSIGHT_PROMPT,
    PromptRenderError,
    PromptRenderer,
    get_prompt_renderer,
)
from pulse.services.validation import AnswerValidator
from pulse.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

INSIGHT_MAX_WORDS = 150


class AiUnavailableReason(str, Enum):
    MISSING_CREDENTIALS = "missing_credentials"
    CALL_FAILED = "call_failed"
    EMPTY_RESPONSE = "empty_response"
    MALFORMED_RESPONSE = "malformed_response"


@dataclass(frozen=True)
class AiResult(Generic[T]):
    """Outcome of a best-effort AI call.

    Attributes:
        available: Whether the service produced a usable value
        value: The value (insight services put fallback text here when unavailable)
        reason: Why the service was unavailable, None on success
    """
    available: bool
    value: Optional[T]
    reason: Optional[AiUnavailableReason] = None

    @classmethod
    def ok(cls, value: T) -> "AiResult[T]":
        return cls(available=True, value=value)

    @classmethod
    def unavailable(cls, reason: AiUnavailableReason, value: Optional[T] = None) -> "AiResult[T]":
        return cls(available=False, value=value, reason=reason)


ClientFactory = Callable[[Settings], Any]


def default_client_factory(settings: Settings) -> AsyncOpenAI:
    """Build an AsyncOpenAI client from settings."""
    return AsyncOpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)


def _message_text(response: Any) -> str:
    """Pull the first choice's text out of a chat completion, or ''."""
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content.strip() if isinstance(content, str) else ""


class _AiService:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        client_factory: Optional[ClientFactory] = None,
        renderer: Optional[PromptRenderer] = None
    ):
        self.settings = settings or get_settings()
        self.client_factory = client_factory or default_client_factory
        self.renderer = renderer or get_prompt_renderer()

    async def _complete(self, messages: list[dict], **kwargs) -> str:
        async with self.client_factory(self.settings) as client:
            response = await client.chat.completions.create(
                model=self.settings.openai_model,
                messages=messages,
                max_tokens=self.settings.ai_max_output_tokens,
                **kwargs,
            )
        return _message_text(response)


class InsightService(_AiService):
    """Writes a short strategic wellbeing report from a user's scores."""

    FALLBACK_TEXT = {
        AiUnavailableReason.MISSING_CREDENTIALS: "Insights de IA no disponibles. Configura tu API_KEY.",
        AiUnavailableReason.CALL_FAILED: "El Agente de IA está analizando patrones complejos... Intenta nuevamente.",
        AiUnavailableReason.EMPTY_RESPONSE: "No se pudo generar el análisis.",
    }

    def _fallback(self, reason: AiUnavailableReason) -> AiResult[str]:
        return AiResult.unavailable(reason, self.FALLBACK_TEXT[reason])

    async def generate_insight(
        self,
        history: Sequence[SurveyResult],
        latest: SurveyResult
    ) -> AiResult[str]:
        """Generate the three-section report (analysis, risks, recommendation).

        Args:
            history: Results ordered by timestamp ascending
            latest: Most recent result

        Returns:
            AiResult whose value is always displayable text
        """
        if not self.settings.ai_configured:
            logger.info("Insight requested without AI credentials", extra={"user_id": latest.user_id})
            return self._fallback(AiUnavailableReason.MISSING_CREDENTIALS)

        try:
            prompt = self.renderer.render(INSIGHT_PROMPT, {
                "latest_scores": latest.scores,
                "history_totals": [result.total_score for result in history],
                "max_words": INSIGHT_MAX_WORDS,
            })
            text = await self._complete([{"role": "user", "content": prompt}])
        except (OpenAIError, PromptRenderError) as e:
            logger.error(f"Insight generation failed: {e}", extra={"user_id": latest.user_id})
            return self._fallback(AiUnavailableReason.CALL_FAILED)
        except Exception as e:
            logger.error(f"Unexpected error generating insight: {e}", exc_info=True)
            return self._fallback(AiUnavailableReason.CALL_FAILED)

        if not text:
            logger.warning("AI service returned an empty insight", extra={"user_id": latest.user_id})
            return self._fallback(AiUnavailableReason.EMPTY_RESPONSE)

        logger.info("Generated insight", extra={"user_id": latest.user_id, "result_id": latest.id})
        return AiResult.ok(text)


def sanitize_extracted_answers(
    raw_answers: Mapping[str, Any],
    questions: Sequence[Question]
) -> dict[str, AnswerValue]:
    """Keep extracted answers that belong to a known question and validate.

    Unknown question IDs and values that fail validation are dropped, so the
    respondent answers those questions by hand.
    """
    answers: dict[str, AnswerValue] = {}
    for question in questions:
        if question.id not in raw_answers:
            continue
        result = AnswerValidator.validate(question, raw_answers[question.id])
        if result.is_valid:
            answers[question.id] = result.normalized_value
        else:
            logger.debug(f"Dropped extracted answer for {question.id}: {result.error_message}")
    return answers


class AnswerExtractionService(_AiService):
    """Reads answers off a photographed paper survey."""

    async def extract_answers(
        self,
        image: bytes,
        mime_type: str,
        questions: Sequence[Question]
    ) -> AiResult[dict[str, AnswerValue]]:
        """Extract an answer mapping from an image.

        Args:
            image: Raw image bytes
            mime_type: Image content type (e.g., image/jpeg)
            questions: Questions printed on the paper survey

        Returns:
            AiResult with question ID -> answer, unavailable when nothing
            usable was found
        """
        if not self.settings.ai_configured:
            logger.info("Answer extraction requested without AI credentials")
            return AiResult.unavailable(AiUnavailableReason.MISSING_CREDENTIALS)

        if not image:
            return AiResult.unavailable(AiUnavailableReason.EMPTY_RESPONSE)

        data_url = f"data:{mime_type};base64,{base64.b64encode(image).decode('ascii')}"

        try:
            prompt = self.renderer.render(EXTRACTION_PROMPT, {"questions": list(questions)})
            text = await self._complete(
                [{
                    "role": "user",
                    "content": [
                        {"type": "image_url", "image_url": {"url": data_url}},
                        {"type": "text", "text": prompt},
                    ],
                }],
                response_format={"type": "json_object"},
            )
        except (OpenAIError, PromptRenderError) as e:
            logger.error(f"Answer extraction failed: {e}")
            return AiResult.unavailable(AiUnavailableReason.CALL_FAILED)
        except Exception as e:
            logger.error(f"Unexpected error extracting answers: {e}", exc_info=True)
            return AiResult.unavailable(AiUnavailableReason.CALL_FAILED)

        if not text:
            return AiResult.unavailable(AiUnavailableReason.EMPTY_RESPONSE)

        try:
            raw_answers = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"AI service returned invalid JSON: {e}")
            return AiResult.unavailable(AiUnavailableReason.MALFORMED_RESPONSE)

        if not isinstance(raw_answers, dict):
            logger.warning(f"AI service returned {type(raw_answers).__name__}, expected an object")
            return AiResult.unavailable(AiUnavailableReason.MALFORMED_RESPONSE)

        answers = sanitize_extracted_answers(raw_answers, questions)
        if not answers:
            return AiResult.unavailable(AiUnavailableReason.EMPTY_RESPONSE)

        logger.info(f"Extracted {len(answers)} of {len(questions)} answers from image")
        return AiResult.ok(answers)


def get_insight_service() -> InsightService:
    return InsightService()


def get_extraction_service() -> AnswerExtractionService:
    return AnswerExtractionService()
