"""Answer validation service for survey questions.

This module validates raw answers against their question type where input is
collected (the survey-taking session, bulk submissions and image extraction),
normalizes values, and generates error messages in the display language.
"""

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from pulse.schemas.survey import (
    AnswerValue,
    LIKERT_MAX,
    LIKERT_MIN,
    Question,
    QuestionType,
    Survey,
)
from pulse.services.scoring import coerce_likert
from pulse.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of answer validation.

    Attributes:
        is_valid: Whether the answer passed validation
        normalized_value: Cleaned value typed for the question
        error_message: Error message if validation failed
    """
    is_valid: bool
    normalized_value: Optional[AnswerValue]
    error_message: Optional[str]


def _invalid(message: str) -> ValidationResult:
    return ValidationResult(is_valid=False, normalized_value=None, error_message=message)


def _valid(value: AnswerValue) -> ValidationResult:
    return ValidationResult(is_valid=True, normalized_value=value, error_message=None)


class AnswerValidator:
    """Service for validating answers against question types."""

    @staticmethod
    def validate(question: Question, raw_value: Optional[AnswerValue]) -> ValidationResult:
        """Validate a raw answer for a question.

        - LIKERT: a number (or numeric string) between 1 and 5
        - MULTIPLE_CHOICE: one of the options, matched case-insensitively
        - TEXT: any non-blank string

        Args:
            question: Question being answered
            raw_value: Value as received

        Returns:
            ValidationResult with validation status and normalized value

        Example:
            >>> question = Question(id="q1", text="...", type=QuestionType.LIKERT)
            >>> AnswerValidator.validate(question, "4").normalized_value
            4
        """
        if question.type == QuestionType.LIKERT:
            return AnswerValidator._validate_likert(raw_value)
        elif question.type == QuestionType.MULTIPLE_CHOICE:
            return AnswerValidator._validate_choice(question, raw_value)
        elif question.type == QuestionType.TEXT:
            return AnswerValidator._validate_text(raw_value)
        else:
            # Should never happen due to Pydantic validation
            logger.error(f"Unknown question type: {question.type}")
            return _invalid("Error interno: tipo de pregunta no válido.")

    @staticmethod
    def validate_answers(
        survey: Survey,
        answers: Mapping[str, AnswerValue]
    ) -> Tuple[dict[str, AnswerValue], dict[str, str]]:
        """Validate a complete answer set for a survey.

        Every supplied answer must belong to the survey and be valid for its
        question; every required question must be answered.

        Returns:
            Tuple of (normalized answers, error message by question ID).
            The answer set is acceptable when the error mapping is empty.
        """
        normalized: dict[str, AnswerValue] = {}
        errors: dict[str, str] = {}

        for question_id in answers:
            if survey.get_question(question_id) is None:
                errors[question_id] = "Pregunta desconocida para esta encuesta."

        for question in survey.questions:
            if question.id not in answers:
                if question.is_required:
                    errors[question.id] = "Esta pregunta es obligatoria."
                continue

            value = answers[question.id]
            if not question.is_required and isinstance(value, str) and not value.strip():
                # Blank optional text counts as skipped
                continue

            result = AnswerValidator.validate(question, value)
            if result.is_valid:
                normalized[question.id] = result.normalized_value
            else:
                errors[question.id] = result.error_message

        return normalized, errors

    @staticmethod
    def _validate_likert(raw_value: Optional[AnswerValue]) -> ValidationResult:
        number = coerce_likert(raw_value)
        if number is None:
            return _invalid(f"Selecciona un valor entre {LIKERT_MIN} y {LIKERT_MAX}.")

        if number < LIKERT_MIN or number > LIKERT_MAX:
            return _invalid(f"El valor debe estar entre {LIKERT_MIN} y {LIKERT_MAX}.")

        if number.is_integer():
            return _valid(int(number))
        return _valid(number)

    @staticmethod
    def _validate_choice(question: Question, raw_value: Optional[AnswerValue]) -> ValidationResult:
        options = question.options or []
        if not isinstance(raw_value, str) or not raw_value.strip():
            return _invalid(f"Elige una de las opciones: {', '.join(options)}")

        # Return the canonical option label for storage
        wanted = raw_value.strip().lower()
        for option in options:
            if option.lower() == wanted:
                return _valid(option)

        return _invalid(f"Elige una de las opciones: {', '.join(options)}")

    @staticmethod
    def _validate_text(raw_value: Optional[AnswerValue]) -> ValidationResult:
        if not isinstance(raw_value, str):
            return _invalid("La respuesta debe ser texto.")

        normalized = raw_value.strip()
        if not normalized:
            return _invalid("Escribe una respuesta.")
        return _valid(normalized)
