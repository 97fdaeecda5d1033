"""Survey-taking sessions.

A session walks a respondent through a survey one question at a time,
validating each answer, and scores the survey once the last question is
confirmed. The scored result is appended to the result history exactly once.
"""

import uuid
from dataclasses import dataclass, field
from typing import Mapping, Optional

from pulse.schemas.result import SurveyResult
from pulse.schemas.session import SessionState
from pulse.schemas.survey import AnswerValue, Question, Survey
from pulse.services.navigation import Navigator, View
from pulse.services.result_repository import ResultRepository, get_result_repository
from pulse.services.scoring import ScoringEngine
from pulse.services.survey_loader import SurveyLoader, get_survey_loader
from pulse.services.validation import AnswerValidator, ValidationResult
from pulse.logging_config import get_logger

logger = get_logger(__name__)


class SessionError(Exception):
    """Raised when a session operation is not allowed in its current state."""
    pass


class SessionNotFoundError(SessionError):
    """Raised when no active session has the given ID."""
    pass


@dataclass
class SurveySession:
    """Progress of one respondent through one survey.

    Attributes:
        id: Session identifier
        survey: Survey being taken
        user_id: Respondent
        current_step: Index of the question on screen
        answers: Validated answers keyed by question ID
        result: Scored result once completed
        navigator: Screen the respondent is on; sessions open from the survey list
    """
    id: str
    survey: Survey
    user_id: str
    current_step: int = 0
    answers: dict[str, AnswerValue] = field(default_factory=dict)
    result: Optional[SurveyResult] = None
    navigator: Navigator = field(default_factory=lambda: Navigator(View.SURVEYS))

    @property
    def completed(self) -> bool:
        return self.result is not None

    @property
    def current_question(self) -> Question:
        return self.survey.questions[self.current_step]

    @property
    def is_last_question(self) -> bool:
        return self.current_step == len(self.survey.questions) - 1

    def progress(self) -> float:
        """Percentage of the survey reached, counting the current question."""
        return (self.current_step + 1) / len(self.survey.questions) * 100

    def can_proceed(self) -> bool:
        """Whether the current question allows moving on.

        Likert and multiple choice questions need an answer; free text may
        be left blank.
        """
        question = self.current_question
        return not question.is_required or question.id in self.answers

    def advance_step(self) -> None:
        self.current_step += 1

    def mark_completed(self, result: SurveyResult) -> None:
        self.result = result

    def to_state(self) -> SessionState:
        return SessionState(
            session_id=self.id,
            survey_id=self.survey.id,
            user_id=self.user_id,
            current_step=self.current_step,
            total_steps=len(self.survey.questions),
            progress=self.progress(),
            current_question=None if self.completed else self.current_question,
            answers=dict(self.answers),
            can_proceed=False if self.completed else self.can_proceed(),
            is_last_question=self.is_last_question,
            completed=self.completed,
            result=self.result,
            view=self.navigator.current,
        )


class SurveySessionService:
    """Survey-taking orchestration service.

    Coordinates survey loading, answer validation, step progression,
    scoring and result storage. Active sessions are held in memory; finished
    or cancelled sessions are forgotten.
    """

    def __init__(
        self,
        loader: Optional[SurveyLoader] = None,
        repository: Optional[ResultRepository] = None,
        engine: Optional[ScoringEngine] = None
    ):
        self.loader = loader or get_survey_loader()
        self.repository = repository or get_result_repository()
        self.engine = engine or ScoringEngine()
        self._sessions: dict[str, SurveySession] = {}

    def start(
        self,
        survey_id: str,
        user_id: str,
        initial_answers: Optional[Mapping[str, AnswerValue]] = None
    ) -> SurveySession:
        """Start a session, optionally prefilled (e.g., from a photographed survey).

        Prefilled values go through the same validation as typed answers;
        invalid ones are dropped so the respondent answers them by hand.

        Raises:
            SurveyNotFoundError: If the survey does not exist
        """
        survey = self.loader.load_survey(survey_id)
        session = SurveySession(id=uuid.uuid4().hex, survey=survey, user_id=user_id)
        session.navigator.start_survey()

        for question_id, value in (initial_answers or {}).items():
            question = survey.get_question(question_id)
            if question is None:
                logger.warning(f"Ignoring prefilled answer for unknown question {question_id}")
                continue
            validation = AnswerValidator.validate(question, value)
            if validation.is_valid:
                session.answers[question_id] = validation.normalized_value
            else:
                logger.info(
                    f"Dropped invalid prefilled answer for {question_id}: {validation.error_message}",
                    extra={"session_id": session.id}
                )

        self._sessions[session.id] = session
        logger.info(
            f"Started session with {len(session.answers)} prefilled answers",
            extra={"session_id": session.id, "survey_id": survey_id, "user_id": user_id}
        )
        return session

    def get(self, session_id: str) -> SurveySession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session '{session_id}' not found")
        return session

    def answer(self, session_id: str, question_id: str, value: AnswerValue) -> ValidationResult:
        """Record an answer for any question of the session's survey.

        Invalid answers are not stored; the returned ValidationResult
        carries the error message to show.

        Raises:
            SessionNotFoundError: If the session does not exist
            SessionError: If the question is not part of the survey
        """
        session = self.get(session_id)
        question = session.survey.get_question(question_id)
        if question is None:
            raise SessionError(f"Question '{question_id}' is not part of survey '{session.survey.id}'")

        validation = AnswerValidator.validate(question, value)
        if validation.is_valid:
            session.answers[question_id] = validation.normalized_value
            logger.debug(f"Stored answer for {question_id}", extra={"session_id": session_id})
        return validation

    def advance(self, session_id: str) -> SurveySession:
        """Move past the current question; on the last one, score and store.

        Raises:
            SessionNotFoundError: If the session does not exist
            SessionError: If the current question still needs an answer
        """
        session = self.get(session_id)

        if not session.can_proceed():
            raise SessionError(
                f"Question '{session.current_question.id}' requires an answer before continuing"
            )

        if not session.is_last_question:
            session.advance_step()
            return session

        result = self.engine.score(session.survey, session.answers, session.user_id)
        self.repository.append(result)
        session.mark_completed(result)
        session.navigator.complete_survey()
        del self._sessions[session_id]

        logger.info(
            "Completed session",
            extra={"session_id": session_id, "result_id": result.id, "user_id": session.user_id}
        )
        return session

    def cancel(self, session_id: str) -> SurveySession:
        """Discard a session without storing anything and return to the survey list.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        session = self.get(session_id)
        session.navigator.cancel_survey()
        del self._sessions[session_id]
        logger.info("Cancelled session", extra={"session_id": session_id})
        return session

    def active_count(self) -> int:
        return len(self._sessions)


# Global singleton instance
_service_instance: Optional[SurveySessionService] = None


def get_session_service() -> SurveySessionService:
    """Get global SurveySessionService instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = SurveySessionService()
    return _service_instance
