"""Append-only result history.

Completed survey results are only ever appended; reads return a user's
history ordered by timestamp ascending, with insertion order breaking ties.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from pulse.config import get_settings
from pulse.models.database import SessionLocal, init_db
from pulse.models.result import SurveyResultRecord
from pulse.schemas.result import SurveyResult
from pulse.logging_config import get_logger

logger = get_logger(__name__)


class ResultRepository(ABC):
    """Append-only store of SurveyResult records."""

    @abstractmethod
    def append(self, result: SurveyResult) -> None:
        """Add a result to the history."""

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[SurveyResult]:
        """Return a user's results ordered by timestamp ascending."""

    @abstractmethod
    def count(self) -> int:
        """Total number of stored results."""


class InMemoryResultRepository(ResultRepository):
    """List-backed repository used by default and in tests."""

    def __init__(self, results: Optional[list[SurveyResult]] = None):
        self._results: list[SurveyResult] = []
        for result in results or []:
            self.append(result)

    def append(self, result: SurveyResult) -> None:
        self._results.append(result)
        logger.debug(
            f"Appended result {result.id}",
            extra={"result_id": result.id, "user_id": result.user_id}
        )

    def list_for_user(self, user_id: str) -> list[SurveyResult]:
        # sorted() is stable, so equal timestamps keep insertion order
        return sorted(
            (result for result in self._results if result.user_id == user_id),
            key=lambda result: result.timestamp,
        )

    def count(self) -> int:
        return len(self._results)


class SqlResultRepository(ResultRepository):
    """SQLAlchemy-backed repository.

    Args:
        session_factory: Callable returning a new Session
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def append(self, result: SurveyResult) -> None:
        with self.session_factory() as db:
            db.add(SurveyResultRecord.from_schema(result))
            db.commit()
        logger.debug(
            f"Stored result {result.id}",
            extra={"result_id": result.id, "user_id": result.user_id}
        )

    def list_for_user(self, user_id: str) -> list[SurveyResult]:
        statement = (
            select(SurveyResultRecord)
            .where(SurveyResultRecord.user_id == user_id)
            .order_by(SurveyResultRecord.timestamp, SurveyResultRecord.sequence)
        )
        with self.session_factory() as db:
            records = db.scalars(statement).all()
            return [record.to_schema() for record in records]

    def count(self) -> int:
        with self.session_factory() as db:
            return db.scalar(select(func.count()).select_from(SurveyResultRecord)) or 0


# Global singleton instance
_repository_instance: Optional[ResultRepository] = None


def get_result_repository() -> ResultRepository:
    """Get global ResultRepository instance.

    The backend is chosen by ``Settings.result_store`` on first call.

    Returns:
        Global ResultRepository instance
    """
    global _repository_instance
    if _repository_instance is None:
        settings = get_settings()
        if settings.result_store == "sql":
            init_db()
            _repository_instance = SqlResultRepository()
        else:
            _repository_instance = InMemoryResultRepository()
        logger.info(f"Result store initialized: {settings.result_store}")
    return _repository_instance
