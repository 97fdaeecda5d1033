"""SurveyResultRecord model for the SQL-backed result history.

Rows are inserted once and never updated or deleted by the application.
"""

from datetime import datetime, timezone

from sqlalchemy import Float, Index, Integer, JSON, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from pulse.models.database import Base
from pulse.schemas.result import SurveyResult


class SurveyResultRecord(Base):
    """Model for storing scored survey results.

    Attributes:
        sequence: Insertion order, the tie-break for equal timestamps
        id: Result identifier
        survey_id: Survey that was answered
        user_id: Respondent
        timestamp: Completion time in UTC
        answers: Raw answers keyed by question ID
        scores: Category -> averaged score
        total_score: Overall average score
    """

    __tablename__ = "survey_results"

    # Primary Key
    sequence: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="Result identifier"
    )
    survey_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Survey identifier from YAML filename"
    )
    user_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Respondent identifier"
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When the survey was completed"
    )
    answers: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Raw answers keyed by question ID"
    )
    scores: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Category label -> averaged Likert score"
    )
    total_score: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
        comment="Average of all answered Likert items"
    )

    __table_args__ = (
        # Ordered history reads per user
        Index("idx_user_timestamp", "user_id", "timestamp"),
    )

    @classmethod
    def from_schema(cls, result: SurveyResult) -> "SurveyResultRecord":
        return cls(
            id=result.id,
            survey_id=result.survey_id,
            user_id=result.user_id,
            timestamp=result.timestamp,
            answers=dict(result.answers),
            scores=dict(result.scores),
            total_score=result.total_score,
        )

    def to_schema(self) -> SurveyResult:
        """Convert the row back into an immutable SurveyResult.

        SQLite drops timezone info on read; such timestamps are stored as UTC.
        """
        timestamp = self.timestamp
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        return SurveyResult(
            id=self.id,
            survey_id=self.survey_id,
            user_id=self.user_id,
            timestamp=timestamp,
            answers=self.answers,
            scores=self.scores,
            total_score=self.total_score,
        )

    def __repr__(self) -> str:
        return (
            f"<SurveyResultRecord(id={self.id}, "
            f"survey_id={self.survey_id}, "
            f"user_id={self.user_id}, "
            f"total_score={self.total_score})>"
        )
