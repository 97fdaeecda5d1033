"""Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set required environment variables for tests BEFORE importing pulse modules
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("RESULT_STORE", "memory")
os.environ.setdefault("SEED_DEMO_DATA", "false")
os.environ["OPENAI_API_KEY"] = ""

from pulse.models.database import Base
from pulse.schemas.result import SurveyResult
from pulse.schemas.survey import Question, QuestionType, Survey


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine with SQLite in-memory database.

    Yields:
        Engine: SQLAlchemy engine for testing

    Note:
        A StaticPool keeps one connection so every session sees the same
        in-memory database. Created fresh for each test function.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,  # Set to True for SQL debugging
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session_factory(db_engine):
    """Session factory bound to the test engine."""
    return sessionmaker(
        bind=db_engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture(scope="function")
def db_session(db_session_factory) -> Generator[Session, None, None]:
    """Create a test database session.

    Yields:
        Session: SQLAlchemy session for testing
    """
    session = db_session_factory()

    yield session

    session.rollback()
    session.close()


@pytest.fixture
def likert_survey() -> Survey:
    """Three Likert questions across two categories plus an optional comment."""
    return Survey(
        id="test_survey",
        title="Test Survey",
        description="A test survey",
        questions=[
            Question(id="q1", text="Workload", type=QuestionType.LIKERT, category="Carga de Trabajo"),
            Question(id="q2", text="Leadership", type=QuestionType.LIKERT, category="Liderazgo"),
            Question(id="q3", text="More workload", type=QuestionType.LIKERT, category="Carga de Trabajo"),
            Question(id="q4", text="Comments", type=QuestionType.TEXT),
        ],
    )


@pytest.fixture
def mixed_survey() -> Survey:
    """Survey with one question of each type."""
    return Survey(
        id="mixed",
        title="Mixed Survey",
        description="One question per type",
        questions=[
            Question(id="m1", text="Exhaustion", type=QuestionType.LIKERT, category="Agotamiento"),
            Question(
                id="m2",
                text="Symptoms",
                type=QuestionType.MULTIPLE_CHOICE,
                options=["Nunca", "A veces", "Siempre"],
            ),
            Question(id="m3", text="Comments", type=QuestionType.TEXT),
        ],
    )


@pytest.fixture
def make_result():
    """Factory for SurveyResult records with sensible defaults."""
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _make(
        result_id: str = "r1",
        user_id: str = "user_1",
        scores: dict = None,
        total_score: float = 3.0,
        days: int = 0,
        survey_id: str = "s1",
        timestamp: datetime = None,
    ) -> SurveyResult:
        return SurveyResult(
            id=result_id,
            survey_id=survey_id,
            user_id=user_id,
            timestamp=timestamp or base_time + timedelta(days=days),
            answers={},
            scores=scores if scores is not None else {},
            total_score=total_score,
        )

    return _make
