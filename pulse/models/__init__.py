"""Database models and session management.

This package contains the SQLAlchemy ORM model for the result history and
database utilities.
"""

from pulse.models.database import Base, engine, SessionLocal, init_db
from pulse.models.result import SurveyResultRecord

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "init_db",
    "SurveyResultRecord",
]
