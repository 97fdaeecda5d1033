"""Pydantic schemas for survey YAML definitions.

This module defines the structure and validation rules for survey YAML files.
All surveys must conform to these schemas to be loaded by the system.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import (
    BaseModel,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)

# Raw answer value as collected from a user or extracted from an image.
# Strict so JSON booleans are rejected instead of becoming 0 or 1.
AnswerValue = Union[StrictInt, StrictFloat, StrictStr]

# Inclusive bounds of the agreement scale presented for Likert items
LIKERT_MIN = 1
LIKERT_MAX = 5


class QuestionType(str, Enum):
    """Valid question types in survey definitions."""
    LIKERT = "LIKERT"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    TEXT = "TEXT"


class Question(BaseModel):
    """A single survey question.

    Attributes:
        id: Identifier, unique within its survey
        text: Question text shown to the respondent
        type: Question type (LIKERT/MULTIPLE_CHOICE/TEXT)
        options: Ordered choices, required for MULTIPLE_CHOICE
        category: Aggregation label for LIKERT sub-scores (e.g., "Liderazgo")
    """
    id: str = Field(..., min_length=1, description="Question identifier")
    text: str = Field(..., min_length=1, description="Question text")
    type: QuestionType = Field(..., description="Question type")
    options: Optional[list[str]] = Field(None, description="Choices for multiple choice")
    category: Optional[str] = Field(None, min_length=1, description="Aggregation category")

    @field_validator('options')
    @classmethod
    def options_not_blank(cls, v):
        """Reject blank option labels."""
        if v is not None and any(not option.strip() for option in v):
            raise ValueError('Options cannot be blank')
        return v

    @model_validator(mode='after')
    def validate_question_requirements(self):
        """Validate type-specific requirements."""
        if self.type == QuestionType.MULTIPLE_CHOICE:
            if not self.options:
                raise ValueError(f"Multiple choice question '{self.id}' must have options")
        elif self.options is not None:
            raise ValueError(f"Question '{self.id}' of type {self.type.value} cannot have options")
        return self

    @property
    def is_required(self) -> bool:
        """Whether an answer is needed before the respondent can move on."""
        return self.type in (QuestionType.LIKERT, QuestionType.MULTIPLE_CHOICE)


class Survey(BaseModel):
    """Complete survey definition.

    Root schema for survey YAML files. Question order is presentation order.

    Attributes:
        id: Unique survey identifier (matches YAML filename)
        title: Human-readable survey title
        description: Survey description
        questions: Ordered list of questions
    """
    id: str = Field(..., min_length=1, description="Survey identifier")
    title: str = Field(..., min_length=1, description="Survey title")
    description: str = Field(..., min_length=1, description="Survey description")
    questions: list[Question] = Field(..., min_length=1)

    @field_validator('id')
    @classmethod
    def id_alphanumeric(cls, v):
        """Ensure ID is alphanumeric with underscores/hyphens only."""
        if not v.replace('_', '').replace('-', '').isalnum():
            raise ValueError('Survey ID must be alphanumeric with underscores/hyphens')
        return v

    @model_validator(mode='after')
    def validate_unique_question_ids(self):
        """Reject surveys that reuse a question ID."""
        question_ids = [question.id for question in self.questions]
        if len(question_ids) != len(set(question_ids)):
            duplicates = sorted({qid for qid in question_ids if question_ids.count(qid) > 1})
            raise ValueError(f"Duplicate question IDs found: {duplicates}")
        return self

    def get_question(self, question_id: str) -> Optional[Question]:
        """Get question by ID.

        Args:
            question_id: Question identifier

        Returns:
            Question if found, None otherwise
        """
        for question in self.questions:
            if question.id == question_id:
                return question
        return None
