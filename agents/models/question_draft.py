# =============================================================================
# agents/models/question_draft.py - Question Draft Schema
# =============================================================================
# This module defines the QuestionDraft schema - the contract between the
# question writer (LLM output) and the services that store questions.
#
# Validation catches the usual model slips before anything is saved:
# - Missing question/options/answer
# - Duplicate or blank options
# - A correct answer that isn't one of the options
#
# Example model output:
#   {
#       "question": "Who built the Ark?",
#       "options": ["Noach", "Avraham", "Moshe", "Yaakov"],
#       "correct_answer": "Noach",
#       "explanation": "Bereishit 6:14 commands Noach to build the teivah."
#   }
# =============================================================================

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from core.models.question import Source
from lib.scoring import answers_match


class QuestionDraft(BaseModel):
    """
    A question as written by the model, before it is stored.

    Category, difficulty and tier are set by the caller, not trusted from
    the model output.
    """

    question: str = Field(..., min_length=5, description="The question text")

    options: list[str] = Field(
        ...,
        min_length=2,
        max_length=6,
        description="Answer choices (4 requested)"
    )

    correct_answer: str = Field(..., min_length=1, description="One of the options")

    explanation: str = Field(
        default="",
        description="Short explanation of the correct answer"
    )

    premium_explanation: str | None = Field(
        default=None,
        description="Longer explanation for Pro members"
    )

    sources: list[Source] | None = Field(
        default=None,
        description="Cited sources backing the premium explanation"
    )

    @field_validator("options")
    @classmethod
    def options_must_be_distinct(cls, options: list[str]) -> list[str]:
        """Strip options and reject blanks/duplicates."""
        cleaned = [str(option).strip() for option in options]
        if any(not option for option in cleaned):
            raise ValueError("options must not be blank")
        if len({option.casefold() for option in cleaned}) != len(cleaned):
            raise ValueError("options must be distinct")
        return cleaned

    @model_validator(mode="after")
    def answer_must_be_an_option(self) -> "QuestionDraft":
        """
        Make sure the answer is one of the options.

        Snaps the answer to the option's exact text when the model only
        differs in case or spacing.
        """
        for option in self.options:
            if answers_match(self.correct_answer, option):
                self.correct_answer = option
                return self
        raise ValueError("correct_answer must be one of the options")

    def to_row(self, **extra: Any) -> dict[str, Any]:
        """Build a questions-table row, merging caller-set columns."""
        row = self.model_dump(mode="json", exclude_none=True)
        row.update(extra)
        return row
