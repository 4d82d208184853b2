# =============================================================================
# agents/question_writer.py - Trivia Question Writer
# =============================================================================
# Generates multiple-choice Torah trivia questions with OpenAI.
#
# Flow:
#   1. Build messages for the requested category/tier/subcategory
#   2. Call OpenAI in JSON mode
#   3. Parse and validate into a QuestionDraft (Pydantic)
#
# Design principles:
# - Direct OpenAI calls, no framework
# - The caller decides category/difficulty/tier; the model only writes content
# - Actionable errors with suggestions
#
# Usage:
#   writer = QuestionWriter()
#   draft = writer.write_question(QuestionCategory.CHUMASH, Tier.STUDENT)
# =============================================================================

from __future__ import annotations

import json
import logging
from typing import Any

from openai import OpenAI
from pydantic import ValidationError

from app.config import settings
from agents.models.question_draft import QuestionDraft
from agents.prompts.question_writer_system import build_question_messages
from core.models.profile import Tier
from core.models.question import QuestionCategory
from lib.scoring import question_tier_for
from lib.utils import ApplicationError

# Set up logging for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================

class QuestionGenerationError(ApplicationError):
    """
    Error while generating a question.

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging
    """

    def __init__(
        self,
        message: str,
        code: str = "QUESTION_GENERATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)


# =============================================================================
# Question Writer
# =============================================================================

class QuestionWriter:
    """
    Writes trivia questions with OpenAI.

    Example:
        writer = QuestionWriter()
        draft = writer.write_question(
            category=QuestionCategory.TALMUD,
            tier=Tier.SCHOLAR,
            subcategory="Berachot",
            premium=True,
        )
        print(draft.question, draft.correct_answer)

    Attributes:
        model: OpenAI model to use (default from settings)
        temperature: Generation temperature (default from settings)
    """

    def __init__(
        self,
        model: str | None = None,
        temperature: float | None = None,
        client: OpenAI | None = None,
    ):
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY)
        self.model = model or settings.OPENAI_MODEL
        self.temperature = temperature if temperature is not None else settings.QUESTION_TEMPERATURE

        logger.debug(f"QuestionWriter initialized with model={self.model}, temp={self.temperature}")

    def write_question(
        self,
        category: QuestionCategory,
        tier: Tier,
        subcategory: str | None = None,
        premium: bool = False,
    ) -> QuestionDraft:
        """
        Write one question.

        Args:
            category: Question category
            tier: Player tier (Gadol is written as Chacham)
            subcategory: Optional parsha/book/tractate/topic
            premium: Also request premium_explanation and sources

        Returns:
            Validated QuestionDraft

        Raises:
            QuestionGenerationError: If the API call or validation fails
        """
        tier = question_tier_for(tier)
        logger.info(
            f"Writing {tier.value} {category.value} question"
            + (f" ({subcategory})" if subcategory else "")
        )

        messages = build_question_messages(category, tier, subcategory, premium=premium)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                response_format={"type": "json_object"},
                messages=messages,
            )
            response_text = response.choices[0].message.content or ""
            logger.debug(f"OpenAI response: {response_text[:200]}...")

        except Exception as e:
            raise QuestionGenerationError(
                message=f"OpenAI API call failed: {e}",
                code="OPENAI_ERROR",
                suggestion="Check your OPENAI_API_KEY and network connection",
                details={"model": self.model}
            )

        if not response_text:
            raise QuestionGenerationError(
                message="Model returned an empty response",
                code="EMPTY_RESPONSE",
                suggestion="Try again; the model occasionally returns nothing",
                details={"model": self.model}
            )

        return self._parse_response(response_text)

    # -------------------------------------------------------------------------
    # Response Parsing
    # -------------------------------------------------------------------------

    def _parse_response(self, response_text: str) -> QuestionDraft:
        """
        Parse a JSON response into a QuestionDraft.

        Raises:
            QuestionGenerationError: If JSON parsing or validation fails
        """
        try:
            data = json.loads(response_text)
        except json.JSONDecodeError as e:
            raise QuestionGenerationError(
                message=f"Invalid JSON response from model: {e}",
                code="JSON_PARSE_ERROR",
                suggestion="The model didn't return valid JSON. Try again.",
                details={"raw_response": response_text[:500]}
            )

        if not isinstance(data, dict):
            raise QuestionGenerationError(
                message="Model returned JSON that is not an object",
                code="JSON_PARSE_ERROR",
                details={"raw_response": response_text[:500]}
            )

        try:
            return QuestionDraft.model_validate(data)
        except ValidationError as e:
            errors = [f"{err['loc']}: {err['msg']}" for err in e.errors()]
            raise QuestionGenerationError(
                message=f"Invalid question format: {'; '.join(errors)}",
                code="VALIDATION_ERROR",
                suggestion="The model's response was valid JSON but not a usable question. Try again.",
                details={"validation_errors": errors}
            )
