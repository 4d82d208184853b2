# =============================================================================
# tests/test_question_writer.py - Question Writer Tests
# =============================================================================
# This module contains tests for:
# - Prompt construction (category, subcategory, difficulty, premium)
# - QuestionWriter with mocked OpenAI
# - Error handling (actionable messages)
#
# Tests use mocked OpenAI responses to avoid API costs.
# =============================================================================

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from agents.prompts.question_writer_system import (
    PREMIUM_OUTPUT_ADDENDUM,
    build_question_messages,
    build_question_prompt,
)
from agents.question_writer import QuestionGenerationError, QuestionWriter
from core.models.profile import Tier
from core.models.question import QuestionCategory
from tests.factories import make_draft_json


# =============================================================================
# Prompt Tests
# =============================================================================

class TestPrompts:
    """Test prompt building."""

    def test_prompt_includes_category_and_difficulty(self):
        prompt = build_question_prompt(QuestionCategory.TALMUD, Tier.SCHOLAR)

        assert "Talmud (Gemara and Mishnah)" in prompt
        assert "Difficulty: hard" in prompt
        assert "Scholar level" in prompt

    def test_prompt_labels_subcategory(self):
        prompt = build_question_prompt(QuestionCategory.TALMUD, Tier.SCHOLAR, "Berachot")

        assert "Tractate: Berachot" in prompt

    def test_premium_adds_sources_instructions(self):
        free = build_question_messages(QuestionCategory.CHUMASH, Tier.BEGINNER)
        premium = build_question_messages(QuestionCategory.CHUMASH, Tier.BEGINNER, premium=True)

        assert "premium_explanation" not in free[0]["content"]
        assert "premium_explanation" in premium[0]["content"]
        assert PREMIUM_OUTPUT_ADDENDUM.strip() in premium[0]["content"]
        assert premium[1]["role"] == "user"


# =============================================================================
# QuestionWriter Tests (Mocked OpenAI)
# =============================================================================

class TestQuestionWriter:
    """Test QuestionWriter with mocked OpenAI responses."""

    def test_write_question(self, mock_openai_client):
        writer = QuestionWriter(client=mock_openai_client)

        draft = writer.write_question(QuestionCategory.CHUMASH, Tier.STUDENT)

        assert draft.correct_answer == "Moshe"
        kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["model"] == writer.model

    def test_gadol_written_as_chacham(self, mock_openai_client):
        writer = QuestionWriter(client=mock_openai_client)

        writer.write_question(QuestionCategory.HALACHA, Tier.GADOL)

        messages = mock_openai_client.chat.completions.create.call_args.kwargs["messages"]
        assert "Difficulty: expert" in messages[1]["content"]
        assert "Chacham level" in messages[1]["content"]

    def test_uses_configured_temperature(self, mock_openai_client):
        writer = QuestionWriter(client=mock_openai_client, temperature=0.2)

        writer.write_question(QuestionCategory.TANACH, Tier.BEGINNER)

        assert mock_openai_client.chat.completions.create.call_args.kwargs["temperature"] == 0.2

    def test_api_failure_raises_generation_error(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = RuntimeError("connection reset")
        writer = QuestionWriter(client=client)

        with pytest.raises(QuestionGenerationError) as exc_info:
            writer.write_question(QuestionCategory.CHUMASH, Tier.BEGINNER)

        assert exc_info.value.code == "OPENAI_ERROR"
        assert exc_info.value.suggestion is not None

    def test_empty_response(self, mock_openai_response):
        client = MagicMock()
        client.chat.completions.create.return_value = mock_openai_response(None)
        writer = QuestionWriter(client=client)

        with pytest.raises(QuestionGenerationError) as exc_info:
            writer.write_question(QuestionCategory.CHUMASH, Tier.BEGINNER)

        assert exc_info.value.code == "EMPTY_RESPONSE"


class TestParseResponse:
    """Test response parsing without API calls."""

    def _writer(self):
        return QuestionWriter(client=MagicMock())

    def test_parse_valid_response(self):
        draft = self._writer()._parse_response(make_draft_json())

        assert draft.question.startswith("Who led")

    def test_parse_invalid_json_raises_error(self):
        with pytest.raises(QuestionGenerationError) as exc_info:
            self._writer()._parse_response("not valid json")

        assert exc_info.value.code == "JSON_PARSE_ERROR"
        assert exc_info.value.suggestion is not None

    def test_parse_non_object_raises_error(self):
        with pytest.raises(QuestionGenerationError) as exc_info:
            self._writer()._parse_response(json.dumps(["Moshe"]))

        assert exc_info.value.code == "JSON_PARSE_ERROR"

    def test_answer_outside_options_raises_error(self):
        with pytest.raises(QuestionGenerationError) as exc_info:
            self._writer()._parse_response(make_draft_json(correct_answer="Yosef"))

        assert exc_info.value.code == "VALIDATION_ERROR"
        assert exc_info.value.details["validation_errors"]
