# =============================================================================
# agents/ - AI Question Writer
# =============================================================================
# This package wraps the LLM that writes trivia questions:
# - question_writer.py: Calls OpenAI in JSON mode and validates the result
#
# Models:
# - models/question_draft.py: QuestionDraft schema (model output contract)
#
# Prompts:
# - prompts/question_writer_system.py: System prompt and message builder
# =============================================================================

from agents.question_writer import QuestionWriter, QuestionGenerationError
from agents.models.question_draft import QuestionDraft

__all__ = [
    "QuestionWriter",
    "QuestionGenerationError",
    "QuestionDraft",
]
