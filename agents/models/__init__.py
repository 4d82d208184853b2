# =============================================================================
# agents/models/ - Model Output Schemas
# =============================================================================
# Pydantic models that define what the question writer must return:
# - question_draft.py: QuestionDraft (question, options, answer, sources)
# =============================================================================

from agents.models.question_draft import QuestionDraft

__all__ = [
    "QuestionDraft",
]
