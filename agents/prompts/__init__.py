# =============================================================================
# agents/prompts/ - System Prompts
# =============================================================================
# - question_writer_system.py: Question writer prompt
#
# Organized with XML tags for clear structure.
# =============================================================================

from agents.prompts.question_writer_system import (
    QUESTION_WRITER_SYSTEM_PROMPT,
    build_question_messages,
    build_question_prompt,
)

__all__ = [
    "QUESTION_WRITER_SYSTEM_PROMPT",
    "build_question_messages",
    "build_question_prompt",
]
