# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends() and can be
# replaced with app.dependency_overrides in tests.
# =============================================================================

from typing import Annotated

from fastapi import Depends

from agents.question_writer import QuestionWriter
from lib.supabase_client import SupabaseClient


def get_supabase_client() -> type[SupabaseClient]:
    """
    Get Supabase client instance.

    Returns the singleton client wrapper.
    """
    return SupabaseClient


def get_question_writer() -> QuestionWriter:
    """Question writer backed by the configured OpenAI model."""
    return QuestionWriter()


# Type aliases for dependency injection
SupabaseDep = Annotated[type[SupabaseClient], Depends(get_supabase_client)]
QuestionWriterDep = Annotated[QuestionWriter, Depends(get_question_writer)]
