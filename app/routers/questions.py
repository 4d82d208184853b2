# =============================================================================
# app/routers/questions.py - Solo Play Endpoints
# =============================================================================
# GET  /questions/next    - generate the next question (counts toward quota)
# POST /questions/answer  - score an answer
# POST /questions/review  - flag a question for rabbinic review
#
# All endpoints require authentication.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.auth import get_current_user, AuthUser
from app.dependencies import QuestionWriterDep
from core.models.profile import Tier
from core.models.question import (
    AnswerRequest,
    AnswerResponse,
    NextQuestionResponse,
    QuestionCategory,
    ReviewRequest,
    ReviewResponse,
)
from core.services.question_service import QuestionService

router = APIRouter()


@router.get("/next", response_model=NextQuestionResponse)
def next_question(
    writer: QuestionWriterDep,
    category: Annotated[QuestionCategory, Query(description="Question category")],
    tier: Annotated[Tier | None, Query(description="Difficulty tier (defaults to the player's tier)")] = None,
    subcategory: Annotated[str | None, Query(max_length=100, description="Parsha, book, tractate or topic")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """
    Generate the next solo question.

    The correct answer is withheld until the question is answered.
    Free players are limited to a daily number of questions (429 when reached).
    """
    return QuestionService.next_question(
        user.id,
        category,
        tier=tier,
        subcategory=subcategory or None,
        writer=writer,
    )


@router.post("/answer", response_model=AnswerResponse)
def answer_question(
    request: AnswerRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Answer a solo question.

    Returns points earned, the new total/tier/streak and the explanation.
    Premium explanation and sources are included for Pro players.
    """
    return QuestionService.answer_question(user.id, request.question_id, request.selected_answer)


@router.post("/review", response_model=ReviewResponse)
def submit_review(
    request: ReviewRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Submit a question for rabbinic review (once per player)."""
    return QuestionService.submit_for_review(user.id, request.question_id)
