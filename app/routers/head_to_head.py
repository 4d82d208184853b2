# =============================================================================
# app/routers/head_to_head.py - Head-to-Head Endpoints
# =============================================================================
# Two-player games. Clients poll GET /{game_id} and POST /{game_id}/next;
# every state change is decided server-side.
#
# All endpoints require authentication and a Pro subscription to create/join.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import get_current_user, AuthUser
from app.dependencies import QuestionWriterDep
from core.models.game import (
    CreateGameResponse,
    GameResponse,
    GameStateResponse,
    JoinGameRequest,
    StartGameResponse,
    SubmitGameAnswerRequest,
    SubmitGameAnswerResponse,
)
from core.services.game_service import GameService

router = APIRouter()

GameIdPath = Annotated[UUID, Path(description="Game UUID")]


@router.post("/create", response_model=CreateGameResponse)
def create_game(
    user: AuthUser = Depends(get_current_user),
):
    """Create a game and get a six-character code to share."""
    return GameService.create_game(user.id)


@router.post("/join", response_model=GameResponse)
def join_game(
    request: JoinGameRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Join a waiting game by its code."""
    game = GameService.join_game(user.id, request.game_code)
    return GameResponse(game=game)


@router.get("/{game_id}", response_model=GameStateResponse)
def get_game(
    game_id: GameIdPath,
    user: AuthUser = Depends(get_current_user),
):
    """
    Get the game state.

    While active, includes the current question (without its answer) and
    whether each player has answered it.
    """
    return GameService.get_game_state(user.id, game_id)


@router.post("/{game_id}/ready", response_model=GameResponse)
def mark_ready(
    game_id: GameIdPath,
    user: AuthUser = Depends(get_current_user),
):
    """Mark the caller as ready."""
    game = GameService.mark_ready(user.id, game_id)
    return GameResponse(game=game)


@router.post("/{game_id}/start", response_model=StartGameResponse)
def start_game(
    game_id: GameIdPath,
    writer: QuestionWriterDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Start the game once both players are ready.

    Generates all of the game's questions before returning.
    """
    return GameService.start_game(user.id, game_id, writer=writer)


@router.post("/{game_id}/answer", response_model=SubmitGameAnswerResponse)
def submit_answer(
    game_id: GameIdPath,
    request: SubmitGameAnswerRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Answer the current question (once per player)."""
    return GameService.submit_answer(user.id, game_id, request.question_id, request.selected_answer)


@router.post("/{game_id}/next", response_model=GameStateResponse)
def next_question(
    game_id: GameIdPath,
    user: AuthUser = Depends(get_current_user),
):
    """
    Advance to the next question.

    No-op until both players have answered (waiting_for_answers=true).
    Completes the game after the last question.
    """
    return GameService.advance(user.id, game_id)
