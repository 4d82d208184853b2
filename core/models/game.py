# =============================================================================
# core/models/game.py - Head-to-Head Game Schemas
# =============================================================================
# These models define the API contract for head-to-head games:
# - GameStatus: Enum for game states
# - Game: One row of head_to_head_games
# - GameAnswer: One row of head_to_head_game_answers
# - Request/response models for each game endpoint
#
# Flow: waiting -> (join, ready x2, start) -> active -> (answer, next) x N -> completed
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from .question import PublicQuestion


GAME_CODE_LENGTH = 6

# Excludes look-alike characters (0/O, 1/I)
GAME_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


class GameStatus(str, Enum):
    """
    Possible states for a head-to-head game.

    - waiting: Created, collecting the second player and ready flags
    - active: Questions generated, players answering
    - completed: All questions answered
    """
    WAITING = "waiting"
    ACTIVE = "active"
    COMPLETED = "completed"


class Game(BaseModel):
    """
    A row of the head_to_head_games table.

    player1_name / player2_name are not columns; they are filled in from
    profiles when a game is returned to a client.
    """

    id: UUID
    game_code: str
    player1_id: UUID
    player2_id: UUID | None = None
    created_by: UUID | None = None
    status: GameStatus = GameStatus.WAITING
    player1_score: int = 0
    player2_score: int = 0
    player1_ready: bool = False
    player2_ready: bool = False
    current_question_index: int = 0
    total_questions: int = 10
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None

    player1_name: str | None = None
    player2_name: str | None = None

    model_config = {"from_attributes": True}


class GameAnswer(BaseModel):
    """A row of head_to_head_game_answers."""

    game_id: UUID
    question_id: UUID
    user_id: UUID
    selected_answer: str
    correct: bool
    points_earned: int = 0
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


# =============================================================================
# Requests
# =============================================================================

class JoinGameRequest(BaseModel):
    """Join a game by its share code."""

    game_code: str = Field(
        ...,
        min_length=GAME_CODE_LENGTH,
        max_length=GAME_CODE_LENGTH,
        description="Six-character game code (case-insensitive)"
    )


class SubmitGameAnswerRequest(BaseModel):
    """Answer the current question of a game."""

    question_id: UUID
    selected_answer: str = Field(..., min_length=1)


# =============================================================================
# Responses
# =============================================================================

class CreateGameResponse(BaseModel):
    """Response for POST /head-to-head/create."""

    game: Game
    game_code: str


class GameResponse(BaseModel):
    """Response wrapping a single game (join, ready)."""

    success: bool = True
    game: Game


class StartGameResponse(BaseModel):
    """Response for POST /head-to-head/{id}/start."""

    success: bool = True
    questions_generated: int
    game: Game


class GameStateResponse(BaseModel):
    """
    Game state for polling clients.

    Returned by GET /head-to-head/{id} and POST /head-to-head/{id}/next.
    The question fields are only set while the game is active.
    """

    game: Game
    current_question: PublicQuestion | None = None
    question_id: str | None = None
    question_points: int | None = None
    player1_answer: GameAnswer | None = None
    player2_answer: GameAnswer | None = None
    waiting_for_answers: bool = False
    game_complete: bool = False


class SubmitGameAnswerResponse(BaseModel):
    """Result of answering a game question."""

    correct: bool
    points_earned: int
    correct_answer: str
    game: Game
