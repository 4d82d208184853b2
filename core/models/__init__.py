# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - profile.py: Player profile, tier and plan enums
# - question.py: Questions, categories, solo answer and review schemas
# - game.py: Head-to-head game schemas
# - billing.py: Subscription checkout/sync schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Profile Models - Player state
# -----------------------------------------------------------------------------
from .profile import (
    Plan,
    PointsHistoryEntry,
    Profile,
    ProfileOverview,
    ProfileUpdate,
    SubscriptionStatus,
    Tier,
    WrongAnswer,
)

# -----------------------------------------------------------------------------
# Question Models - Solo play
# -----------------------------------------------------------------------------
from .question import (
    AnswerRequest,
    AnswerResponse,
    Difficulty,
    NextQuestionResponse,
    PublicQuestion,
    Question,
    QuestionCategory,
    ReviewRequest,
    ReviewResponse,
    Source,
    SUBCATEGORIES,
    is_valid_subcategory,
)

# -----------------------------------------------------------------------------
# Game Models - Head-to-head
# -----------------------------------------------------------------------------
from .game import (
    CreateGameResponse,
    Game,
    GameAnswer,
    GameResponse,
    GameStateResponse,
    GameStatus,
    JoinGameRequest,
    StartGameResponse,
    SubmitGameAnswerRequest,
    SubmitGameAnswerResponse,
)

# -----------------------------------------------------------------------------
# Billing Models - Stripe subscription
# -----------------------------------------------------------------------------
from .billing import (
    CheckoutResponse,
    SyncResponse,
    WebhookAck,
)

__all__ = [
    # Profile
    "Plan",
    "PointsHistoryEntry",
    "Profile",
    "ProfileOverview",
    "ProfileUpdate",
    "SubscriptionStatus",
    "Tier",
    "WrongAnswer",
    # Question
    "AnswerRequest",
    "AnswerResponse",
    "Difficulty",
    "NextQuestionResponse",
    "PublicQuestion",
    "Question",
    "QuestionCategory",
    "ReviewRequest",
    "ReviewResponse",
    "Source",
    "SUBCATEGORIES",
    "is_valid_subcategory",
    # Game
    "CreateGameResponse",
    "Game",
    "GameAnswer",
    "GameResponse",
    "GameStateResponse",
    "GameStatus",
    "JoinGameRequest",
    "StartGameResponse",
    "SubmitGameAnswerRequest",
    "SubmitGameAnswerResponse",
    # Billing
    "CheckoutResponse",
    "SyncResponse",
    "WebhookAck",
]
