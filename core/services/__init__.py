# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .profile_service import ProfileService
from .question_service import QuestionService
from .game_service import GameService
from .billing_service import BillingService

__all__ = [
    "ProfileService",
    "QuestionService",
    "GameService",
    "BillingService",
]
