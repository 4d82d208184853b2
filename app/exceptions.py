# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class TriviaException(Exception):
    """
    Base exception for the Torah Trivia API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "TRIVIA_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Profile Exceptions
# =============================================================================

class ProfileNotFoundError(TriviaException):
    """Raised when a user has no profile row."""

    def __init__(self, user_id: str):
        super().__init__(
            message="Profile not found",
            code="PROFILE_NOT_FOUND",
            status_code=404,
            suggestion="Sign out and back in so your profile can be created",
            details={"user_id": user_id}
        )


class ProRequiredError(TriviaException):
    """Raised when a free-plan user calls a Pro-only feature."""

    def __init__(self, feature: str):
        super().__init__(
            message=f"{feature} is only available for Pro members",
            code="PRO_REQUIRED",
            status_code=403,
            suggestion="Upgrade to Pro from the billing page",
            details={"feature": feature}
        )


class DailyLimitReachedError(TriviaException):
    """Raised when a free user has used all of today's questions."""

    def __init__(self, limit: int):
        super().__init__(
            message=f"Daily limit of {limit} questions reached",
            code="DAILY_LIMIT_REACHED",
            status_code=429,
            suggestion="Come back tomorrow or upgrade to Pro for unlimited questions",
            details={"limit": limit}
        )


# =============================================================================
# Question Exceptions
# =============================================================================

class QuestionNotFoundError(TriviaException):
    """Raised when a question ID doesn't exist."""

    def __init__(self, question_id: str):
        super().__init__(
            message=f"Question not found: {question_id}",
            code="QUESTION_NOT_FOUND",
            status_code=404,
            suggestion="Fetch a new question with GET /questions/next",
            details={"question_id": question_id}
        )


class InvalidSubcategoryError(TriviaException):
    """Raised when a subcategory doesn't belong to the requested category."""

    def __init__(self, category: str, subcategory: str):
        super().__init__(
            message=f"Unknown subcategory '{subcategory}' for {category}",
            code="INVALID_SUBCATEGORY",
            status_code=400,
            suggestion="Pick a subcategory from the list shown for this category",
            details={"category": category, "subcategory": subcategory}
        )


class AlreadyAnsweredError(TriviaException):
    """Raised when a user answers the same question twice."""

    def __init__(self, question_id: str):
        super().__init__(
            message="You have already answered this question",
            code="ALREADY_ANSWERED",
            status_code=409,
            details={"question_id": question_id}
        )


class DuplicateReviewError(TriviaException):
    """Raised when a user submits the same question for review twice."""

    def __init__(self, question_id: str):
        super().__init__(
            message="You have already submitted this question for review",
            code="DUPLICATE_REVIEW",
            status_code=409,
            details={"question_id": question_id}
        )


# =============================================================================
# Head-to-Head Exceptions
# =============================================================================

class GameNotFoundError(TriviaException):
    """Raised when a game ID or code doesn't exist."""

    def __init__(self, reference: str):
        super().__init__(
            message="Game not found",
            code="GAME_NOT_FOUND",
            status_code=404,
            suggestion="Check the game code and try again",
            details={"game": reference}
        )


class NotAPlayerError(TriviaException):
    """Raised when the caller is not one of the game's players."""

    def __init__(self, game_id: str):
        super().__init__(
            message="You are not a player in this game",
            code="NOT_A_PLAYER",
            status_code=403,
            details={"game_id": game_id}
        )


class GameStateError(TriviaException):
    """Raised when an action doesn't fit the game's current status."""

    def __init__(
        self,
        message: str,
        game_id: str,
        status: str | None = None,
        status_code: int = 409,
        suggestion: str | None = None,
    ):
        super().__init__(
            message=message,
            code="INVALID_GAME_STATE",
            status_code=status_code,
            suggestion=suggestion,
            details={"game_id": game_id, "status": status}
        )


class GameCodeUnavailableError(TriviaException):
    """Raised when no free game code could be found."""

    def __init__(self, attempts: int):
        super().__init__(
            message="Failed to generate a unique game code",
            code="GAME_CODE_UNAVAILABLE",
            status_code=503,
            suggestion="Please try again",
            details={"attempts": attempts}
        )


# =============================================================================
# Billing Exceptions
# =============================================================================

class BillingNotConfiguredError(TriviaException):
    """Raised when Stripe keys are missing."""

    def __init__(self, missing: str):
        super().__init__(
            message="Stripe is not configured",
            code="BILLING_NOT_CONFIGURED",
            status_code=503,
            suggestion=f"Set {missing} in the environment",
            details={"missing": missing}
        )


class WebhookSignatureError(TriviaException):
    """Raised when a Stripe webhook fails signature verification."""

    def __init__(self, error: str):
        super().__init__(
            message="Webhook signature verification failed",
            code="INVALID_WEBHOOK_SIGNATURE",
            status_code=400,
            details={"error": error}
        )


class PaymentProviderError(TriviaException):
    """Raised when a Stripe API call fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Payment provider error: {error}",
            code="PAYMENT_PROVIDER_ERROR",
            status_code=502,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def trivia_exception_handler(
    request: Request,
    exc: TriviaException
) -> JSONResponse:
    """
    Convert TriviaException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def application_error_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle ApplicationError subclasses raised below the service layer.

    Supabase and question-writer failures carry their own code and suggestion
    but no HTTP status, so they surface as 502 (upstream failure).
    """
    content = {
        "detail": getattr(exc, "message", str(exc)),
        "code": getattr(exc, "code", "UPSTREAM_ERROR"),
    }
    suggestion = getattr(exc, "suggestion", None)
    if suggestion:
        content["suggestion"] = suggestion
    return JSONResponse(status_code=502, content=content)
