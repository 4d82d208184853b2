# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from datetime import date, datetime, timezone
from typing import Any
from uuid import UUID


# =============================================================================
# ID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Handles both string and UUID objects, ensuring consistent string output.

    Example:
        game_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        game_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


def normalize_id(value: Any) -> str | None:
    """
    Normalize an ID for equality checks.

    Rows and tokens don't always agree on case or stray whitespace,
    so player checks compare trimmed lower-case strings.
    """
    if not value:
        return None
    return str(value).strip().lower()


def same_id(left: Any, right: Any) -> bool:
    """True if both IDs are present and equal after normalization."""
    left_id = normalize_id(left)
    return left_id is not None and left_id == normalize_id(right)


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now_iso() -> str:
    """Current UTC timestamp in ISO format (for timestamptz columns)."""
    return datetime.now(timezone.utc).isoformat()


def utc_today() -> date:
    """Current UTC date. Daily quotas roll over at UTC midnight."""
    return datetime.now(timezone.utc).date()


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging

    Example:
        class MyServiceError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="MY_SERVICE_ERROR", **kwargs)
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }
