# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for authentication-related operations.
#
# Note: Actual signup/login is handled by Supabase Auth client-side.
# A database trigger creates the player's profile row on signup.
# =============================================================================

import logging
from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, UserResponse
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> UserResponse:
    """
    Get the current authenticated user with their profile summary.

    Raises:
        401: If not authenticated
    """
    try:
        profile = SupabaseClient.fetch_profile(user.id)
    except SupabaseClientError as e:
        logger.warning(f"Could not fetch profile for {user.id}: {e}")
        profile = None

    if not profile:
        # Auth user exists but the profile trigger hasn't run yet
        return UserResponse(id=user.id, email=user.email)

    return UserResponse(
        id=user.id,
        email=user.email,
        display_name=profile.get("display_name"),
        tier=profile.get("tier"),
        plan=profile.get("plan") or "free",
        subscription_status=profile.get("subscription_status"),
        has_profile=True,
    )


@router.get("/verify")
def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Useful for checking if a stored token is still valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email
    }
