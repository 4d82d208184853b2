# =============================================================================
# app/routers/profile.py - Profile Endpoints
# =============================================================================
# The profile page: totals, recent wrong answers and points history.
# All endpoints require authentication.
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import get_current_user, AuthUser
from core.models.profile import Profile, ProfileOverview, ProfileUpdate
from core.services.profile_service import ProfileService

router = APIRouter()


@router.get("", response_model=ProfileOverview)
def get_profile(
    user: AuthUser = Depends(get_current_user),
):
    """
    Get the current player's profile page.

    Includes the 50 most recent wrong answers and the last 30 days of
    points history.
    """
    return ProfileService.get_profile_overview(user.id)


@router.patch("", response_model=Profile)
def update_profile(
    request: ProfileUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Change the player's display name."""
    return ProfileService.update_display_name(user.id, request.display_name)
