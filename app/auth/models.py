# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel, ConfigDict
from uuid import UUID
from typing import Optional

from core.models.profile import Plan, SubscriptionStatus, Tier


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database. The email is used to find the
    player's Stripe customer during a manual billing sync.
    """
    id: UUID
    email: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class UserResponse(BaseModel):
    """
    Current user for /auth/me.

    Combines the token identity with the player's profile row, when one exists.
    """
    id: UUID
    email: Optional[str] = None
    display_name: Optional[str] = None
    tier: Optional[Tier] = None
    plan: Plan = Plan.FREE
    subscription_status: Optional[SubscriptionStatus] = None
    has_profile: bool = False


class TokenPayload(BaseModel):
    """
    Decoded JWT token payload from Supabase.

    Supabase tokens include standard JWT claims plus custom claims.
    """
    sub: str  # User ID
    email: Optional[str] = None
    aud: str  # Audience (should be "authenticated")
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
    role: Optional[str] = None
