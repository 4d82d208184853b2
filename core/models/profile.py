# =============================================================================
# core/models/profile.py - Player Profile Schemas
# =============================================================================
# These models define the API contract for player profiles:
# - Tier / Plan / SubscriptionStatus: Enums stored on the profiles row
# - Profile: One row of the profiles table
# - ProfileOverview: Profile page payload (wrong answers + points history)
#
# Tier is derived from points (see lib/scoring.py) and stored alongside
# points so leaderboards and the navbar don't recompute it.
# =============================================================================

from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class Tier(str, Enum):
    """
    Reward bracket derived from a player's point total.

    The first four double as question difficulty brackets.
    GADOL is reachable by points only; Gadol players get Chacham questions.
    """
    BEGINNER = "Beginner"
    STUDENT = "Student"
    SCHOLAR = "Scholar"
    CHACHAM = "Chacham"
    GADOL = "Gadol"


class Plan(str, Enum):
    """Subscription level."""
    FREE = "free"
    PRO = "pro"


class SubscriptionStatus(str, Enum):
    """Stripe subscription status mirrored onto the profile."""
    ACTIVE = "active"
    CANCELED = "canceled"
    PAST_DUE = "past_due"
    TRIALING = "trialing"
    NONE = "none"


class Profile(BaseModel):
    """
    A row of the profiles table.

    Example:
        {
            "id": "550e8400-e29b-41d4-a716-446655440000",
            "display_name": "Rivka",
            "points": 240,
            "tier": "Student",
            "streak": 3,
            "questions_answered": 31,
            "plan": "free",
            "subscription_status": "none",
            "daily_questions_used": 4,
            "daily_reset_date": "2024-01-15"
        }
    """

    id: UUID = Field(..., description="User ID (same as the auth user)")

    display_name: str | None = Field(
        default=None,
        description="Name shown to opponents and on the profile page"
    )

    points: int = Field(default=0, ge=0, description="Lifetime point total")

    tier: Tier = Field(default=Tier.BEGINNER, description="Tier derived from points")

    streak: int = Field(default=0, ge=0, description="Consecutive correct solo answers")

    questions_answered: int = Field(default=0, ge=0)

    plan: Plan = Field(default=Plan.FREE)

    subscription_status: SubscriptionStatus = Field(default=SubscriptionStatus.NONE)

    daily_questions_used: int = Field(
        default=0,
        ge=0,
        description="Solo questions served since daily_reset_date"
    )

    daily_reset_date: date | None = Field(
        default=None,
        description="UTC date the daily counter belongs to"
    )

    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class PointsHistoryEntry(BaseModel):
    """One entry of the points_history log."""

    id: Any = None
    points: int = Field(..., description="Point total after the change")
    points_change: int = Field(..., description="Signed change that produced it")
    created_at: datetime | None = None


class WrongAnswer(BaseModel):
    """A question the player got wrong, for the review list."""

    id: Any = None
    selected_answer: str
    created_at: datetime | None = None
    questions: dict[str, Any] | None = Field(
        default=None,
        description="Joined question row (question, options, correct_answer, ...)"
    )


class ProfileOverview(BaseModel):
    """
    Profile page payload.

    Returned by GET /profile.
    """

    profile: Profile
    wrong_answers: list[WrongAnswer] = Field(default_factory=list)
    points_history: list[PointsHistoryEntry] = Field(default_factory=list)


class ProfileUpdate(BaseModel):
    """Fields a player may change on their own profile."""

    display_name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="New display name"
    )
