# =============================================================================
# core/services/profile_service.py - Profile Business Logic
# =============================================================================
# Handles profile reads, the daily question quota, and solo scoring.
# Separates HTTP concerns from database/business logic.
# =============================================================================

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import (
    AlreadyAnsweredError,
    DailyLimitReachedError,
    ProfileNotFoundError,
    ProRequiredError,
)
from core.models.profile import Profile, ProfileOverview
from core.models.question import AnswerResponse
from lib.scoring import (
    answers_match,
    apply_points,
    calculate_points,
    calculate_tier,
    is_pro,
    should_reset_daily_limit,
)
from lib.supabase_client import DuplicateRowError, SupabaseClient, SupabaseClientError
from lib.utils import utc_today

logger = logging.getLogger(__name__)

WRONG_ANSWERS_LIMIT = 50
POINTS_HISTORY_DAYS = 30
POINTS_HISTORY_LIMIT = 100
MAX_PROFILE_WRITE_ATTEMPTS = 3


class ProfileService:
    """
    Service for profile operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def get_profile(user_id: UUID | str) -> dict[str, Any]:
        """
        Get a user's profile row.

        Raises:
            ProfileNotFoundError: If the user has no profile
        """
        profile = SupabaseClient.fetch_profile(user_id)
        if not profile:
            raise ProfileNotFoundError(str(user_id))
        return profile

    @staticmethod
    def get_profile_overview(user_id: UUID | str) -> ProfileOverview:
        """
        Get the profile page payload.

        Includes the 50 most recent wrong answers (newest first) and up to
        100 points-history entries from the last 30 days (oldest first).
        """
        profile = ProfileService.get_profile(user_id)

        since = datetime.now(timezone.utc) - timedelta(days=POINTS_HISTORY_DAYS)
        wrong_answers = SupabaseClient.fetch_wrong_answers(user_id, limit=WRONG_ANSWERS_LIMIT)
        points_history = SupabaseClient.fetch_points_history(
            user_id,
            since_iso=since.isoformat(),
            limit=POINTS_HISTORY_LIMIT,
        )

        return ProfileOverview(
            profile=Profile.model_validate(profile),
            wrong_answers=wrong_answers,
            points_history=points_history,
        )

    @staticmethod
    def update_display_name(user_id: UUID | str, display_name: str) -> dict[str, Any]:
        """Rename the player."""
        updated = SupabaseClient.update_profile(user_id, {"display_name": display_name.strip()})
        if not updated:
            raise ProfileNotFoundError(str(user_id))

        logger.info(f"Updated display name for user: {user_id}")
        return updated

    # -------------------------------------------------------------------------
    # Plan & Quota
    # -------------------------------------------------------------------------

    @staticmethod
    def has_pro(profile: dict[str, Any]) -> bool:
        """Check whether a profile row has an active Pro subscription."""
        return is_pro(profile.get("plan"), profile.get("subscription_status"))

    @staticmethod
    def require_pro(profile: dict[str, Any], feature: str) -> None:
        """
        Raises:
            ProRequiredError: If the profile isn't Pro
        """
        if not ProfileService.has_pro(profile):
            raise ProRequiredError(feature)

    @staticmethod
    def questions_used_today(profile: dict[str, Any], today: date | None = None) -> int:
        """Daily counter value, treating a stale date as zero."""
        today = today or utc_today()
        if should_reset_daily_limit(profile.get("daily_reset_date"), today):
            return 0
        return profile.get("daily_questions_used") or 0

    @staticmethod
    def check_daily_quota(profile: dict[str, Any], today: date | None = None) -> int:
        """
        Make sure the player may get another question today.

        Returns:
            Questions already used today

        Raises:
            DailyLimitReachedError: If a free player is at the limit
        """
        used = ProfileService.questions_used_today(profile, today)
        if not ProfileService.has_pro(profile) and used >= settings.FREE_DAILY_QUESTION_LIMIT:
            raise DailyLimitReachedError(settings.FREE_DAILY_QUESTION_LIMIT)
        return used

    @staticmethod
    def consume_daily_question(profile: dict[str, Any], today: date | None = None) -> int | None:
        """
        Count one served question against today's quota.

        The counter is kept for Pro players too (shown on the profile page).

        Returns:
            Questions remaining today, or None for Pro (unlimited)

        Raises:
            DailyLimitReachedError: If a free player is at the limit
        """
        today = today or utc_today()
        used = ProfileService.check_daily_quota(profile, today) + 1

        SupabaseClient.update_profile(
            profile["id"],
            {"daily_questions_used": used, "daily_reset_date": today.isoformat()},
        )

        if ProfileService.has_pro(profile):
            return None
        return max(0, settings.FREE_DAILY_QUESTION_LIMIT - used)

    # -------------------------------------------------------------------------
    # Solo Scoring
    # -------------------------------------------------------------------------

    @staticmethod
    def record_answer(
        user_id: UUID | str,
        question: dict[str, Any],
        selected_answer: str,
    ) -> AnswerResponse:
        """
        Score a solo answer and update the player's totals.

        Every correct solo answer is worth the same base points whatever the
        question tier. The answer log is written first; its unique key on
        (user_id, question_id) stops a question from being scored twice.

        Args:
            user_id: The player
            question: Stored question row (with correct_answer)
            selected_answer: The option the player picked

        Returns:
            AnswerResponse (premium fields only for Pro players)

        Raises:
            ProfileNotFoundError: If the user has no profile
            AlreadyAnsweredError: If this question was already answered
            SupabaseClientError: If the profile kept changing under concurrent answers
        """
        profile = ProfileService.get_profile(user_id)

        correct = answers_match(selected_answer, question.get("correct_answer"))
        result = calculate_points(correct, profile.get("streak") or 0)

        try:
            SupabaseClient.insert_user_answer({
                "user_id": str(user_id),
                "question_id": str(question["id"]),
                "selected_answer": selected_answer,
                "correct": correct,
                "points_earned": result.points_earned,
            })
        except DuplicateRowError:
            raise AlreadyAnsweredError(str(question["id"]))

        # Totals are written only if they haven't moved since they were read;
        # a concurrent answer forces a re-read and the change is applied again.
        for _ in range(MAX_PROFILE_WRITE_ATTEMPTS):
            old_total = profile.get("points") or 0
            old_streak = profile.get("streak") or 0
            answered = profile.get("questions_answered") or 0

            new_total = apply_points(old_total, result.points_earned)
            new_tier = calculate_tier(new_total)
            new_streak = old_streak + 1 if correct else 0

            updated = SupabaseClient.update_profile(
                user_id,
                {
                    "points": new_total,
                    "tier": new_tier.value,
                    "streak": new_streak,
                    "questions_answered": answered + 1,
                },
                expect={"points": old_total, "streak": old_streak, "questions_answered": answered},
            )
            if updated is not None:
                break

            logger.info(f"Profile {user_id} changed while scoring, re-reading")
            profile = ProfileService.get_profile(user_id)
        else:
            raise SupabaseClientError(
                message="Profile kept changing while recording the answer",
                code="PROFILE_UPDATE_CONFLICT",
                suggestion="Answer one question at a time",
                details={"user_id": str(user_id), "question_id": str(question["id"])},
            )

        # Log the actual change (a penalty at 0 points changes nothing)
        if new_total != old_total:
            SupabaseClient.insert_points_history(user_id, new_total, new_total - old_total)

        if new_tier.value != profile.get("tier"):
            logger.info(f"User {user_id} moved from {profile.get('tier')} to {new_tier.value}")

        pro = ProfileService.has_pro(profile)
        return AnswerResponse(
            correct=correct,
            points_earned=result.points_earned,
            new_total_points=new_total,
            new_tier=new_tier,
            streak=new_streak,
            streak_bonus=result.streak_bonus,
            correct_answer=question.get("correct_answer", ""),
            explanation=question.get("explanation") or "",
            premium_explanation=question.get("premium_explanation") if pro else None,
            sources=question.get("sources") if pro else None,
        )
