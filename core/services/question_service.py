# =============================================================================
# core/services/question_service.py - Solo Play Business Logic
# =============================================================================
# Serves generated questions, scores answers and takes review submissions.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from agents.question_writer import QuestionWriter
from app.exceptions import (
    DuplicateReviewError,
    InvalidSubcategoryError,
    QuestionNotFoundError,
)
from core.models.profile import Tier
from core.models.question import (
    AnswerResponse,
    NextQuestionResponse,
    Question,
    QuestionCategory,
    ReviewResponse,
    is_valid_subcategory,
)
from core.services.profile_service import ProfileService
from lib.scoring import calculate_tier, question_tier_for, tier_difficulty
from lib.supabase_client import DuplicateRowError, SupabaseClient

logger = logging.getLogger(__name__)


class QuestionService:
    """
    Service for solo play.

    Question generation goes through a QuestionWriter; pass one in to
    reuse a client or to substitute a fake in tests.
    """

    @staticmethod
    def next_question(
        user_id: UUID | str,
        category: QuestionCategory,
        tier: Tier | None = None,
        subcategory: str | None = None,
        writer: QuestionWriter | None = None,
    ) -> NextQuestionResponse:
        """
        Generate, store and serve the next solo question.

        The quota is checked before calling the model and only consumed
        once the question is stored, so a failed generation costs nothing.

        Args:
            user_id: The player
            category: Question category
            tier: Difficulty tier (defaults to the player's own tier)
            subcategory: Optional parsha/book/tractate/topic

        Raises:
            InvalidSubcategoryError: If subcategory doesn't fit the category
            DailyLimitReachedError: If a free player is at the limit
            QuestionGenerationError: If the model fails
        """
        if subcategory and not is_valid_subcategory(category, subcategory):
            raise InvalidSubcategoryError(category.value, subcategory)

        profile = ProfileService.get_profile(user_id)
        ProfileService.check_daily_quota(profile)

        if tier is None:
            tier = Tier(profile.get("tier") or calculate_tier(profile.get("points") or 0))
        tier = question_tier_for(tier)
        premium = ProfileService.has_pro(profile)

        writer = writer or QuestionWriter()
        draft = writer.write_question(category, tier, subcategory=subcategory, premium=premium)

        row = SupabaseClient.insert_question(draft.to_row(
            category=category.value,
            subcategory=subcategory,
            difficulty=tier_difficulty(tier).value,
            tier=tier.value,
            generated_by=str(user_id),
        ))
        question = Question.model_validate(row)

        remaining = ProfileService.consume_daily_question(profile)
        logger.info(f"Served question {row['id']} to user {user_id} ({tier.value} {category.value})")

        return NextQuestionResponse(
            question_id=str(row["id"]),
            question=question.to_public(),
            daily_questions_remaining=remaining,
        )

    @staticmethod
    def get_question(question_id: UUID | str) -> dict[str, Any]:
        """
        Raises:
            QuestionNotFoundError: If the question doesn't exist
        """
        question = SupabaseClient.fetch_question(question_id)
        if not question:
            raise QuestionNotFoundError(str(question_id))
        return question

    @staticmethod
    def answer_question(
        user_id: UUID | str,
        question_id: UUID | str,
        selected_answer: str,
    ) -> AnswerResponse:
        """
        Score a solo answer against the stored question.

        Raises:
            QuestionNotFoundError: If the question doesn't exist
            AlreadyAnsweredError: If the player already answered it
        """
        question = QuestionService.get_question(question_id)
        return ProfileService.record_answer(user_id, question, selected_answer)

    @staticmethod
    def submit_for_review(user_id: UUID | str, question_id: UUID | str) -> ReviewResponse:
        """
        Flag a question for rabbinic review.

        Raises:
            QuestionNotFoundError: If the question doesn't exist
            DuplicateReviewError: If the player already flagged it
        """
        QuestionService.get_question(question_id)

        if SupabaseClient.fetch_review(question_id, user_id):
            raise DuplicateReviewError(str(question_id))

        try:
            review = SupabaseClient.insert_review(question_id, user_id)
        except DuplicateRowError:
            raise DuplicateReviewError(str(question_id))

        logger.info(f"User {user_id} submitted question {question_id} for review")
        return ReviewResponse(review_id=review["id"])
