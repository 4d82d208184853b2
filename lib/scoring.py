# =============================================================================
# lib/scoring.py - Points, Tiers and Quota Rules
# =============================================================================
# Pure game rules with no database or network access:
# - Tier thresholds, per-tier difficulty and head-to-head points
# - Solo scoring (flat points) with streak bonus
# - Daily quota and plan checks
# - Answer comparison
# - Head-to-head question schedule (tier mix + category rotation)
#
# Usage:
#   from lib.scoring import calculate_tier, calculate_points
#   tier = calculate_tier(profile["points"])
# =============================================================================

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from datetime import date

from core.models.profile import Plan, SubscriptionStatus, Tier
from core.models.question import Difficulty, QuestionCategory


# =============================================================================
# Tiers
# =============================================================================

# Upper bounds (exclusive) of each tier; anything above the last is Gadol
TIER_THRESHOLDS: list[tuple[int, Tier]] = [
    (100, Tier.BEGINNER),
    (300, Tier.STUDENT),
    (700, Tier.SCHOLAR),
    (1500, Tier.CHACHAM),
]

# Tiers a question can be written for
QUESTION_TIERS: list[Tier] = [Tier.BEGINNER, Tier.STUDENT, Tier.SCHOLAR, Tier.CHACHAM]

TIER_DIFFICULTY: dict[Tier, Difficulty] = {
    Tier.BEGINNER: Difficulty.EASY,
    Tier.STUDENT: Difficulty.MEDIUM,
    Tier.SCHOLAR: Difficulty.HARD,
    Tier.CHACHAM: Difficulty.EXPERT,
}

TIER_POINTS: dict[Tier, int] = {
    Tier.BEGINNER: 10,
    Tier.STUDENT: 20,
    Tier.SCHOLAR: 30,
    Tier.CHACHAM: 50,
}


def calculate_tier(points: int) -> Tier:
    """
    Derive a tier from a point total.

    Example:
        calculate_tier(0)     # Tier.BEGINNER
        calculate_tier(299)   # Tier.STUDENT
        calculate_tier(1500)  # Tier.GADOL
    """
    for upper_bound, tier in TIER_THRESHOLDS:
        if points < upper_bound:
            return tier
    return Tier.GADOL


def question_tier_for(tier: Tier | str) -> Tier:
    """Map a player tier to the question tier they are served."""
    tier = Tier(tier)
    return Tier.CHACHAM if tier == Tier.GADOL else tier


def tier_difficulty(tier: Tier | str) -> Difficulty:
    """Difficulty label for a tier."""
    return TIER_DIFFICULTY[question_tier_for(tier)]


def tier_points(tier: Tier | str) -> int:
    """Points a correct head-to-head answer is worth at this tier."""
    return TIER_POINTS[question_tier_for(tier)]


# =============================================================================
# Solo Scoring
# =============================================================================

SOLO_CORRECT_POINTS = 10
WRONG_ANSWER_PENALTY = -3
STREAK_BONUS = 5
STREAK_BONUS_EVERY = 5


@dataclass(frozen=True)
class PointsResult:
    """Outcome of scoring one solo answer."""

    points_earned: int
    streak_bonus: int
    new_streak: int


def calculate_points(
    correct: bool,
    current_streak: int,
    base_points: int = SOLO_CORRECT_POINTS,
) -> PointsResult:
    """
    Score one solo answer.

    Correct answers earn base_points and extend the streak; every fifth
    consecutive correct answer adds a streak bonus. Wrong answers cost
    a fixed penalty and reset the streak.

    Args:
        correct: Whether the answer was right
        current_streak: Streak before this answer
        base_points: Value of a correct answer (tier_points for game questions)

    Returns:
        PointsResult with points_earned (bonus included), streak_bonus, new_streak
    """
    if not correct:
        return PointsResult(points_earned=WRONG_ANSWER_PENALTY, streak_bonus=0, new_streak=0)

    new_streak = current_streak + 1
    bonus = STREAK_BONUS if new_streak % STREAK_BONUS_EVERY == 0 else 0
    return PointsResult(
        points_earned=base_points + bonus,
        streak_bonus=bonus,
        new_streak=new_streak,
    )


def apply_points(total: int, change: int) -> int:
    """Add a change to a total without going below zero."""
    return max(0, total + change)


# =============================================================================
# Quota & Plan
# =============================================================================

PAID_STATUSES = {SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING}


def should_reset_daily_limit(reset_date: date | str | None, today: date) -> bool:
    """True if the stored counter belongs to a previous day (or was never set)."""
    if not reset_date:
        return True
    if isinstance(reset_date, str):
        reset_date = date.fromisoformat(reset_date[:10])
    return reset_date != today


def is_pro(plan: Plan | str | None, subscription_status: SubscriptionStatus | str | None) -> bool:
    """Pro features need the pro plan and a paid subscription status."""
    if not plan or not subscription_status:
        return False
    return Plan(plan) == Plan.PRO and SubscriptionStatus(subscription_status) in PAID_STATUSES


# =============================================================================
# Answer Comparison
# =============================================================================

_WHITESPACE = re.compile(r"\s+")


def normalize_answer(answer: str | None) -> str:
    """Collapse whitespace and case for comparison."""
    return _WHITESPACE.sub(" ", (answer or "").strip()).casefold()


def answers_match(selected: str | None, correct: str | None) -> bool:
    """Compare a chosen option to the stored answer."""
    normalized = normalize_answer(correct)
    return bool(normalized) and normalize_answer(selected) == normalized


# =============================================================================
# Head-to-Head Schedule
# =============================================================================

# Jeopardy-style mix for a 10-question game
TIER_MIX: list[tuple[Tier, int]] = [
    (Tier.BEGINNER, 2),
    (Tier.STUDENT, 3),
    (Tier.SCHOLAR, 3),
    (Tier.CHACHAM, 2),
]
TIER_MIX_SIZE = sum(count for _, count in TIER_MIX)


@dataclass(frozen=True)
class ScheduledQuestion:
    """One slot of a head-to-head game."""

    index: int
    category: QuestionCategory
    tier: Tier

    @property
    def points(self) -> int:
        return tier_points(self.tier)

    @property
    def difficulty(self) -> Difficulty:
        return tier_difficulty(self.tier)


def build_tier_mix(total_questions: int) -> list[Tier]:
    """
    Tier list for a game, scaled from the 10-question mix.

    Scaling rounds down per tier; any shortfall is filled with Student.
    """
    tiers: list[Tier] = []
    for tier, count in TIER_MIX:
        tiers.extend([tier] * (count * total_questions // TIER_MIX_SIZE))
    tiers.extend([Tier.STUDENT] * (total_questions - len(tiers)))
    return tiers


def build_game_schedule(
    total_questions: int,
    rng: random.Random | None = None,
) -> list[ScheduledQuestion]:
    """
    Pick category and tier for each question of a game.

    Categories rotate through a shuffled order so consecutive questions
    differ; tiers are the shuffled tier mix.
    """
    rng = rng or random.Random()

    categories = list(QuestionCategory)
    rng.shuffle(categories)

    tiers = build_tier_mix(total_questions)
    rng.shuffle(tiers)

    return [
        ScheduledQuestion(
            index=i,
            category=categories[i % len(categories)],
            tier=tiers[i],
        )
        for i in range(total_questions)
    ]
