# =============================================================================
# tests/test_scoring.py - Game Rule Tests
# =============================================================================
# This module contains tests for:
# - Tier thresholds and tier values
# - Solo scoring (points, penalty, streak bonus)
# - Daily quota reset and Pro detection
# - Answer comparison
# - Head-to-head schedules
# =============================================================================

import random
from collections import Counter
from datetime import date

import pytest

from core.models.profile import Tier
from core.models.question import Difficulty, QuestionCategory
from lib.scoring import (
    answers_match,
    apply_points,
    build_game_schedule,
    build_tier_mix,
    calculate_points,
    calculate_tier,
    is_pro,
    question_tier_for,
    should_reset_daily_limit,
    tier_difficulty,
    tier_points,
)


# =============================================================================
# Tiers
# =============================================================================

class TestTiers:
    """Test tier thresholds."""

    @pytest.mark.parametrize("points,expected", [
        (0, Tier.BEGINNER),
        (99, Tier.BEGINNER),
        (100, Tier.STUDENT),
        (299, Tier.STUDENT),
        (300, Tier.SCHOLAR),
        (699, Tier.SCHOLAR),
        (700, Tier.CHACHAM),
        (1499, Tier.CHACHAM),
        (1500, Tier.GADOL),
        (100000, Tier.GADOL),
    ])
    def test_calculate_tier(self, points, expected):
        assert calculate_tier(points) == expected

    def test_gadol_gets_chacham_questions(self):
        assert question_tier_for(Tier.GADOL) == Tier.CHACHAM
        assert question_tier_for("Scholar") == Tier.SCHOLAR

    def test_tier_values_increase(self):
        values = [tier_points(t) for t in (Tier.BEGINNER, Tier.STUDENT, Tier.SCHOLAR, Tier.CHACHAM)]
        assert values == [10, 20, 30, 50]
        assert tier_points(Tier.GADOL) == 50

    def test_tier_difficulty(self):
        assert tier_difficulty(Tier.BEGINNER) == Difficulty.EASY
        assert tier_difficulty("Chacham") == Difficulty.EXPERT


# =============================================================================
# Solo Scoring
# =============================================================================

class TestCalculatePoints:
    """Test solo answer scoring."""

    def test_solo_default_is_flat_ten(self):
        assert calculate_points(True, current_streak=0).points_earned == 10

    def test_correct_answer_earns_base_points(self):
        result = calculate_points(True, current_streak=0, base_points=20)

        assert result.points_earned == 20
        assert result.streak_bonus == 0
        assert result.new_streak == 1

    def test_wrong_answer_costs_three_and_resets_streak(self):
        result = calculate_points(False, current_streak=7, base_points=50)

        assert result.points_earned == -3
        assert result.new_streak == 0

    def test_fifth_correct_in_a_row_earns_bonus(self):
        result = calculate_points(True, current_streak=4)

        assert result.new_streak == 5
        assert result.streak_bonus == 5
        assert result.points_earned == 15

    def test_tenth_correct_earns_bonus_again(self):
        assert calculate_points(True, current_streak=9).streak_bonus == 5
        assert calculate_points(True, current_streak=10).streak_bonus == 0

    def test_total_never_negative(self):
        assert apply_points(2, -3) == 0
        assert apply_points(0, -3) == 0
        assert apply_points(10, -3) == 7


# =============================================================================
# Quota & Plan
# =============================================================================

class TestQuotaAndPlan:
    """Test daily reset and Pro detection."""

    def test_reset_when_never_set(self):
        assert should_reset_daily_limit(None, date(2024, 1, 15))

    def test_no_reset_same_day(self):
        assert not should_reset_daily_limit(date(2024, 1, 15), date(2024, 1, 15))
        assert not should_reset_daily_limit("2024-01-15", date(2024, 1, 15))

    def test_reset_next_day(self):
        assert should_reset_daily_limit("2024-01-14", date(2024, 1, 15))

    def test_timestamp_string_is_truncated_to_date(self):
        assert not should_reset_daily_limit("2024-01-15T23:59:00+00:00", date(2024, 1, 15))

    @pytest.mark.parametrize("plan,status,expected", [
        ("pro", "active", True),
        ("pro", "trialing", True),
        ("pro", "canceled", False),
        ("pro", "past_due", False),
        ("free", "active", False),
        ("pro", None, False),
        (None, None, False),
    ])
    def test_is_pro(self, plan, status, expected):
        assert is_pro(plan, status) is expected


# =============================================================================
# Answer Comparison
# =============================================================================

class TestAnswersMatch:
    """Test answer normalization."""

    def test_exact_match(self):
        assert answers_match("Moshe", "Moshe")

    def test_case_and_whitespace_ignored(self):
        assert answers_match("  moshe  rabbeinu ", "Moshe Rabbeinu")

    def test_different_answer(self):
        assert not answers_match("Aharon", "Moshe")

    def test_empty_correct_answer_never_matches(self):
        assert not answers_match("", "")
        assert not answers_match(None, None)


# =============================================================================
# Head-to-Head Schedule
# =============================================================================

class TestGameSchedule:
    """Test question tier mix and category rotation."""

    def test_ten_question_mix(self):
        counts = Counter(build_tier_mix(10))

        assert counts == {
            Tier.BEGINNER: 2,
            Tier.STUDENT: 3,
            Tier.SCHOLAR: 3,
            Tier.CHACHAM: 2,
        }

    def test_small_game_padded_with_student(self):
        tiers = build_tier_mix(3)

        assert len(tiers) == 3
        assert tiers.count(Tier.STUDENT) >= 1

    def test_schedule_indexes_and_length(self):
        schedule = build_game_schedule(10, random.Random(42))

        assert [slot.index for slot in schedule] == list(range(10))

    def test_consecutive_categories_differ(self):
        schedule = build_game_schedule(10, random.Random(7))

        for previous, current in zip(schedule, schedule[1:]):
            assert previous.category != current.category
        assert {slot.category for slot in schedule} == set(QuestionCategory)

    def test_slot_points_follow_tier(self):
        for slot in build_game_schedule(10, random.Random(1)):
            assert slot.points == tier_points(slot.tier)
            assert slot.difficulty == tier_difficulty(slot.tier)

    def test_same_seed_same_schedule(self):
        assert build_game_schedule(10, random.Random(3)) == build_game_schedule(10, random.Random(3))
