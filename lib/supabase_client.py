# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized methods for:
# - Profiles (points, tier, quota, plan)
# - Questions and the solo answer/points logs
# - Rabbinic review submissions
# - Head-to-head games, their questions and answers
#
# Writes that race between two players are expressed as conditional updates
# (filters on the expected current values). An update that matches no row
# returns None, and the caller re-reads to find out why.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   profile = SupabaseClient.fetch_profile(user_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import ApplicationError

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code for .single() matching no rows
NOT_FOUND_CODE = "PGRST116"

# Postgres unique_violation
UNIQUE_VIOLATION_CODE = "23505"


class SupabaseClientError(ApplicationError):
    """
    Error during Supabase operations.

    Provides actionable error messages: tells HOW to fix, not just WHAT failed.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class DuplicateRowError(SupabaseClientError):
    """Insert hit a unique constraint (row already exists)."""

    def __init__(self, table: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Row already exists in {table}",
            code="DUPLICATE_ROW",
            details={"table": table, **(details or {})},
        )


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        profile = SupabaseClient.fetch_profile(user_id)
        game = SupabaseClient.fetch_game_by_code("K7QX2M")
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    @staticmethod
    def _is_not_found(error: Exception) -> bool:
        return NOT_FOUND_CODE in str(error)

    @staticmethod
    def _is_unique_violation(error: Exception) -> bool:
        return getattr(error, "code", None) == UNIQUE_VIOLATION_CODE or UNIQUE_VIOLATION_CODE in str(error)

    @classmethod
    def _fetch_one(
        cls,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
        error_code: str = "FETCH_FAILED",
    ) -> dict[str, Any] | None:
        """
        Fetch a single row matching all equality filters.

        Returns None when no row matches.
        """
        client = cls.get_client()

        try:
            query = client.table(table).select(columns)
            for column, value in filters.items():
                query = query.eq(column, value)
            response = query.single().execute()
            return response.data

        except Exception as e:
            if cls._is_not_found(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code=error_code,
                details={"table": table, "filters": filters}
            )

    @classmethod
    def _insert(
        cls,
        table: str,
        data: dict[str, Any] | list[dict[str, Any]],
        error_code: str = "INSERT_FAILED",
    ) -> list[dict[str, Any]]:
        """
        Insert one or more rows and return what was written.

        Raises:
            DuplicateRowError: On a unique constraint violation
            SupabaseClientError: If the insert fails or returns nothing
        """
        client = cls.get_client()

        try:
            response = client.table(table).insert(data).execute()
        except Exception as e:
            if cls._is_unique_violation(e):
                raise DuplicateRowError(table)
            raise SupabaseClientError(
                message=f"Failed to insert into {table}: {e}",
                code=error_code,
                details={"table": table}
            )

        if not response.data:
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA",
                details={"table": table}
            )
        return response.data

    @classmethod
    def _update(
        cls,
        table: str,
        row_id: str | UUID,
        data: dict[str, Any],
        expect: dict[str, Any] | None = None,
        expect_null: list[str] | None = None,
        error_code: str = "UPDATE_FAILED",
    ) -> dict[str, Any] | None:
        """
        Update a row by ID, optionally only if it still has expected values.

        Args:
            table: Table name
            row_id: Primary key of the row
            data: Columns to set
            expect: Column values the row must currently have
            expect_null: Columns that must currently be NULL

        Returns:
            The updated row, or None if no row matched the conditions
        """
        client = cls.get_client()
        row_id_str = cls._normalize_uuid(row_id)

        try:
            query = client.table(table).update(data).eq("id", row_id_str)
            for column, value in (expect or {}).items():
                query = query.eq(column, value)
            for column in expect_null or []:
                query = query.is_(column, "null")

            response = query.execute()

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update {table}: {e}",
                code=error_code,
                details={"table": table, "id": row_id_str}
            )

        if response.data:
            return response.data[0]
        return None

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_profile(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a user's profile row.

        Returns:
            Profile dict, or None if the user has no profile yet
        """
        return cls._fetch_one(
            "profiles",
            {"id": cls._normalize_uuid(user_id)},
            error_code="FETCH_PROFILE_FAILED",
        )

    @classmethod
    def update_profile(
        cls,
        user_id: str | UUID,
        data: dict[str, Any],
        expect: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """
        Update columns of a profile.

        Returns the new row, or None if the profile is missing or no longer
        has the expected values.
        """
        return cls._update("profiles", user_id, data, expect=expect, error_code="UPDATE_PROFILE_FAILED")

    @classmethod
    def fetch_display_names(cls, user_ids: list[str | UUID | None]) -> dict[str, str | None]:
        """
        Fetch display names for a set of users.

        Returns:
            Mapping of user_id -> display_name (missing users are omitted)
        """
        ids = [cls._normalize_uuid(u) for u in user_ids if u]
        if not ids:
            return {}

        client = cls.get_client()
        try:
            response = (
                client.table("profiles")
                .select("id, display_name")
                .in_("id", ids)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch display names: {e}",
                code="FETCH_NAMES_FAILED",
                details={"user_ids": ids}
            )

        return {str(row["id"]): row.get("display_name") for row in response.data or []}

    # -------------------------------------------------------------------------
    # Questions
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_question(cls, question_id: str | UUID) -> dict[str, Any] | None:
        """Fetch a stored question (including its answer)."""
        return cls._fetch_one(
            "questions",
            {"id": cls._normalize_uuid(question_id)},
            error_code="FETCH_QUESTION_FAILED",
        )

    @classmethod
    def insert_question(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Store a generated question. Returns the row with its new id."""
        return cls._insert("questions", data, error_code="INSERT_QUESTION_FAILED")[0]

    # -------------------------------------------------------------------------
    # Solo Answer & Points Logs
    # -------------------------------------------------------------------------

    @classmethod
    def insert_user_answer(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Log a solo answer.

        Raises:
            DuplicateRowError: If this user already answered this question
        """
        return cls._insert("user_answers", data, error_code="INSERT_ANSWER_FAILED")[0]

    @classmethod
    def fetch_wrong_answers(cls, user_id: str | UUID, limit: int = 50) -> list[dict[str, Any]]:
        """
        Fetch the user's most recent wrong answers with their questions.

        Returns newest first.
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("user_answers")
                .select(
                    "id, selected_answer, created_at, "
                    "questions (id, question, options, correct_answer, explanation, category, difficulty)"
                )
                .eq("user_id", user_id_str)
                .eq("correct", False)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch wrong answers: {e}",
                code="FETCH_WRONG_ANSWERS_FAILED",
                details={"user_id": user_id_str}
            )

    @classmethod
    def insert_points_history(cls, user_id: str | UUID, points: int, points_change: int) -> dict[str, Any]:
        """Append a points_history entry (new total + change)."""
        return cls._insert(
            "points_history",
            {
                "user_id": cls._normalize_uuid(user_id),
                "points": points,
                "points_change": points_change,
            },
            error_code="INSERT_POINTS_HISTORY_FAILED",
        )[0]

    @classmethod
    def fetch_points_history(
        cls,
        user_id: str | UUID,
        since_iso: str,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        """
        Fetch points history entries created at or after since_iso.

        Returns oldest first (chart order).
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("points_history")
                .select("id, points, points_change, created_at")
                .eq("user_id", user_id_str)
                .gte("created_at", since_iso)
                .order("created_at", desc=False)
                .limit(limit)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch points history: {e}",
                code="FETCH_POINTS_HISTORY_FAILED",
                details={"user_id": user_id_str}
            )

    # -------------------------------------------------------------------------
    # Rabbinic Reviews
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_review(cls, question_id: str | UUID, user_id: str | UUID) -> dict[str, Any] | None:
        """Fetch a user's review submission for a question, if any."""
        return cls._fetch_one(
            "rabbinic_reviews",
            {
                "question_id": cls._normalize_uuid(question_id),
                "submitted_by": cls._normalize_uuid(user_id),
            },
            columns="id",
            error_code="FETCH_REVIEW_FAILED",
        )

    @classmethod
    def insert_review(cls, question_id: str | UUID, user_id: str | UUID) -> dict[str, Any]:
        """
        Create a pending review.

        Raises:
            DuplicateRowError: If the user already submitted this question
        """
        return cls._insert(
            "rabbinic_reviews",
            {
                "question_id": cls._normalize_uuid(question_id),
                "submitted_by": cls._normalize_uuid(user_id),
                "review_status": "pending",
            },
            error_code="INSERT_REVIEW_FAILED",
        )[0]

    # -------------------------------------------------------------------------
    # Head-to-Head Games
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_game(cls, game_id: str | UUID) -> dict[str, Any] | None:
        """Fetch a game by ID."""
        return cls._fetch_one(
            "head_to_head_games",
            {"id": cls._normalize_uuid(game_id)},
            error_code="FETCH_GAME_FAILED",
        )

    @classmethod
    def fetch_game_by_code(cls, game_code: str) -> dict[str, Any] | None:
        """Fetch a game by its share code (codes are stored upper-case)."""
        return cls._fetch_one(
            "head_to_head_games",
            {"game_code": game_code.strip().upper()},
            error_code="FETCH_GAME_FAILED",
        )

    @classmethod
    def insert_game(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Create a game.

        Raises:
            DuplicateRowError: If the game code is already taken
        """
        return cls._insert("head_to_head_games", data, error_code="INSERT_GAME_FAILED")[0]

    @classmethod
    def update_game(
        cls,
        game_id: str | UUID,
        data: dict[str, Any],
        expect: dict[str, Any] | None = None,
        expect_null: list[str] | None = None,
    ) -> dict[str, Any] | None:
        """
        Conditionally update a game.

        Example:
            # Only the first joiner wins
            game = SupabaseClient.update_game(
                game_id,
                {"player2_id": user_id},
                expect={"status": "waiting"},
                expect_null=["player2_id"],
            )
            if game is None:
                ...  # someone else joined first
        """
        return cls._update(
            "head_to_head_games",
            game_id,
            data,
            expect=expect,
            expect_null=expect_null,
            error_code="UPDATE_GAME_FAILED",
        )

    @classmethod
    def insert_game_questions(cls, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Link generated questions to a game (one row per question_index)."""
        return cls._insert("head_to_head_game_questions", rows, error_code="LINK_QUESTIONS_FAILED")

    @classmethod
    def fetch_game_question(cls, game_id: str | UUID, question_index: int) -> dict[str, Any] | None:
        """
        Fetch the game question at an index, with the question row joined.

        Returns:
            Dict with question_id, points, category and a nested "questions" row
        """
        return cls._fetch_one(
            "head_to_head_game_questions",
            {"game_id": cls._normalize_uuid(game_id), "question_index": question_index},
            columns="*, questions (*)",
            error_code="FETCH_GAME_QUESTION_FAILED",
        )

    @classmethod
    def insert_game_answer(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Record a player's answer to a game question.

        Raises:
            DuplicateRowError: If the player already answered this question
        """
        return cls._insert("head_to_head_game_answers", data, error_code="INSERT_GAME_ANSWER_FAILED")[0]

    @classmethod
    def fetch_game_answers(
        cls,
        game_id: str | UUID,
        question_id: str | UUID | None = None,
        user_id: str | UUID | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch answers of a game, optionally for one question and/or player."""
        client = cls.get_client()
        game_id_str = cls._normalize_uuid(game_id)

        try:
            query = (
                client.table("head_to_head_game_answers")
                .select("*")
                .eq("game_id", game_id_str)
            )
            if question_id:
                query = query.eq("question_id", cls._normalize_uuid(question_id))
            if user_id:
                query = query.eq("user_id", cls._normalize_uuid(user_id))

            response = query.execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch game answers: {e}",
                code="FETCH_GAME_ANSWERS_FAILED",
                details={"game_id": game_id_str}
            )
