# =============================================================================
# tests/test_supabase_client.py - Supabase Wrapper Tests
# =============================================================================
# Tests not-found handling, unique violations and conditional updates
# against a mocked supabase-py query builder.
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest

from lib.supabase_client import DuplicateRowError, SupabaseClient, SupabaseClientError
from tests.factories import GAME_ID, USER_ID


@pytest.fixture
def client():
    """Supabase client whose query builder methods chain to one mock."""
    mock_client = MagicMock()
    query = MagicMock()
    mock_client.table.return_value = query
    for method in ("select", "insert", "update", "eq", "is_", "in_", "single", "order", "limit", "gte"):
        getattr(query, method).return_value = query

    with patch.object(SupabaseClient, "get_client", return_value=mock_client):
        yield mock_client


def _query(client):
    return client.table.return_value


class TestFetch:
    """Test single-row fetches."""

    def test_returns_row(self, client):
        _query(client).execute.return_value = MagicMock(data={"id": USER_ID, "points": 10})

        assert SupabaseClient.fetch_profile(USER_ID)["points"] == 10
        client.table.assert_called_with("profiles")

    def test_no_rows_returns_none(self, client):
        _query(client).execute.side_effect = Exception("{'code': 'PGRST116', 'message': 'no rows'}")

        assert SupabaseClient.fetch_profile(USER_ID) is None

    def test_other_errors_raise(self, client):
        _query(client).execute.side_effect = Exception("connection refused")

        with pytest.raises(SupabaseClientError) as exc_info:
            SupabaseClient.fetch_game(GAME_ID)

        assert exc_info.value.code == "FETCH_GAME_FAILED"

    def test_game_code_upper_cased(self, client):
        _query(client).execute.return_value = MagicMock(data=None)

        SupabaseClient.fetch_game_by_code(" abc234 ")

        _query(client).eq.assert_called_with("game_code", "ABC234")


class TestInsert:
    """Test inserts."""

    def test_unique_violation(self, client):
        error = Exception("duplicate key value violates unique constraint")
        error.code = "23505"
        _query(client).execute.side_effect = error

        with pytest.raises(DuplicateRowError) as exc_info:
            SupabaseClient.insert_user_answer({"user_id": USER_ID})

        assert exc_info.value.code == "DUPLICATE_ROW"

    def test_empty_insert_result(self, client):
        _query(client).execute.return_value = MagicMock(data=[])

        with pytest.raises(SupabaseClientError) as exc_info:
            SupabaseClient.insert_question({"question": "?"})

        assert exc_info.value.code == "INSERT_NO_DATA"


class TestConditionalUpdate:
    """Test compare-and-set updates."""

    def test_filters_on_expected_values(self, client):
        query = _query(client)
        query.execute.return_value = MagicMock(data=[{"id": GAME_ID, "player2_id": USER_ID}])

        row = SupabaseClient.update_game(
            GAME_ID,
            {"player2_id": USER_ID},
            expect={"status": "waiting"},
            expect_null=["player2_id"],
        )

        assert row["player2_id"] == USER_ID
        query.update.assert_called_once_with({"player2_id": USER_ID})
        eq_calls = [call.args for call in query.eq.call_args_list]
        assert ("id", GAME_ID) in eq_calls
        assert ("status", "waiting") in eq_calls
        query.is_.assert_called_once_with("player2_id", "null")

    def test_no_match_returns_none(self, client):
        _query(client).execute.return_value = MagicMock(data=[])

        assert SupabaseClient.update_game(GAME_ID, {"current_question_index": 1}, expect={"current_question_index": 0}) is None

    def test_display_names_skip_missing_ids(self, client):
        _query(client).execute.return_value = MagicMock(data=[{"id": USER_ID, "display_name": "Rivka"}])

        names = SupabaseClient.fetch_display_names([USER_ID, None])

        assert names == {USER_ID: "Rivka"}
        _query(client).in_.assert_called_once_with("id", [USER_ID])
