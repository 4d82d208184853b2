# =============================================================================
# tests/test_config.py - Settings Tests
# =============================================================================
# Settings are built without a .env file so only the environment counts.
# =============================================================================

from app.config import Settings


class TestSettings:
    """Test which keys are required."""

    def test_starts_with_server_keys_only(self, monkeypatch):
        monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
        monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)

        config = Settings(_env_file=None)

        assert config.SUPABASE_URL == "https://test-project.supabase.co"
        assert not hasattr(config, "SUPABASE_ANON_KEY")
        assert not config.stripe_configured

    def test_quota_and_game_defaults(self, monkeypatch):
        monkeypatch.delenv("FREE_DAILY_QUESTION_LIMIT", raising=False)
        monkeypatch.delenv("HEAD_TO_HEAD_QUESTIONS", raising=False)

        config = Settings(_env_file=None)

        assert config.FREE_DAILY_QUESTION_LIMIT == 20
        assert config.HEAD_TO_HEAD_QUESTIONS == 10
