# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Mocked OpenAI responses (row factories live in tests/factories.py)
# - Patches SupabaseClient in every service module with one MagicMock
# =============================================================================

import os
from unittest.mock import MagicMock, patch

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length-for-hs256")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_123")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_123")
os.environ.setdefault("STRIPE_PRICE_ID_PRO", "price_pro_123")
os.environ.setdefault("APP_URL", "https://trivia.example.com")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from tests.factories import make_draft_json

SERVICE_MODULES = [
    "core.services.profile_service",
    "core.services.question_service",
    "core.services.game_service",
    "core.services.billing_service",
]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def mock_db():
    """One MagicMock standing in for SupabaseClient in every service."""
    db = MagicMock()
    patchers = [patch(f"{module}.SupabaseClient", db) for module in SERVICE_MODULES]
    for patcher in patchers:
        patcher.start()
    yield db
    for patcher in patchers:
        patcher.stop()


@pytest.fixture
def mock_openai_response():
    """Create a mock OpenAI chat completion response."""
    def _create_mock(content: str | None):
        mock_response = MagicMock()
        mock_response.choices = [MagicMock()]
        mock_response.choices[0].message.content = content
        return mock_response
    return _create_mock


@pytest.fixture
def mock_openai_client(mock_openai_response):
    """OpenAI client whose completions return a valid question."""
    client = MagicMock()
    client.chat.completions.create.return_value = mock_openai_response(make_draft_json())
    return client
