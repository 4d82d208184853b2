# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Torah Trivia API:
# - test_scoring.py: Tiers, points, quota rules and game schedules
# - test_config.py: Required settings and defaults
# - test_models.py: Pydantic model validation
# - test_question_writer.py: Prompts and the OpenAI question writer
# - test_*_service.py: Service layer with a mocked SupabaseClient
# - test_supabase_client.py: Query wrapper against a mocked client
# - test_auth.py: JWT verification
# - test_routers.py: HTTP layer via TestClient
#
# Run tests with: pytest
# =============================================================================
