# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for data validation
# - services/: Profiles, solo play, head-to-head and billing
#
# Code in this package should NOT import from FastAPI routers.
# This keeps the logic testable and reusable.
# =============================================================================
