# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - scoring.py: Tiers, points, streaks, quota and game schedule rules
# - supabase_client.py: Typed Supabase wrapper for database operations
# - utils.py: Shared utilities (error handling, ID normalization, UTC time)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import DuplicateRowError, SupabaseClient, SupabaseClientError
from lib.utils import ApplicationError, normalize_uuid, same_id

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    "DuplicateRowError",
    # Utils
    "ApplicationError",
    "normalize_uuid",
    "same_id",
]
