# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - profile.py: Profile page and display name
# - questions.py: Solo questions, answers and review submissions
# - head_to_head.py: Two-player games
# - billing.py: Stripe checkout, sync and webhook
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import profile
from . import questions
from . import head_to_head
from . import billing

__all__ = [
    "health",
    "profile",
    "questions",
    "head_to_head",
    "billing",
]
