# =============================================================================
# core/models/billing.py - Billing Schemas
# =============================================================================
# Response models for the Stripe-backed subscription endpoints.
# =============================================================================

from pydantic import BaseModel, Field

from .profile import Plan, SubscriptionStatus


class CheckoutResponse(BaseModel):
    """Hosted Stripe Checkout URL to redirect the browser to."""

    url: str = Field(..., description="Stripe Checkout session URL")


class SyncResponse(BaseModel):
    """
    Result of a manual subscription sync.

    Example:
        {
            "success": true,
            "message": "Profile synced with Stripe subscription",
            "plan": "pro",
            "status": "active"
        }
    """

    success: bool
    message: str
    plan: Plan
    status: SubscriptionStatus | None = None


class WebhookAck(BaseModel):
    """Acknowledgement returned to Stripe."""

    received: bool = True
    event_type: str | None = None
