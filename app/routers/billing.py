# =============================================================================
# app/routers/billing.py - Subscription Endpoints
# =============================================================================
# POST /billing/checkout - start a Stripe Checkout for the Pro plan
# POST /billing/sync     - re-check Stripe when a webhook was missed
# POST /billing/webhook  - Stripe events (signature-verified, no auth)
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request
from fastapi.concurrency import run_in_threadpool

from app.auth import get_current_user, AuthUser
from core.models.billing import CheckoutResponse, SyncResponse, WebhookAck
from core.services.billing_service import BillingService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/checkout", response_model=CheckoutResponse)
def create_checkout(
    user: AuthUser = Depends(get_current_user),
):
    """Create a Checkout session and return its URL."""
    return BillingService.create_checkout_session(user.id, email=user.email)


@router.post("/sync", response_model=SyncResponse)
def sync_subscription(
    user: AuthUser = Depends(get_current_user),
):
    """
    Sync the profile with Stripe.

    Called by the billing page after checkout in case the webhook
    hasn't been delivered yet.
    """
    return BillingService.sync_subscription(user.id, email=user.email)


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: Annotated[str | None, Header(alias="stripe-signature")] = None,
):
    """
    Receive Stripe webhook events.

    The raw body is needed for signature verification, so the payload is
    read directly from the request instead of a Pydantic model.
    """
    payload = await request.body()
    return await run_in_threadpool(BillingService.handle_webhook, payload, stripe_signature)
