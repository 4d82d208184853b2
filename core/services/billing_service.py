# =============================================================================
# core/services/billing_service.py - Stripe Subscription Logic
# =============================================================================
# Moves profiles between the free and Pro plans.
#
# Three ways a profile gets upgraded:
#   1. Webhooks (normal path): checkout.session.completed and
#      customer.subscription.* events
#   2. Manual sync: the billing page calls /billing/sync after checkout in
#      case the webhook hasn't arrived (or never will, e.g. local dev)
#   3. Downgrades only ever come from subscription.updated/deleted events
#
# The user is tied to Stripe objects through client_reference_id on the
# checkout session and a "userId" metadata key on customers/subscriptions.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

import stripe

from app.config import settings
from app.exceptions import (
    BillingNotConfiguredError,
    PaymentProviderError,
    WebhookSignatureError,
)
from core.models.billing import CheckoutResponse, SyncResponse, WebhookAck
from core.models.profile import Plan, SubscriptionStatus
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, same_id

logger = logging.getLogger(__name__)

USER_ID_METADATA_KEY = "userId"
CHECKOUT_SESSION_SCAN_LIMIT = 100


def _get(obj: Any, key: str, default: Any = None) -> Any:
    """Read a field from a StripeObject or plain dict."""
    if obj is None:
        return default
    try:
        value = obj[key]
    except (KeyError, TypeError):
        return default
    return default if value is None else value


def _metadata_user(obj: Any) -> str | None:
    return _get(_get(obj, "metadata", {}), USER_ID_METADATA_KEY)


class BillingService:
    """
    Service for Stripe billing.

    Every Stripe call passes api_key explicitly so settings can change
    between tests without touching module globals.
    """

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _api_key() -> str:
        if not settings.STRIPE_SECRET_KEY:
            raise BillingNotConfiguredError("STRIPE_SECRET_KEY")
        return settings.STRIPE_SECRET_KEY

    @staticmethod
    def _set_plan(user_id: str, plan: Plan, status: SubscriptionStatus) -> bool:
        """Write plan/status to the profile. Returns False if no profile matched."""
        updated = SupabaseClient.update_profile(user_id, {
            "plan": plan.value,
            "subscription_status": status.value,
        })
        if not updated:
            logger.warning(f"No profile found for user {user_id} while setting plan={plan.value}")
            return False

        logger.info(f"User {user_id} is now plan={plan.value}, status={status.value}")
        return True

    @staticmethod
    def _stamp_user_metadata(user_id: str, customer_id: str | None, subscription_id: str | None) -> None:
        """
        Record the user on the customer and subscription.

        Failures are logged, not raised: the plan change already succeeded.
        """
        api_key = BillingService._api_key()
        metadata = {USER_ID_METADATA_KEY: user_id}

        if customer_id:
            try:
                stripe.Customer.modify(customer_id, metadata=metadata, api_key=api_key)
            except stripe.StripeError as e:
                logger.warning(f"Failed to stamp metadata on customer {customer_id}: {e}")

        if subscription_id:
            try:
                stripe.Subscription.modify(subscription_id, metadata=metadata, api_key=api_key)
            except stripe.StripeError as e:
                logger.warning(f"Failed to stamp metadata on subscription {subscription_id}: {e}")

    @staticmethod
    def _resolve_user_id(subscription: Any) -> str | None:
        """Find the user behind a subscription via its own or its customer's metadata."""
        user_id = _metadata_user(subscription)
        if user_id:
            return user_id

        customer = _get(subscription, "customer")
        if not customer:
            return None

        # Expanded customer objects carry metadata already
        if not isinstance(customer, str):
            return _metadata_user(customer)

        try:
            customer_obj = stripe.Customer.retrieve(customer, api_key=BillingService._api_key())
        except stripe.StripeError as e:
            logger.warning(f"Failed to retrieve customer {customer}: {e}")
            return None
        return _metadata_user(customer_obj)

    # -------------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------------

    @staticmethod
    def create_checkout_session(user_id: UUID | str, email: str | None = None) -> CheckoutResponse:
        """
        Create a hosted Checkout session for the Pro subscription.

        Raises:
            BillingNotConfiguredError: If Stripe keys/price are missing
            PaymentProviderError: If Stripe rejects the request
        """
        api_key = BillingService._api_key()
        if not settings.STRIPE_PRICE_ID_PRO:
            raise BillingNotConfiguredError("STRIPE_PRICE_ID_PRO")

        user_id_str = normalize_uuid(user_id)
        billing_url = f"{settings.APP_URL.rstrip('/')}/billing"

        params: dict[str, Any] = {
            "mode": "subscription",
            "line_items": [{"price": settings.STRIPE_PRICE_ID_PRO, "quantity": 1}],
            "client_reference_id": user_id_str,
            "metadata": {USER_ID_METADATA_KEY: user_id_str},
            "subscription_data": {"metadata": {USER_ID_METADATA_KEY: user_id_str}},
            "success_url": f"{billing_url}?success=true",
            "cancel_url": f"{billing_url}?canceled=true",
        }
        if email:
            params["customer_email"] = email

        try:
            session = stripe.checkout.Session.create(api_key=api_key, **params)
        except stripe.StripeError as e:
            logger.error(f"Failed to create checkout session for user {user_id_str}: {e}")
            raise PaymentProviderError(str(e))

        logger.info(f"Created checkout session {_get(session, 'id')} for user {user_id_str}")
        return CheckoutResponse(url=_get(session, "url", ""))

    # -------------------------------------------------------------------------
    # Manual Sync
    # -------------------------------------------------------------------------

    @staticmethod
    def sync_subscription(user_id: UUID | str, email: str | None = None) -> SyncResponse:
        """
        Look the user up in Stripe and upgrade them if they have paid.

        Search order:
            1. Customers with the user's email -> active subscriptions
               whose customer or subscription metadata names the user
            2. Paid subscription checkout sessions for the user

        Raises:
            BillingNotConfiguredError: If Stripe isn't configured
            PaymentProviderError: If a Stripe call fails
        """
        api_key = BillingService._api_key()
        user_id_str = normalize_uuid(user_id)

        try:
            customers = []
            if email:
                customers = list(_get(stripe.Customer.list(email=email, limit=10, api_key=api_key), "data", []))

            for customer in customers:
                subscriptions = stripe.Subscription.list(
                    customer=_get(customer, "id"),
                    status="active",
                    limit=10,
                    api_key=api_key,
                )
                for subscription in _get(subscriptions, "data", []):
                    if same_id(_metadata_user(customer), user_id_str) or same_id(_metadata_user(subscription), user_id_str):
                        logger.info(f"Sync found active subscription {_get(subscription, 'id')} for user {user_id_str}")
                        BillingService._set_plan(user_id_str, Plan.PRO, SubscriptionStatus.ACTIVE)
                        return SyncResponse(
                            success=True,
                            message="Profile synced with Stripe subscription",
                            plan=Plan.PRO,
                            status=SubscriptionStatus.ACTIVE,
                        )

            session_lists = [
                stripe.checkout.Session.list(customer=_get(customer, "id"), limit=CHECKOUT_SESSION_SCAN_LIMIT, api_key=api_key)
                for customer in customers
            ] or [stripe.checkout.Session.list(limit=CHECKOUT_SESSION_SCAN_LIMIT, api_key=api_key)]

        except stripe.StripeError as e:
            logger.error(f"Stripe sync failed for user {user_id_str}: {e}")
            raise PaymentProviderError(str(e))

        for sessions in session_lists:
            for session in _get(sessions, "data", []):
                owner = _get(session, "client_reference_id") or _metadata_user(session)
                if (
                    same_id(owner, user_id_str)
                    and _get(session, "mode") == "subscription"
                    and _get(session, "payment_status") == "paid"
                ):
                    logger.info(f"Sync found paid checkout session {_get(session, 'id')} for user {user_id_str}")
                    BillingService._set_plan(user_id_str, Plan.PRO, SubscriptionStatus.ACTIVE)
                    BillingService._stamp_user_metadata(
                        user_id_str,
                        _get(session, "customer"),
                        _get(session, "subscription"),
                    )
                    return SyncResponse(
                        success=True,
                        message="Profile synced with completed checkout",
                        plan=Plan.PRO,
                        status=SubscriptionStatus.ACTIVE,
                    )

        logger.info(f"Sync found no paid subscription for user {user_id_str}")
        return SyncResponse(
            success=True,
            message="No active subscription found",
            plan=Plan.FREE,
        )

    # -------------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------------

    @staticmethod
    def handle_webhook(payload: bytes, signature: str | None) -> WebhookAck:
        """
        Verify and apply a Stripe webhook event.

        Raises:
            BillingNotConfiguredError: If the webhook secret is missing
            WebhookSignatureError: If the payload or signature is invalid
        """
        if not settings.STRIPE_WEBHOOK_SECRET:
            raise BillingNotConfiguredError("STRIPE_WEBHOOK_SECRET")
        if not signature:
            raise WebhookSignatureError("Missing stripe-signature header")

        try:
            event = stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
        except ValueError as e:
            raise WebhookSignatureError(f"Invalid payload: {e}")
        except stripe.SignatureVerificationError as e:
            raise WebhookSignatureError(str(e))

        event_type = _get(event, "type")
        obj = _get(_get(event, "data"), "object")
        logger.info(f"Received Stripe webhook: {event_type}")

        if event_type == "checkout.session.completed":
            BillingService._on_checkout_completed(obj)
        elif event_type == "customer.subscription.created":
            BillingService._on_subscription_created(obj)
        elif event_type in ("customer.subscription.updated", "customer.subscription.deleted"):
            BillingService._on_subscription_changed(obj)
        else:
            logger.debug(f"Ignoring Stripe event type {event_type}")

        return WebhookAck(event_type=event_type)

    @staticmethod
    def _on_checkout_completed(session: Any) -> None:
        if _get(session, "mode") != "subscription":
            return

        user_id = _get(session, "client_reference_id") or _metadata_user(session)
        if not user_id:
            logger.warning(f"Checkout session {_get(session, 'id')} has no user reference")
            return

        BillingService._set_plan(user_id, Plan.PRO, SubscriptionStatus.ACTIVE)
        BillingService._stamp_user_metadata(user_id, _get(session, "customer"), _get(session, "subscription"))

    @staticmethod
    def _on_subscription_created(subscription: Any) -> None:
        user_id = BillingService._resolve_user_id(subscription)
        if not user_id:
            logger.warning(f"Subscription {_get(subscription, 'id')} has no user in metadata")
            return

        if _get(subscription, "status") != "active":
            return

        customer = _get(subscription, "customer")
        customer_id = customer if isinstance(customer, str) else _get(customer, "id")
        BillingService._stamp_user_metadata(user_id, customer_id, _get(subscription, "id"))
        BillingService._set_plan(user_id, Plan.PRO, SubscriptionStatus.ACTIVE)

    @staticmethod
    def _on_subscription_changed(subscription: Any) -> None:
        user_id = BillingService._resolve_user_id(subscription)
        if not user_id:
            logger.warning(f"Subscription {_get(subscription, 'id')} has no user in metadata")
            return

        if _get(subscription, "status") == "active":
            BillingService._set_plan(user_id, Plan.PRO, SubscriptionStatus.ACTIVE)
        else:
            BillingService._set_plan(user_id, Plan.FREE, SubscriptionStatus.CANCELED)
