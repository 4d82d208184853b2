# =============================================================================
# tests/test_billing_service.py - Stripe Billing Tests
# =============================================================================
# Tests checkout creation, the manual sync fallback and webhook handling.
# Individual Stripe SDK calls are patched; exceptions are the real ones.
# =============================================================================

from unittest.mock import patch

import pytest
import stripe

from app.config import settings
from app.exceptions import (
    BillingNotConfiguredError,
    PaymentProviderError,
    WebhookSignatureError,
)
from core.models.profile import Plan, SubscriptionStatus
from core.services.billing_service import BillingService
from tests.factories import USER_ID

EMAIL = "rivka@example.com"


def _event(event_type, obj):
    return {"type": event_type, "data": {"object": obj}}


def _assert_plan(mock_db, plan, status):
    mock_db.update_profile.assert_called_with(USER_ID, {"plan": plan, "subscription_status": status})


# =============================================================================
# Checkout
# =============================================================================

class TestCheckout:
    """Test Checkout session creation."""

    def test_creates_subscription_checkout(self, mock_db):
        with patch("stripe.checkout.Session.create") as create:
            create.return_value = {"id": "cs_1", "url": "https://checkout.stripe.com/pay/cs_1"}

            response = BillingService.create_checkout_session(USER_ID, email=EMAIL)

        assert response.url == "https://checkout.stripe.com/pay/cs_1"
        kwargs = create.call_args.kwargs
        assert kwargs["mode"] == "subscription"
        assert kwargs["client_reference_id"] == USER_ID
        assert kwargs["metadata"] == {"userId": USER_ID}
        assert kwargs["line_items"] == [{"price": "price_pro_123", "quantity": 1}]
        assert kwargs["success_url"] == "https://trivia.example.com/billing?success=true"
        assert kwargs["cancel_url"] == "https://trivia.example.com/billing?canceled=true"
        assert kwargs["customer_email"] == EMAIL
        assert kwargs["api_key"] == "sk_test_123"

    def test_missing_secret_key(self, mock_db, monkeypatch):
        monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "")

        with pytest.raises(BillingNotConfiguredError) as exc_info:
            BillingService.create_checkout_session(USER_ID)

        assert exc_info.value.status_code == 503

    def test_missing_price(self, mock_db, monkeypatch):
        monkeypatch.setattr(settings, "STRIPE_PRICE_ID_PRO", "")

        with pytest.raises(BillingNotConfiguredError) as exc_info:
            BillingService.create_checkout_session(USER_ID)

        assert exc_info.value.details["missing"] == "STRIPE_PRICE_ID_PRO"

    def test_stripe_error_becomes_502(self, mock_db):
        with patch("stripe.checkout.Session.create", side_effect=stripe.StripeError("card declined")):
            with pytest.raises(PaymentProviderError) as exc_info:
                BillingService.create_checkout_session(USER_ID)

        assert exc_info.value.status_code == 502


# =============================================================================
# Manual Sync
# =============================================================================

class TestSync:
    """Test the sync fallback."""

    def test_active_subscription_on_customer(self, mock_db):
        customer = {"id": "cus_1", "metadata": {"userId": USER_ID}}
        subscription = {"id": "sub_1", "status": "active", "metadata": {}}

        with patch("stripe.Customer.list", return_value={"data": [customer]}), \
                patch("stripe.Subscription.list", return_value={"data": [subscription]}) as sub_list:
            response = BillingService.sync_subscription(USER_ID, email=EMAIL)

        assert response.plan == Plan.PRO
        assert response.status == SubscriptionStatus.ACTIVE
        assert sub_list.call_args.kwargs["status"] == "active"
        _assert_plan(mock_db, "pro", "active")

    def test_subscription_metadata_names_user(self, mock_db):
        customer = {"id": "cus_1", "metadata": {}}
        subscription = {"id": "sub_1", "status": "active", "metadata": {"userId": USER_ID}}

        with patch("stripe.Customer.list", return_value={"data": [customer]}), \
                patch("stripe.Subscription.list", return_value={"data": [subscription]}):
            response = BillingService.sync_subscription(USER_ID, email=EMAIL)

        assert response.plan == Plan.PRO

    def test_other_users_subscription_ignored(self, mock_db):
        customer = {"id": "cus_1", "metadata": {"userId": "someone-else"}}
        subscription = {"id": "sub_1", "status": "active", "metadata": {}}

        with patch("stripe.Customer.list", return_value={"data": [customer]}), \
                patch("stripe.Subscription.list", return_value={"data": [subscription]}), \
                patch("stripe.checkout.Session.list", return_value={"data": []}):
            response = BillingService.sync_subscription(USER_ID, email=EMAIL)

        assert response.plan == Plan.FREE
        mock_db.update_profile.assert_not_called()

    def test_paid_checkout_session(self, mock_db):
        session = {
            "id": "cs_1",
            "client_reference_id": USER_ID,
            "mode": "subscription",
            "payment_status": "paid",
            "customer": "cus_9",
            "subscription": "sub_9",
        }

        with patch("stripe.Customer.list", return_value={"data": []}), \
                patch("stripe.checkout.Session.list", return_value={"data": [session]}), \
                patch("stripe.Customer.modify") as customer_modify, \
                patch("stripe.Subscription.modify") as subscription_modify:
            response = BillingService.sync_subscription(USER_ID, email=EMAIL)

        assert response.plan == Plan.PRO
        customer_modify.assert_called_once()
        assert subscription_modify.call_args.kwargs["metadata"] == {"userId": USER_ID}

    def test_unpaid_session_ignored(self, mock_db):
        session = {"id": "cs_1", "client_reference_id": USER_ID, "mode": "subscription", "payment_status": "unpaid"}

        with patch("stripe.checkout.Session.list", return_value={"data": [session]}):
            response = BillingService.sync_subscription(USER_ID)

        assert response.plan == Plan.FREE
        assert response.status is None

    def test_without_email_skips_customer_search(self, mock_db):
        with patch("stripe.Customer.list") as customer_list, \
                patch("stripe.checkout.Session.list", return_value={"data": []}):
            BillingService.sync_subscription(USER_ID)

        customer_list.assert_not_called()

    def test_stripe_error_becomes_502(self, mock_db):
        with patch("stripe.Customer.list", side_effect=stripe.StripeError("down")):
            with pytest.raises(PaymentProviderError):
                BillingService.sync_subscription(USER_ID, email=EMAIL)


# =============================================================================
# Webhooks
# =============================================================================

class TestWebhook:
    """Test webhook verification and event handling."""

    def _handle(self, event):
        with patch("stripe.Webhook.construct_event", return_value=event) as construct:
            ack = BillingService.handle_webhook(b"{}", "t=1,v1=abc")
        construct.assert_called_once_with(b"{}", "t=1,v1=abc", "whsec_test_123")
        return ack

    def test_invalid_signature(self, mock_db):
        error = stripe.SignatureVerificationError("No signatures found", "t=1,v1=bad")

        with patch("stripe.Webhook.construct_event", side_effect=error):
            with pytest.raises(WebhookSignatureError) as exc_info:
                BillingService.handle_webhook(b"{}", "t=1,v1=bad")

        assert exc_info.value.status_code == 400
        mock_db.update_profile.assert_not_called()

    def test_invalid_payload(self, mock_db):
        with patch("stripe.Webhook.construct_event", side_effect=ValueError("bad json")):
            with pytest.raises(WebhookSignatureError):
                BillingService.handle_webhook(b"not json", "t=1,v1=abc")

    def test_missing_signature_header(self, mock_db):
        with pytest.raises(WebhookSignatureError):
            BillingService.handle_webhook(b"{}", None)

    def test_missing_webhook_secret(self, mock_db, monkeypatch):
        monkeypatch.setattr(settings, "STRIPE_WEBHOOK_SECRET", "")

        with pytest.raises(BillingNotConfiguredError):
            BillingService.handle_webhook(b"{}", "t=1,v1=abc")

    def test_checkout_completed_upgrades(self, mock_db):
        session = {
            "id": "cs_1",
            "mode": "subscription",
            "client_reference_id": USER_ID,
            "customer": "cus_1",
            "subscription": "sub_1",
        }

        with patch("stripe.Customer.modify") as customer_modify, \
                patch("stripe.Subscription.modify") as subscription_modify:
            ack = self._handle(_event("checkout.session.completed", session))

        assert ack.received
        assert ack.event_type == "checkout.session.completed"
        _assert_plan(mock_db, "pro", "active")
        assert customer_modify.call_args.args[0] == "cus_1"
        assert subscription_modify.call_args.args[0] == "sub_1"

    def test_metadata_stamp_failure_is_logged(self, mock_db):
        session = {"id": "cs_1", "mode": "subscription", "metadata": {"userId": USER_ID}, "customer": "cus_1"}

        with patch("stripe.Customer.modify", side_effect=stripe.StripeError("nope")):
            self._handle(_event("checkout.session.completed", session))

        _assert_plan(mock_db, "pro", "active")

    def test_one_time_checkout_ignored(self, mock_db):
        self._handle(_event("checkout.session.completed", {"id": "cs_1", "mode": "payment", "client_reference_id": USER_ID}))

        mock_db.update_profile.assert_not_called()

    def test_subscription_created_from_customer_metadata(self, mock_db):
        subscription = {"id": "sub_1", "status": "active", "metadata": {}, "customer": "cus_1"}

        with patch("stripe.Customer.retrieve", return_value={"id": "cus_1", "metadata": {"userId": USER_ID}}), \
                patch("stripe.Customer.modify"), \
                patch("stripe.Subscription.modify") as subscription_modify:
            self._handle(_event("customer.subscription.created", subscription))

        _assert_plan(mock_db, "pro", "active")
        assert subscription_modify.call_args.kwargs["metadata"] == {"userId": USER_ID}

    def test_incomplete_subscription_created_ignored(self, mock_db):
        subscription = {"id": "sub_1", "status": "incomplete", "metadata": {"userId": USER_ID}, "customer": "cus_1"}

        self._handle(_event("customer.subscription.created", subscription))

        mock_db.update_profile.assert_not_called()

    def test_subscription_updated_active(self, mock_db):
        subscription = {"id": "sub_1", "status": "active", "metadata": {"userId": USER_ID}}

        self._handle(_event("customer.subscription.updated", subscription))

        _assert_plan(mock_db, "pro", "active")

    def test_subscription_past_due_downgrades(self, mock_db):
        subscription = {"id": "sub_1", "status": "past_due", "metadata": {"userId": USER_ID}}

        self._handle(_event("customer.subscription.updated", subscription))

        _assert_plan(mock_db, "free", "canceled")

    def test_subscription_deleted_downgrades(self, mock_db):
        subscription = {"id": "sub_1", "status": "canceled", "metadata": {"userId": USER_ID}}

        self._handle(_event("customer.subscription.deleted", subscription))

        _assert_plan(mock_db, "free", "canceled")

    def test_unknown_user_ignored(self, mock_db):
        subscription = {"id": "sub_1", "status": "active", "metadata": {}, "customer": None}

        self._handle(_event("customer.subscription.updated", subscription))

        mock_db.update_profile.assert_not_called()

    def test_other_events_acknowledged(self, mock_db):
        ack = self._handle(_event("invoice.paid", {"id": "in_1"}))

        assert ack.event_type == "invoice.paid"
        mock_db.update_profile.assert_not_called()
