"""Tests for mirroring Stripe payment intents into StripePayment rows."""

import datetime
from decimal import Decimal
from io import StringIO
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import stripe
from django.core.management import call_command
from django.core.management.base import CommandError

from django_camps.events.models import Event
from django_camps.registration.models import StripePayment
from django_camps.registration.services.sync import PaymentIntentSyncService, payment_fields_from_intent

CREATED = 1750000000


def make_intent(intent_id="pi_1", **overrides):
    values = {
        "id": intent_id,
        "amount": 24900,
        "currency": "usd",
        "status": "succeeded",
        "metadata": {"event_name": "Birmingham Slam Camp"},
        "receipt_email": "parent@example.com",
        "customer": "cus_123",
        "description": "Camp registration",
        "created": CREATED,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def mock_stripe_client_cls():
    with patch("django_camps.registration.stripe_client.stripe.StripeClient") as mock_cls:
        mock_instance = MagicMock()
        mock_cls.return_value = mock_instance
        yield mock_cls, mock_instance.v1


def _serve(v1, intents):
    v1.payment_intents.list.return_value.auto_paging_iter.return_value = iter(intents)


# =============================================================================
# TestPaymentFieldsFromIntent
# =============================================================================


@pytest.mark.unit
class TestPaymentFieldsFromIntent:
    def test_maps_stripe_values(self):
        fields = payment_fields_from_intent(make_intent())

        assert fields == {
            "amount": Decimal("249.00"),
            "currency": "usd",
            "status": "succeeded",
            "event_name": "Birmingham Slam Camp",
            "receipt_email": "parent@example.com",
            "stripe_customer_id": "cus_123",
            "description": "Camp registration",
            "metadata": {"event_name": "Birmingham Slam Camp"},
            "created_at": datetime.datetime.fromtimestamp(CREATED, tz=datetime.UTC),
        }

    def test_reads_camel_case_metadata(self):
        fields = payment_fields_from_intent(make_intent(metadata={"eventName": "Texas Recruiting Clinic"}))

        assert fields["event_name"] == "Texas Recruiting Clinic"

    def test_missing_metadata_uses_unknown_label(self):
        fields = payment_fields_from_intent(make_intent(metadata=None))

        assert fields["event_name"] == "Unknown Event"
        assert fields["metadata"] == {}

    def test_stripe_object_metadata_is_converted(self):
        metadata = MagicMock()
        metadata.to_dict.return_value = {"event_name": "Slam Camp"}

        fields = payment_fields_from_intent(make_intent(metadata=metadata))

        assert fields["metadata"] == {"event_name": "Slam Camp"}

    def test_expanded_customer_and_blank_fields(self):
        fields = payment_fields_from_intent(
            make_intent(customer=SimpleNamespace(id="cus_expanded"), receipt_email=None, description=None)
        )

        assert fields["stripe_customer_id"] == "cus_expanded"
        assert fields["receipt_email"] == ""
        assert fields["description"] == ""

    def test_zero_decimal_currency(self):
        fields = payment_fields_from_intent(make_intent(amount=5000, currency="JPY"))

        assert fields["amount"] == Decimal("5000")
        assert fields["currency"] == "jpy"


# =============================================================================
# TestSync
# =============================================================================


@pytest.mark.unit
@pytest.mark.django_db
class TestSync:
    def test_creates_then_updates_rows(self, mock_stripe_client_cls):
        _, v1 = mock_stripe_client_cls
        _serve(v1, [make_intent("pi_1", status="processing"), make_intent("pi_2")])

        service = PaymentIntentSyncService()
        first = service.sync()

        assert first == {"fetched": 2, "created": 2, "updated": 0}
        assert StripePayment.objects.get(stripe_payment_intent_id="pi_1").status == "processing"

        _serve(v1, [make_intent("pi_1", status="succeeded")])
        second = service.sync()

        assert second == {"fetched": 1, "created": 0, "updated": 1}
        assert StripePayment.objects.get(stripe_payment_intent_id="pi_1").is_succeeded
        assert StripePayment.objects.count() == 2

    def test_lookback_window_sets_created_filter(self, mock_stripe_client_cls):
        _, v1 = mock_stripe_client_cls
        _serve(v1, [])
        frozen = datetime.datetime(2025, 9, 1, tzinfo=datetime.UTC)

        with patch("django_camps.registration.services.sync.timezone.now", return_value=frozen):
            PaymentIntentSyncService().sync(lookback_days=30)

        params = v1.payment_intents.list.call_args.kwargs["params"]
        assert params["created"] == {"gte": int((frozen - datetime.timedelta(days=30)).timestamp())}

    def test_rejects_non_positive_lookback(self, mock_stripe_client_cls):
        with pytest.raises(ValueError, match="lookback_days"):
            PaymentIntentSyncService().sync(lookback_days=0)

    def test_sync_one_refreshes_single_intent(self, mock_stripe_client_cls):
        _, v1 = mock_stripe_client_cls
        v1.payment_intents.retrieve.return_value = make_intent("pi_9", amount=9900)

        payment = PaymentIntentSyncService().sync_one("pi_9")

        assert payment.stripe_payment_intent_id == "pi_9"
        assert payment.amount == Decimal("99.00")
        v1.payment_intents.retrieve.assert_called_once_with("pi_9")


# =============================================================================
# TestSyncCommand
# =============================================================================


@pytest.mark.django_db
class TestSyncCommand:
    def test_reports_counts(self, mock_stripe_client_cls):
        _, v1 = mock_stripe_client_cls
        _serve(v1, [make_intent("pi_1"), make_intent("pi_2")])
        out = StringIO()

        call_command("sync_payment_intents", days=7, stdout=out)

        assert "Synced 2 payment intents (2 created, 0 updated)" in out.getvalue()

    def test_uses_event_account(self, mock_stripe_client_cls):
        mock_cls, v1 = mock_stripe_client_cls
        _serve(v1, [])
        Event.objects.create(
            name="Birmingham Slam Camp",
            slug="birmingham-slam-camp",
            start_date="2025-06-19",
            end_date="2025-06-21",
            stripe_secret_key="sk_test_event_456",
        )

        call_command("sync_payment_intents", event="birmingham-slam-camp", stdout=StringIO())

        assert mock_cls.call_args.args == ("sk_test_event_456",)

    def test_unknown_event(self, mock_stripe_client_cls):
        with pytest.raises(CommandError, match="Event with slug 'nope' not found"):
            call_command("sync_payment_intents", event="nope")

    def test_invalid_days(self, mock_stripe_client_cls):
        with pytest.raises(CommandError, match="lookback_days"):
            call_command("sync_payment_intents", days=-1)

    def test_stripe_errors_become_command_errors(self, mock_stripe_client_cls):
        _, v1 = mock_stripe_client_cls
        v1.payment_intents.list.side_effect = stripe.AuthenticationError("Invalid API Key provided")

        with pytest.raises(CommandError, match="Stripe API error: Invalid API Key provided"):
            call_command("sync_payment_intents")

        assert not StripePayment.objects.exists()
