"""Tests for Registration and StripePayment model behaviour."""

import datetime
from decimal import Decimal

import pytest

from django_camps.events.models import Event
from django_camps.registration.models import Registration, StripePayment


@pytest.mark.unit
@pytest.mark.django_db
class TestRegistration:
    def test_defaults_and_properties(self):
        registration = Registration.objects.create(first_name="Alice", last_name="Camper", email="alice@example.com")

        assert registration.full_name == "Alice Camper"
        assert str(registration) == "Alice Camper <alice@example.com>"
        assert registration.event_label == ""
        assert registration.payment_status == Registration.PaymentStatus.PENDING
        assert registration.registration_type == Registration.RegistrationType.FULL
        assert registration.stripe_payment_intent_id == ""
        assert registration.created_at is not None

    def test_event_label_and_set_null(self):
        event = Event.objects.create(
            name="Texas Recruiting Clinic",
            slug="texas-recruiting-clinic",
            start_date="2025-07-12",
            end_date="2025-07-12",
        )
        registration = Registration.objects.create(
            event=event, first_name="Bob", last_name="Camper", email="bob@example.com"
        )

        assert registration.event_label == "Texas Recruiting Clinic"
        event.delete()
        registration.refresh_from_db()
        assert registration.event is None

    def test_ordered_by_submission_time(self):
        base = datetime.datetime(2025, 6, 1, tzinfo=datetime.UTC)
        later = Registration.objects.create(
            first_name="Bob", last_name="Camper", email="bob@example.com", created_at=base + datetime.timedelta(hours=1)
        )
        earlier = Registration.objects.create(
            first_name="Alice", last_name="Camper", email="alice@example.com", created_at=base
        )

        assert list(Registration.objects.all()) == [earlier, later]


@pytest.mark.unit
@pytest.mark.django_db
class TestStripePayment:
    def test_is_succeeded(self):
        created = datetime.datetime(2025, 6, 1, tzinfo=datetime.UTC)
        payment = StripePayment.objects.create(
            stripe_payment_intent_id="pi_1",
            amount=Decimal("249.00"),
            status=StripePayment.Status.SUCCEEDED,
            created_at=created,
        )
        pending = StripePayment.objects.create(
            stripe_payment_intent_id="pi_2",
            amount=Decimal("249.00"),
            status=StripePayment.Status.REQUIRES_PAYMENT_METHOD,
            created_at=created,
        )

        assert payment.is_succeeded
        assert not pending.is_succeeded
        assert str(payment) == "pi_1 (succeeded)"
        assert payment.currency == "usd"
        assert payment.metadata == {}
