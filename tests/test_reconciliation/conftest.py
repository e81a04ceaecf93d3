import datetime
from decimal import Decimal

import pytest

from django_camps.events.models import Event
from django_camps.registration.models import Registration, StripePayment

BASE = datetime.datetime(2025, 6, 1, 12, 0, tzinfo=datetime.UTC)


def at(minutes: float) -> datetime.datetime:
    return BASE + datetime.timedelta(minutes=minutes)


@pytest.fixture
def make_registration(db):
    def _make(first_name, minutes, *, event=None, email=None, **extra):
        return Registration.objects.create(
            event=event,
            first_name=first_name,
            last_name="Camper",
            email=email or f"{first_name.lower()}@example.com",
            created_at=at(minutes),
            **extra,
        )

    return _make


@pytest.fixture
def make_payment(db):
    def _make(intent_id, minutes, *, event_name="", amount="249.00", status="succeeded", **extra):
        return StripePayment.objects.create(
            stripe_payment_intent_id=intent_id,
            amount=Decimal(amount),
            status=status,
            event_name=event_name,
            created_at=at(minutes),
            **extra,
        )

    return _make


@pytest.fixture
def birmingham(db):
    return Event.objects.create(
        name="Birmingham Slam Camp",
        slug="birmingham-slam-camp",
        start_date="2025-06-19",
        end_date="2025-06-21",
        base_price=Decimal("249.00"),
    )


@pytest.fixture
def texas(db):
    return Event.objects.create(
        name="Texas Recruiting Clinic",
        slug="texas-recruiting-clinic",
        category=Event.Category.CLINIC,
        start_date="2025-07-12",
        end_date="2025-07-12",
        base_price=Decimal("99.00"),
    )


@pytest.fixture
def camp_data(birmingham, texas, make_registration, make_payment):
    """Three paid registrations, one unpaid, and one canceled payment."""
    registrations = {
        "alice": make_registration("Alice", 0, event=birmingham),
        "bob": make_registration("Bob", 10, event=birmingham),
        "carol": make_registration("Carol", 20, event=texas),
        "dave": make_registration("Dave", 60, event=texas, phone="205-555-0100"),
    }
    payments = {
        "alice": make_payment("pi_alice", 2, event_name="Birmingham Slam Camp"),
        "bob": make_payment("pi_bob", 12, event_name="Birmingham Slam Camp"),
        "carol": make_payment("pi_carol", 22, event_name="Texas Recruiting Clinic", amount="99.00"),
        "canceled": make_payment("pi_canceled", 30, event_name="Texas Recruiting Clinic", status="canceled"),
    }
    return registrations, payments
