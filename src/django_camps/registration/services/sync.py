"""Sync service that mirrors Stripe payment intents into ``StripePayment`` rows."""

import datetime
import logging
from collections.abc import Mapping
from typing import Any

from django.db import transaction
from django.utils import timezone

from django_camps.events.models import Event
from django_camps.registration.models import StripePayment
from django_camps.registration.stripe_client import StripeClient
from django_camps.registration.stripe_utils import (
    convert_amount_for_db,
    extract_event_name,
    timestamp_to_datetime,
)
from django_camps.settings import get_config

logger = logging.getLogger(__name__)


def _as_dict(value: object) -> dict[str, Any]:
    """Return a plain dict for a Stripe object, mapping, or ``None``."""
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return dict(to_dict())
    return {}


def payment_fields_from_intent(intent: object) -> dict[str, Any]:
    """Build ``StripePayment`` field values from a Stripe PaymentIntent.

    Args:
        intent: A ``stripe.PaymentIntent`` (or any object exposing the same
            attributes).

    Returns:
        A dict of model field names to values, excluding the intent ID.
    """
    config = get_config()
    currency = str(getattr(intent, "currency", None) or config.currency).lower()
    metadata = _as_dict(getattr(intent, "metadata", None))
    customer = getattr(intent, "customer", None)
    if customer is not None and not isinstance(customer, str):
        customer = getattr(customer, "id", "")

    return {
        "amount": convert_amount_for_db(int(getattr(intent, "amount", 0) or 0), currency),
        "currency": currency,
        "status": str(getattr(intent, "status", "")),
        "event_name": extract_event_name(metadata, config.unknown_event_label),
        "receipt_email": getattr(intent, "receipt_email", None) or "",
        "stripe_customer_id": customer or "",
        "description": getattr(intent, "description", None) or "",
        "metadata": metadata,
        "created_at": timestamp_to_datetime(int(intent.created)),
    }


class PaymentIntentSyncService:
    """Pull payment intents from Stripe and upsert local ``StripePayment`` rows.

    Args:
        event: Optional event whose own Stripe account should be read.

    Raises:
        ValueError: If no Stripe secret key is configured for the scope.
    """

    def __init__(self, event: Event | None = None) -> None:
        self.event = event
        self.client = StripeClient(event)

    def sync(self, lookback_days: int | None = None) -> dict[str, int]:
        """Mirror every PaymentIntent created within the lookback window.

        Args:
            lookback_days: How far back to read. Defaults to
                ``DJANGO_CAMPS['stripe']['lookback_days']``.

        Returns:
            Counts keyed by ``"fetched"``, ``"created"``, and ``"updated"``.

        Raises:
            ValueError: If *lookback_days* is not positive.
        """
        days = lookback_days if lookback_days is not None else get_config().stripe.lookback_days
        if days <= 0:
            msg = "lookback_days must be a positive integer"
            raise ValueError(msg)

        since = timezone.now() - datetime.timedelta(days=days)
        results = {"fetched": 0, "created": 0, "updated": 0}

        with transaction.atomic():
            for intent in self.client.iter_payment_intents(created_gte=since):
                results["fetched"] += 1
                _, created = self._upsert(intent)
                results["created" if created else "updated"] += 1

        logger.info(
            "Synced %d payment intents since %s (%d created, %d updated)",
            results["fetched"],
            since.date().isoformat(),
            results["created"],
            results["updated"],
        )
        return results

    def sync_one(self, intent_id: str) -> StripePayment:
        """Refresh a single PaymentIntent from Stripe.

        Args:
            intent_id: The Stripe PaymentIntent ID.

        Returns:
            The created or updated ``StripePayment``.
        """
        intent = self.client.retrieve_payment_intent(intent_id)
        payment, created = self._upsert(intent)
        logger.info("%s payment intent %s", "Created" if created else "Refreshed", intent_id)
        return payment

    def _upsert(self, intent: object) -> tuple[StripePayment, bool]:
        """Create or update the ``StripePayment`` row for *intent*."""
        return StripePayment.objects.update_or_create(
            stripe_payment_intent_id=str(intent.id),
            defaults=payment_fields_from_intent(intent),
        )
