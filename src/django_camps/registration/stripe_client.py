"""Stripe client wrapper for reading payment intents.

Payments are normally collected on the business's main Stripe account, but an
event may carry its own secret key. The client is bound to whichever key
applies and uses the modern ``stripe.StripeClient`` pattern (v1 namespace).
"""

import datetime
import logging
from collections.abc import Iterator

import stripe

from django_camps.events.models import Event
from django_camps.registration.stripe_utils import obfuscate_key
from django_camps.settings import get_config

logger = logging.getLogger(__name__)


class StripeClient:
    """Read-only Stripe API client for payment intents.

    Args:
        event: Optional event whose own Stripe key should be used. When the
            event has no key (or no event is given) the globally configured
            ``DJANGO_CAMPS['stripe']['secret_key']`` is used.

    Raises:
        ValueError: If no Stripe secret key is configured for the scope.
    """

    def __init__(self, event: Event | None = None) -> None:
        config = get_config()
        raw_key = event.stripe_secret_key if event is not None else None
        if not raw_key:
            raw_key = config.stripe.secret_key
        if not raw_key:
            scope = f"event '{event.slug}'" if event is not None else "the default account"
            msg = (
                f"No Stripe secret key configured for {scope}. "
                "Set DJANGO_CAMPS['stripe']['secret_key'] or the event's 'stripe_secret_key'."
            )
            raise ValueError(msg)

        secret_key = str(raw_key)
        self.event = event
        self.page_size = config.stripe.page_size
        self.client = stripe.StripeClient(
            secret_key,
            stripe_version=config.stripe.api_version,
        )

        logger.info(
            "Initialized StripeClient for %s with key %s",
            f"event '{event.slug}'" if event is not None else "default account",
            obfuscate_key(secret_key),
        )

    def iter_payment_intents(self, *, created_gte: datetime.datetime) -> Iterator[stripe.PaymentIntent]:
        """Yield every PaymentIntent created at or after *created_gte*.

        Pages through the list endpoint with Stripe's auto-pagination, so the
        caller sees one flat stream regardless of account size.

        Args:
            created_gte: Lower bound (inclusive) on the intent's creation time.
        """
        page = self.client.v1.payment_intents.list(
            params={
                "limit": self.page_size,
                "created": {"gte": int(created_gte.timestamp())},
            },
        )
        yield from page.auto_paging_iter()

    def retrieve_payment_intent(self, intent_id: str) -> stripe.PaymentIntent:
        """Fetch a single PaymentIntent by ID.

        Args:
            intent_id: The Stripe PaymentIntent ID (``pi_...``).
        """
        return self.client.v1.payment_intents.retrieve(intent_id)
