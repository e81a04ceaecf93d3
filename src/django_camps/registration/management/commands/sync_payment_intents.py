"""Management command to mirror Stripe payment intents into the database.

Usage::

    # Read the default Stripe account for the configured lookback window
    manage.py sync_payment_intents

    # Read an event's own Stripe account for the last 90 days
    manage.py sync_payment_intents --event birmingham-slam-camp --days 90
"""

from typing import Any

import stripe
from django.core.management.base import BaseCommand, CommandError, CommandParser

from django_camps.events.models import Event
from django_camps.registration.services.sync import PaymentIntentSyncService


class Command(BaseCommand):
    """Mirror Stripe payment intents into local StripePayment rows."""

    help = "Mirror Stripe payment intents into local StripePayment rows"

    def add_arguments(self, parser: CommandParser) -> None:
        """Register command-line arguments.

        Args:
            parser: The argument parser to add arguments to.
        """
        parser.add_argument(
            "--event",
            default=None,
            help="Slug of an event whose own Stripe account should be read.",
        )
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="How many days back to read (defaults to the configured lookback).",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the sync command."""
        event = None
        event_slug = options["event"]
        if event_slug:
            try:
                event = Event.objects.get(slug=event_slug)
            except Event.DoesNotExist:
                msg = f"Event with slug '{event_slug}' not found"
                raise CommandError(msg) from None

        try:
            service = PaymentIntentSyncService(event)
            results = service.sync(lookback_days=options["days"])
        except ValueError as exc:
            raise CommandError(str(exc)) from None
        except stripe.StripeError as exc:
            msg = f"Stripe API error: {exc}"
            raise CommandError(msg) from None

        self.stdout.write(
            self.style.SUCCESS(
                f"Synced {results['fetched']} payment intents "
                f"({results['created']} created, {results['updated']} updated)"
            )
        )
