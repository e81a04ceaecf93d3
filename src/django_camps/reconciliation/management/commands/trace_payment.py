"""Management command to show everything known about one payment intent.

Usage::

    manage.py trace_payment pi_1RYuLMBIRPjPy7BL
    manage.py trace_payment pi_1RYuLMBIRPjPy7BL --email parent@example.com --refresh
"""

from typing import Any

import stripe
from django.core.management.base import BaseCommand, CommandError, CommandParser

from django_camps.reconciliation.services.reports import trace_payment
from django_camps.settings import get_config


class Command(BaseCommand):
    """Trace a payment intent across the Stripe mirror, registrations, and runs."""

    help = "Show the mirrored payment, related registrations, and recorded matches for a payment intent"

    def add_arguments(self, parser: CommandParser) -> None:
        """Register command-line arguments."""
        parser.add_argument("intent_id", help="Stripe PaymentIntent ID (pi_...).")
        parser.add_argument(
            "--email",
            default=None,
            help="Also search registrations by this email.",
        )
        parser.add_argument(
            "--refresh",
            action="store_true",
            default=False,
            help="Re-fetch the payment intent from Stripe first.",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command."""
        intent_id: str = options["intent_id"]
        try:
            trace = trace_payment(intent_id, email=options["email"], refresh=options["refresh"])
        except ValueError as exc:
            raise CommandError(str(exc)) from None
        except stripe.StripeError as exc:
            msg = f"Stripe API error: {exc}"
            raise CommandError(msg) from None

        symbol = get_config().currency_symbol
        payment = trace.payment
        if payment is None:
            self.stdout.write(self.style.WARNING(f"Payment intent {intent_id} is not mirrored locally"))
        else:
            self.stdout.write(
                f"Payment {payment.stripe_payment_intent_id}: {payment.status}, "
                f"{symbol}{payment.amount:.2f} {payment.currency.upper()}, "
                f"created {payment.created_at:%Y-%m-%d %H:%M:%S}, event '{payment.event_name}'"
            )
            if payment.receipt_email:
                self.stdout.write(f"  Receipt email: {payment.receipt_email}")

        self.stdout.write(f"Registrations ({len(trace.registrations)}):")
        for registration in trace.registrations:
            via = "intent ID" if registration.stripe_payment_intent_id == intent_id else "email"
            self.stdout.write(
                f"  #{registration.pk} {registration.full_name} <{registration.email}> "
                f"{registration.created_at:%Y-%m-%d %H:%M:%S} [{registration.payment_status}] via {via}"
            )

        self.stdout.write(f"Matches ({len(trace.matches)}):")
        for match in trace.matches:
            target = f"registration #{match.registration_id}" if match.registration_id else "no registration"
            self.stdout.write(f"  run {match.run_id} ({match.run.strategy}): {target} [{match.method}]")
