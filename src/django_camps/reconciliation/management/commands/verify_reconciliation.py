"""Management command to check a reconciliation run for integrity problems.

Usage::

    manage.py verify_reconciliation            # latest run
    manage.py verify_reconciliation --run 12
"""

from typing import Any

from django.core.management.base import BaseCommand, CommandError, CommandParser

from django_camps.reconciliation.management.commands.unpaid_registrations import get_run
from django_camps.reconciliation.services.reports import verify_run


class Command(BaseCommand):
    """Check a reconciliation run; exits with an error when problems are found."""

    help = "Check a reconciliation run for unpaid registrations that look paid and duplicate customers"

    def add_arguments(self, parser: CommandParser) -> None:
        """Register command-line arguments."""
        parser.add_argument(
            "--run",
            type=int,
            default=None,
            help="Reconciliation run ID (defaults to the latest run).",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command."""
        run = get_run(options["run"])
        report = verify_run(run)

        for registration in report.unpaid_with_payment_intent:
            self.stdout.write(
                self.style.WARNING(
                    f"  Unpaid but has payment intent: {registration.full_name} <{registration.email}> "
                    f"({registration.stripe_payment_intent_id})"
                )
            )
        for registration in report.unpaid_marked_paid:
            self.stdout.write(
                self.style.WARNING(f"  Unpaid but marked paid: {registration.full_name} <{registration.email}>")
            )
        for duplicate in report.duplicate_customers:
            self.stdout.write(
                self.style.WARNING(
                    f"  Duplicate customer: {duplicate.email} ({', '.join(duplicate.payment_intent_ids)})"
                )
            )

        if not report.is_clean:
            msg = f"Reconciliation run {run.pk} has integrity problems"
            raise CommandError(msg)
        self.stdout.write(self.style.SUCCESS(f"Reconciliation run {run.pk} passed all integrity checks"))
