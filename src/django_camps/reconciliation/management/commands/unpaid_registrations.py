"""Management command to list registrations left unpaid by a reconciliation run.

Usage::

    manage.py unpaid_registrations            # latest run
    manage.py unpaid_registrations --run 12
"""

from typing import Any

from django.core.management.base import BaseCommand, CommandError, CommandParser

from django_camps.reconciliation.models import ReconciliationRun
from django_camps.reconciliation.services.reports import find_unpaid_registrations


def get_run(run_id: int | None) -> ReconciliationRun:
    """Return the requested run, or the latest one.

    Raises:
        CommandError: If the run does not exist or no run has been saved yet.
    """
    if run_id is not None:
        try:
            return ReconciliationRun.objects.get(pk=run_id)
        except ReconciliationRun.DoesNotExist:
            msg = f"Reconciliation run {run_id} not found"
            raise CommandError(msg) from None
    try:
        return ReconciliationRun.objects.latest()
    except ReconciliationRun.DoesNotExist:
        msg = "No reconciliation runs found. Run 'reconcile_payments' first."
        raise CommandError(msg) from None


class Command(BaseCommand):
    """List registrations whose email was not credited by any payment."""

    help = "List registrations left unpaid by a reconciliation run"

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
        unpaid = find_unpaid_registrations(run)

        for registration in unpaid:
            event = registration.event_label or "-"
            phone = registration.phone or "-"
            self.stdout.write(
                f"{registration.full_name} <{registration.email}> {phone} | {event} | "
                f"{registration.created_at:%Y-%m-%d %H:%M} [{registration.payment_status}]"
            )
        self.stdout.write(self.style.SUCCESS(f"{len(unpaid)} unpaid registrations for run {run.pk}"))
