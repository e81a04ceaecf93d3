"""Management command to match mirrored Stripe payments to registrations.

Usage::

    # Match everything with the configured strategy and save the run
    manage.py reconcile_payments

    # Preview one event with the unique-customer strategy
    manage.py reconcile_payments --event texas-recruiting-clinic --strategy unique_customer --dry-run

    # Save the run and mark matched registrations as paid
    manage.py reconcile_payments --apply
"""

from typing import Any

from django.core.management.base import BaseCommand, CommandError, CommandParser

from django_camps.events.models import Event
from django_camps.reconciliation.matching import Strategy
from django_camps.reconciliation.services.reconcile import ReconciliationService, default_options
from django_camps.reconciliation.services.reports import (
    RunSummary,
    find_duplicate_customers,
    summarize_result,
    summarize_run,
)
from django_camps.settings import get_config


class Command(BaseCommand):
    """Match succeeded Stripe payments to registrations by timestamp."""

    help = "Match succeeded Stripe payments to registrations by timestamp"

    def add_arguments(self, parser: CommandParser) -> None:
        """Register command-line arguments.

        Args:
            parser: The argument parser to add arguments to.
        """
        parser.add_argument(
            "--event",
            default=None,
            help="Only consider this event's payments and registrations.",
        )
        parser.add_argument(
            "--strategy",
            choices=[s.value for s in Strategy],
            default=None,
            help="Matching strategy (defaults to DJANGO_CAMPS['reconciliation']['strategy']).",
        )
        parser.add_argument(
            "--no-anchors",
            action="store_true",
            default=False,
            help="Skip pairing payments with registrations that already recorded their intent ID.",
        )
        parser.add_argument(
            "--max-gap-hours",
            type=int,
            default=None,
            help="Ignore registrations submitted more than this many hours before the payment.",
        )
        parser.add_argument(
            "--apply",
            action="store_true",
            default=False,
            help="Mark matched registrations as paid.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            default=False,
            help="Print the summary without saving a run.",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the reconciliation command."""
        if options["apply"] and options["dry_run"]:
            msg = "--apply and --dry-run cannot be combined"
            raise CommandError(msg)

        event = None
        event_slug = options["event"]
        if event_slug:
            try:
                event = Event.objects.get(slug=event_slug)
            except Event.DoesNotExist:
                msg = f"Event with slug '{event_slug}' not found"
                raise CommandError(msg) from None

        try:
            strategy, match_options = default_options(
                options["strategy"],
                use_anchors=False if options["no_anchors"] else None,
                max_gap_hours=options["max_gap_hours"],
            )
        except ValueError as exc:
            raise CommandError(str(exc)) from None

        service = ReconciliationService(event=event, strategy=strategy, options=match_options)

        if options["dry_run"]:
            result = service.preview()
            self.stdout.write(self.style.NOTICE(f"Dry run ({strategy.value}): nothing saved."))
            self._print_summary(summarize_result(result))
            self.stdout.write(f"Unused registrations: {len(result.unused_registrations)}")
            return

        run = service.run(apply=options["apply"])
        self._print_summary(summarize_run(run))

        duplicates = find_duplicate_customers(run)
        if duplicates:
            self.stdout.write(self.style.WARNING(f"Found {len(duplicates)} duplicate customers:"))
            for duplicate in duplicates:
                self.stdout.write(f"  - {duplicate.email}: {duplicate.count} payments")
        else:
            self.stdout.write(self.style.SUCCESS("No duplicate customers found"))

        suffix = " and marked registrations paid" if run.applied else ""
        self.stdout.write(self.style.SUCCESS(f"Saved reconciliation run {run.pk}{suffix}"))

    def _print_summary(self, summary: RunSummary) -> None:
        """Write the per-event breakdown and totals."""
        symbol = get_config().currency_symbol
        for row in summary.events:
            self.stdout.write(
                f"{row.event_name}: {row.matched_payments}/{row.total_payments} matched "
                f"({row.match_rate:.1%}) - {symbol}{row.revenue:.2f}"
            )
        self.stdout.write(
            f"TOTAL: {summary.matched_payments}/{summary.total_payments} payments matched, "
            f"revenue {symbol}{summary.revenue:.2f}"
        )
