"""Reconciliation service: run the matcher over the database and record the outcome.

Loads succeeded ``StripePayment`` rows and ``Registration`` rows, hands them to
:func:`~django_camps.reconciliation.matching.match_payments`, and persists a
``ReconciliationRun`` with one ``PaymentMatch`` per payment.
"""

import datetime
import logging

from django.db import transaction

from django_camps.events.models import Event
from django_camps.reconciliation.matching import (
    MatchOptions,
    MatchResult,
    PaymentCandidate,
    RegistrationCandidate,
    Strategy,
    match_payments,
)
from django_camps.reconciliation.models import PaymentMatch, ReconciliationRun
from django_camps.reconciliation.signals import reconciliation_completed
from django_camps.registration.models import Registration, StripePayment
from django_camps.settings import get_config

logger = logging.getLogger(__name__)


def default_options(
    strategy: Strategy | str | None = None,
    *,
    use_anchors: bool | None = None,
    max_gap_hours: int | None = None,
) -> tuple[Strategy, MatchOptions]:
    """Resolve a strategy and its options, filling gaps from ``DJANGO_CAMPS``.

    Args:
        strategy: Strategy name; defaults to the configured strategy.
        use_anchors: Override for the anchor pass.
        max_gap_hours: Override for the maximum registration-to-payment gap.

    Returns:
        The resolved :class:`Strategy` and its :class:`MatchOptions`.

    Raises:
        ValueError: If the strategy name is unknown or *max_gap_hours* is not
            positive.
    """
    recon = get_config().reconciliation
    try:
        resolved = Strategy(strategy or recon.strategy)
    except ValueError:
        msg = f"Unknown strategy {strategy!r}. Choose one of: {', '.join(s.value for s in Strategy)}"
        raise ValueError(msg) from None

    gap_hours = max_gap_hours if max_gap_hours is not None else recon.max_gap_hours
    if gap_hours is not None and gap_hours <= 0:
        msg = "max_gap_hours must be a positive integer"
        raise ValueError(msg)

    options = MatchOptions.for_strategy(
        resolved,
        use_anchors=recon.use_anchors if use_anchors is None else use_anchors,
        event_mismatch_penalty=datetime.timedelta(minutes=recon.event_mismatch_penalty_minutes),
        max_gap=datetime.timedelta(hours=gap_hours) if gap_hours is not None else None,
    )
    return resolved, options


class ReconciliationService:
    """Match mirrored Stripe payments to registrations.

    Args:
        event: Restrict the run to one event's payments and registrations.
        strategy: Strategy name; defaults to the configured strategy.
        options: Explicit matcher options. When given, they are used as-is
            instead of the preset for *strategy*.

    Raises:
        ValueError: If the strategy name is unknown.
    """

    def __init__(
        self,
        event: Event | None = None,
        strategy: Strategy | str | None = None,
        options: MatchOptions | None = None,
    ) -> None:
        self.event = event
        self.strategy, preset = default_options(strategy)
        self.options = options or preset

    def build_candidates(self) -> tuple[list[PaymentCandidate], list[RegistrationCandidate]]:
        """Load matcher inputs from the database.

        Only succeeded payments are considered. With an event filter, payments
        whose metadata label does not match the event name are skipped and
        only the event's registrations are loaded. Payments synced without a
        label carry ``unknown_event_label``; it is passed on as blank so it
        matches every event instead of none.
        """
        unknown = get_config().unknown_event_label
        payments = []
        payment_rows = StripePayment.objects.filter(status=StripePayment.Status.SUCCEEDED).order_by(
            "created_at", "stripe_payment_intent_id"
        )
        for row in payment_rows:
            if self.event is not None and not self.event.matches_name(row.event_name):
                continue
            payments.append(
                PaymentCandidate(
                    intent_id=row.stripe_payment_intent_id,
                    created=row.created_at,
                    amount=row.amount,
                    event_name="" if row.event_name == unknown else row.event_name,
                    email=row.receipt_email,
                )
            )

        registration_rows = Registration.objects.select_related("event").order_by("created_at", "id")
        if self.event is not None:
            registration_rows = registration_rows.filter(event=self.event)
        registrations = [
            RegistrationCandidate(
                pk=row.pk,
                created_at=row.created_at,
                event_name=row.event_label,
                email=row.email,
                stripe_payment_intent_id=row.stripe_payment_intent_id,
            )
            for row in registration_rows
        ]
        return payments, registrations

    def preview(self) -> MatchResult:
        """Run the matcher without writing anything."""
        payments, registrations = self.build_candidates()
        return match_payments(payments, registrations, self.options)

    @transaction.atomic
    def run(self, *, apply: bool = False) -> ReconciliationRun:
        """Run the matcher and persist the run with its matches.

        Args:
            apply: When ``True``, mark every matched registration as paid and
                record the intent ID on registrations that have none.

        Returns:
            The saved ``ReconciliationRun``.
        """
        result = self.preview()
        run = ReconciliationRun.objects.create(
            strategy=self.strategy.value,
            options=self.options.to_dict(),
            event=self.event,
            applied=apply,
            payment_count=len(result.matches),
            matched_count=len(result.matched),
        )

        payment_ids = {
            row.stripe_payment_intent_id: row.pk
            for row in StripePayment.objects.filter(
                stripe_payment_intent_id__in=[m.payment.intent_id for m in result.matches]
            ).only("id", "stripe_payment_intent_id")
        }
        PaymentMatch.objects.bulk_create(
            [
                PaymentMatch(
                    run=run,
                    payment_id=payment_ids[match.payment.intent_id],
                    registration_id=match.registration.pk if match.registration is not None else None,
                    method=match.method.value,
                    gap_seconds=int(match.gap.total_seconds()) if match.gap is not None else None,
                )
                for match in result.matches
            ]
        )

        if apply:
            self._apply(result)

        logger.info(
            "Reconciliation run %s (%s): matched %d of %d payments, %d registrations unused%s",
            run.pk,
            run.strategy,
            run.matched_count,
            run.payment_count,
            len(result.unused_registrations),
            ", applied" if apply else "",
        )
        reconciliation_completed.send(sender=ReconciliationRun, run=run, applied=apply)
        return run

    @staticmethod
    def _apply(result: MatchResult) -> None:
        """Write payment status and intent IDs back onto matched registrations.

        A recorded intent ID is kept only when it names a succeeded payment;
        a blank ID or one that never succeeded is replaced by the matched one.
        """
        by_pk = {m.registration.pk: m.payment.intent_id for m in result.matched if m.registration is not None}
        registrations = list(Registration.objects.select_for_update().filter(pk__in=by_pk))
        recorded = {r.stripe_payment_intent_id for r in registrations if r.stripe_payment_intent_id}
        succeeded = set(
            StripePayment.objects.filter(
                stripe_payment_intent_id__in=recorded, status=StripePayment.Status.SUCCEEDED
            ).values_list("stripe_payment_intent_id", flat=True)
        )
        for registration in registrations:
            registration.payment_status = Registration.PaymentStatus.PAID
            update_fields = ["payment_status", "updated_at"]
            if registration.stripe_payment_intent_id not in succeeded:
                if registration.stripe_payment_intent_id:
                    logger.info(
                        "Replacing intent %s on registration %s with %s",
                        registration.stripe_payment_intent_id,
                        registration.pk,
                        by_pk[registration.pk],
                    )
                registration.stripe_payment_intent_id = by_pk[registration.pk]
                update_fields.append("stripe_payment_intent_id")
            registration.save(update_fields=update_fields)
