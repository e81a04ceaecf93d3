"""Reports over reconciliation results.

Summaries per event label, duplicate-customer detection, the list of
registrations left unpaid, an integrity check, and a single-payment trace.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from django.db.models import Q

from django_camps.reconciliation.matching import MatchResult
from django_camps.reconciliation.models import PaymentMatch, ReconciliationRun
from django_camps.registration.models import Registration, StripePayment
from django_camps.registration.services.sync import PaymentIntentSyncService
from django_camps.settings import get_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EventSummary:
    """Payment totals for one event label."""

    event_name: str
    total_payments: int
    matched_payments: int
    revenue: Decimal

    @property
    def match_rate(self) -> float:
        """Return the fraction of this event's payments that were matched."""
        if not self.total_payments:
            return 0.0
        return self.matched_payments / self.total_payments


@dataclass(slots=True)
class RunSummary:
    """Per-event breakdown plus totals, ordered by revenue (highest first)."""

    events: list[EventSummary] = field(default_factory=list)

    @property
    def total_payments(self) -> int:
        """Return the number of payments across all events."""
        return sum(e.total_payments for e in self.events)

    @property
    def matched_payments(self) -> int:
        """Return the number of matched payments across all events."""
        return sum(e.matched_payments for e in self.events)

    @property
    def revenue(self) -> Decimal:
        """Return the summed payment amounts across all events."""
        return sum((e.revenue for e in self.events), Decimal("0.00"))


@dataclass(frozen=True, slots=True)
class DuplicateCustomer:
    """An email credited by more than one payment in the same run."""

    email: str
    count: int
    payment_intent_ids: tuple[str, ...]


@dataclass(slots=True)
class IntegrityReport:
    """Problems found when checking a run's paid and unpaid sides."""

    run: ReconciliationRun
    unpaid_with_payment_intent: list[Registration] = field(default_factory=list)
    unpaid_marked_paid: list[Registration] = field(default_factory=list)
    duplicate_customers: list[DuplicateCustomer] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        """Return whether no problems were found."""
        return not (self.unpaid_with_payment_intent or self.unpaid_marked_paid or self.duplicate_customers)


@dataclass(slots=True)
class PaymentTrace:
    """Everything known locally about one payment intent."""

    intent_id: str
    payment: StripePayment | None
    registrations: list[Registration] = field(default_factory=list)
    matches: list[PaymentMatch] = field(default_factory=list)


def _summarize(rows: Iterable[tuple[str, Decimal, bool]]) -> RunSummary:
    """Group ``(event_name, amount, matched)`` rows into a :class:`RunSummary`."""
    unknown = get_config().unknown_event_label
    totals: dict[str, list] = defaultdict(lambda: [0, 0, Decimal("0.00")])
    for event_name, amount, matched in rows:
        bucket = totals[event_name or unknown]
        bucket[0] += 1
        bucket[1] += int(matched)
        bucket[2] += amount

    events = [
        EventSummary(event_name=name, total_payments=total, matched_payments=matched, revenue=revenue)
        for name, (total, matched, revenue) in totals.items()
    ]
    events.sort(key=lambda e: (-e.revenue, e.event_name))
    return RunSummary(events=events)


def summarize_result(result: MatchResult) -> RunSummary:
    """Summarise an in-memory :class:`MatchResult` (e.g. a dry run)."""
    return _summarize((m.payment.event_name, m.payment.amount, m.is_matched) for m in result.matches)


def summarize_run(run: ReconciliationRun) -> RunSummary:
    """Summarise a saved run by event label."""
    matches = run.matches.select_related("payment")
    return _summarize((m.payment.event_name, m.payment.amount, m.registration_id is not None) for m in matches)


def _email_key(email: str) -> str:
    return email.strip().lower()


def find_duplicate_customers(run: ReconciliationRun) -> list[DuplicateCustomer]:
    """Return emails credited by more than one payment in *run*.

    Can only be non-empty for strategies that allow an email to be reused
    (every strategy except ``unique_customer``).
    """
    grouped: dict[str, list[str]] = defaultdict(list)
    matches = run.matches.filter(registration__isnull=False).select_related("payment", "registration")
    for match in matches:
        key = _email_key(match.registration.email)
        if key:
            grouped[key].append(match.payment.stripe_payment_intent_id)
    return [
        DuplicateCustomer(email=email, count=len(ids), payment_intent_ids=tuple(ids))
        for email, ids in sorted(grouped.items())
        if len(ids) > 1
    ]


def _matched_emails(run: ReconciliationRun) -> set[str]:
    emails = run.matches.filter(registration__isnull=False).values_list("registration__email", flat=True)
    return {_email_key(e) for e in emails if e}


def find_unpaid_registrations(run: ReconciliationRun) -> list[Registration]:
    """Return registrations whose email no matched registration in *run* shares.

    One registration per email is returned, the most recent one, so a person
    who filled the form several times without paying is listed once.
    Registrations without an email are skipped.
    """
    paid = _matched_emails(run)
    registrations = Registration.objects.select_related("event").order_by("-created_at", "-id")
    if run.event_id is not None:
        registrations = registrations.filter(event_id=run.event_id)

    latest: dict[str, Registration] = {}
    for registration in registrations:
        key = _email_key(registration.email)
        if not key or key in paid or key in latest:
            continue
        latest[key] = registration
    return sorted(latest.values(), key=lambda r: (r.created_at, r.pk), reverse=True)


def verify_run(run: ReconciliationRun) -> IntegrityReport:
    """Check a run for unpaid registrations that look paid, and duplicates.

    Reports:

    * unpaid registrations that already carry a Stripe payment intent ID,
    * unpaid registrations whose status says paid (left over from an earlier
      applied run or a manual edit),
    * duplicate customers (see :func:`find_duplicate_customers`).
    """
    unpaid = find_unpaid_registrations(run)
    report = IntegrityReport(
        run=run,
        unpaid_with_payment_intent=[r for r in unpaid if r.stripe_payment_intent_id],
        unpaid_marked_paid=[r for r in unpaid if r.payment_status == Registration.PaymentStatus.PAID],
        duplicate_customers=find_duplicate_customers(run),
    )
    if not report.is_clean:
        logger.warning(
            "Run %s integrity issues: %d unpaid with intents, %d marked paid, %d duplicate customers",
            run.pk,
            len(report.unpaid_with_payment_intent),
            len(report.unpaid_marked_paid),
            len(report.duplicate_customers),
        )
    return report


def trace_payment(intent_id: str, *, email: str | None = None, refresh: bool = False) -> PaymentTrace:
    """Collect what is known about one payment intent.

    Args:
        intent_id: The Stripe PaymentIntent ID.
        email: Extra email to search registrations by. Defaults to the
            payment's receipt email when one is stored.
        refresh: Re-fetch the intent from Stripe before tracing.

    Returns:
        A :class:`PaymentTrace`; ``payment`` is ``None`` when the intent is
        not mirrored locally.

    Raises:
        ValueError: If *refresh* is set and no Stripe key is configured.
    """
    if refresh:
        payment: StripePayment | None = PaymentIntentSyncService().sync_one(intent_id)
    else:
        payment = StripePayment.objects.filter(stripe_payment_intent_id=intent_id).first()

    search_email = email or (payment.receipt_email if payment is not None else "")
    query = Q(stripe_payment_intent_id=intent_id)
    if search_email:
        query |= Q(email__iexact=search_email.strip())

    registrations = list(Registration.objects.filter(query).select_related("event").order_by("created_at", "id"))
    matches = []
    if payment is not None:
        matches = list(payment.matches.select_related("run", "registration").order_by("-run__created_at", "-run_id"))
    return PaymentTrace(intent_id=intent_id, payment=payment, registrations=registrations, matches=matches)
