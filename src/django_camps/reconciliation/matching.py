"""Pair successful Stripe payments with the registrations they paid for.

Registrations and payments are linked only by time: a registrant submits the
form and pays a few moments later. The matcher walks payments in
chronological order and gives each one the nearest earlier registration that
has not been claimed yet, so no registration is ever credited twice.

This module has no database access. Callers build :class:`PaymentCandidate`
and :class:`RegistrationCandidate` values (see
``django_camps.reconciliation.services.reconcile``) and persist the
:class:`MatchResult` themselves.
"""

import datetime
import enum
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from django_camps.events.utils import event_labels_match


class Strategy(enum.StrEnum):
    """Named presets for :class:`MatchOptions`."""

    SEQUENTIAL = "sequential"
    STRICT = "strict"
    UNIQUE_CUSTOMER = "unique_customer"
    EVENT_FIRST = "event_first"


class MatchMethod(enum.StrEnum):
    """How a payment ended up paired (or not)."""

    DIRECT = "direct"
    PROXIMITY = "proximity"
    FALLBACK = "fallback"
    UNMATCHED = "unmatched"


@dataclass(frozen=True, slots=True)
class PaymentCandidate:
    """A successful payment waiting to be paired.

    Attributes:
        intent_id: The Stripe PaymentIntent ID.
        created: When the intent was created on Stripe (aware datetime).
        amount: Amount in major currency units.
        event_name: Event label from the intent's metadata, blank when unknown.
        email: Receipt email, when Stripe has one.
    """

    intent_id: str
    created: datetime.datetime
    amount: Decimal = Decimal("0.00")
    event_name: str = ""
    email: str = ""


@dataclass(frozen=True, slots=True)
class RegistrationCandidate:
    """A registration that may be claimed by a payment.

    Attributes:
        pk: Primary key of the ``Registration`` row.
        created_at: When the form was submitted (aware datetime).
        event_name: Name of the registration's event, blank when unknown.
        email: Registrant email.
        stripe_payment_intent_id: Intent ID recorded at sign-up, if any.
    """

    pk: int
    created_at: datetime.datetime
    event_name: str = ""
    email: str = ""
    stripe_payment_intent_id: str = ""

    @property
    def email_key(self) -> str:
        """Return the normalised email used for uniqueness checks."""
        return self.email.strip().lower()


@dataclass(frozen=True, slots=True)
class MatchOptions:
    """Tuning knobs for :func:`match_payments`.

    Attributes:
        use_anchors: Pair payments with registrations that already carry
            their intent ID before any time-based matching.
        prefer_same_event: Add ``event_mismatch_penalty`` to the time gap of
            candidates from a different event.
        event_first: Only fall back to other events when no same-event
            candidate precedes the payment.
        event_mismatch_penalty: Penalty used by ``prefer_same_event``.
        unique_email: Never credit the same email twice.
        fallback_to_earliest_unused: When nothing precedes a payment, take
            the earliest unclaimed registration regardless of order.
        max_gap: Ignore registrations further than this from the payment
            (before it for proximity, on either side for the fallback).
    """

    use_anchors: bool = True
    prefer_same_event: bool = False
    event_first: bool = False
    event_mismatch_penalty: datetime.timedelta = datetime.timedelta(0)
    unique_email: bool = False
    fallback_to_earliest_unused: bool = False
    max_gap: datetime.timedelta | None = None

    @classmethod
    def for_strategy(
        cls,
        strategy: Strategy | str,
        *,
        use_anchors: bool = True,
        event_mismatch_penalty: datetime.timedelta = datetime.timedelta(hours=1),
        max_gap: datetime.timedelta | None = None,
    ) -> "MatchOptions":
        """Build the option preset for a named strategy.

        Args:
            strategy: A :class:`Strategy` or its string value.
            use_anchors: Whether to run the intent-ID anchor pass.
            event_mismatch_penalty: Penalty for the ``sequential`` strategy.
            max_gap: Optional maximum registration-to-payment gap.

        Raises:
            ValueError: If *strategy* is not a known strategy name.
        """
        strategy = Strategy(strategy)
        common: dict[str, Any] = {"use_anchors": use_anchors, "max_gap": max_gap}
        if strategy is Strategy.SEQUENTIAL:
            return cls(
                prefer_same_event=True,
                event_mismatch_penalty=event_mismatch_penalty,
                fallback_to_earliest_unused=True,
                **common,
            )
        if strategy is Strategy.UNIQUE_CUSTOMER:
            return cls(unique_email=True, **common)
        if strategy is Strategy.EVENT_FIRST:
            return cls(event_first=True, fallback_to_earliest_unused=True, **common)
        return cls(**common)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable snapshot of the options."""
        return {
            "use_anchors": self.use_anchors,
            "prefer_same_event": self.prefer_same_event,
            "event_first": self.event_first,
            "event_mismatch_penalty_seconds": int(self.event_mismatch_penalty.total_seconds()),
            "unique_email": self.unique_email,
            "fallback_to_earliest_unused": self.fallback_to_earliest_unused,
            "max_gap_seconds": int(self.max_gap.total_seconds()) if self.max_gap is not None else None,
        }


@dataclass(frozen=True, slots=True)
class Match:
    """The outcome for one payment.

    ``gap`` is ``payment.created - registration.created_at``; it is negative
    for direct or fallback matches whose registration came after the payment.
    """

    payment: PaymentCandidate
    registration: RegistrationCandidate | None
    method: MatchMethod
    gap: datetime.timedelta | None = None

    @property
    def is_matched(self) -> bool:
        """Return whether the payment was paired with a registration."""
        return self.registration is not None


@dataclass(slots=True)
class MatchResult:
    """All matches from one matcher pass, in payment chronological order."""

    matches: list[Match] = field(default_factory=list)
    unused_registrations: list[RegistrationCandidate] = field(default_factory=list)

    @property
    def matched(self) -> list[Match]:
        """Return matches that found a registration."""
        return [m for m in self.matches if m.is_matched]

    @property
    def unmatched_payments(self) -> list[PaymentCandidate]:
        """Return payments left without a registration."""
        return [m.payment for m in self.matches if not m.is_matched]


class _Claims:
    """Bookkeeping for registrations and emails already credited."""

    def __init__(self, *, unique_email: bool) -> None:
        self.unique_email = unique_email
        self.pks: set[int] = set()
        self.emails: set[str] = set()

    def available(self, registration: RegistrationCandidate) -> bool:
        if registration.pk in self.pks:
            return False
        return not (self.unique_email and registration.email_key and registration.email_key in self.emails)

    def claim(self, registration: RegistrationCandidate) -> None:
        self.pks.add(registration.pk)
        if registration.email_key:
            self.emails.add(registration.email_key)


def _check_unique(values: Iterable[object], label: str) -> None:
    seen: set[object] = set()
    for value in values:
        if value in seen:
            msg = f"Duplicate {label}: {value!r}"
            raise ValueError(msg)
        seen.add(value)


def _anchor_index(registrations: Sequence[RegistrationCandidate]) -> dict[str, RegistrationCandidate]:
    """Map intent IDs to the earliest registration that recorded them."""
    index: dict[str, RegistrationCandidate] = {}
    for registration in registrations:
        intent_id = registration.stripe_payment_intent_id.strip()
        if intent_id and intent_id not in index:
            index[intent_id] = registration
    return index


def _nearest_prior(
    payment: PaymentCandidate,
    registrations: Sequence[RegistrationCandidate],
    claims: _Claims,
    options: MatchOptions,
) -> RegistrationCandidate | None:
    """Return the best unclaimed registration at or before *payment*."""
    eligible = []
    for registration in registrations:
        if registration.created_at > payment.created:
            break
        if not claims.available(registration):
            continue
        gap = payment.created - registration.created_at
        if options.max_gap is not None and gap > options.max_gap:
            continue
        eligible.append((registration, gap))

    if not eligible:
        return None

    if options.event_first:
        same_event = [item for item in eligible if event_labels_match(item[0].event_name, payment.event_name)]
        eligible = same_event or eligible

    def score(item: tuple[RegistrationCandidate, datetime.timedelta]) -> tuple[datetime.timedelta, datetime.timedelta, int]:
        registration, gap = item
        weighted = gap
        if options.prefer_same_event and not event_labels_match(registration.event_name, payment.event_name):
            weighted += options.event_mismatch_penalty
        return weighted, gap, registration.pk

    return min(eligible, key=score)[0]


def _earliest_unused(
    payment: PaymentCandidate,
    registrations: Sequence[RegistrationCandidate],
    claims: _Claims,
    options: MatchOptions,
) -> RegistrationCandidate | None:
    """Return the earliest unclaimed registration within ``max_gap`` of *payment*, on either side."""
    for registration in registrations:
        if not claims.available(registration):
            continue
        if options.max_gap is not None and abs(payment.created - registration.created_at) > options.max_gap:
            continue
        return registration
    return None


def match_payments(
    payments: Iterable[PaymentCandidate],
    registrations: Iterable[RegistrationCandidate],
    options: MatchOptions | None = None,
) -> MatchResult:
    """Pair each payment with at most one registration.

    Steps, in order:

    1. **Anchors** (``use_anchors``): a registration that recorded a
       payment's intent ID is claimed by that payment, before any
       time-based matching so it cannot be taken by an earlier payment.
    2. **Proximity**: remaining payments, oldest first, take the nearest
       unclaimed registration created at or before them. Ties go to the
       later registration, then the lower primary key.
    3. **Fallback** (``fallback_to_earliest_unused``): the earliest
       unclaimed registration, before or after the payment, still within
       ``max_gap`` when one is set.

    Args:
        payments: Successful payments to pair.
        registrations: Registrations that may be claimed.
        options: Matching options; defaults to the ``strict`` preset.

    Returns:
        A :class:`MatchResult` with exactly one :class:`Match` per payment.

    Raises:
        ValueError: If payment intent IDs or registration keys repeat.
    """
    options = options or MatchOptions()
    ordered_payments = sorted(payments, key=lambda p: (p.created, p.intent_id))
    ordered_registrations = sorted(registrations, key=lambda r: (r.created_at, r.pk))
    _check_unique((p.intent_id for p in ordered_payments), "payment intent ID")
    _check_unique((r.pk for r in ordered_registrations), "registration key")

    claims = _Claims(unique_email=options.unique_email)
    outcomes: dict[str, Match] = {}

    if options.use_anchors:
        anchors = _anchor_index(ordered_registrations)
        for payment in ordered_payments:
            registration = anchors.get(payment.intent_id)
            if registration is not None and claims.available(registration):
                claims.claim(registration)
                outcomes[payment.intent_id] = Match(
                    payment=payment,
                    registration=registration,
                    method=MatchMethod.DIRECT,
                    gap=payment.created - registration.created_at,
                )

    for payment in ordered_payments:
        if payment.intent_id in outcomes:
            continue

        method = MatchMethod.PROXIMITY
        registration = _nearest_prior(payment, ordered_registrations, claims, options)
        if registration is None and options.fallback_to_earliest_unused:
            method = MatchMethod.FALLBACK
            registration = _earliest_unused(payment, ordered_registrations, claims, options)

        if registration is None:
            outcomes[payment.intent_id] = Match(payment=payment, registration=None, method=MatchMethod.UNMATCHED)
            continue

        claims.claim(registration)
        outcomes[payment.intent_id] = Match(
            payment=payment,
            registration=registration,
            method=method,
            gap=payment.created - registration.created_at,
        )

    return MatchResult(
        matches=[outcomes[p.intent_id] for p in ordered_payments],
        unused_registrations=[r for r in ordered_registrations if r.pk not in claims.pks],
    )
