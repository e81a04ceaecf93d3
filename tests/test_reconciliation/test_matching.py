"""Tests for the pure matcher in django_camps.reconciliation.matching."""

import datetime
from decimal import Decimal

import pytest

from django_camps.reconciliation.matching import (
    MatchMethod,
    MatchOptions,
    PaymentCandidate,
    RegistrationCandidate,
    Strategy,
    match_payments,
)

BASE = datetime.datetime(2025, 6, 1, 12, 0, tzinfo=datetime.UTC)
BIRMINGHAM = "Birmingham Slam Camp"
TEXAS = "Texas Recruiting Clinic"


def at(minutes: float) -> datetime.datetime:
    return BASE + datetime.timedelta(minutes=minutes)


def pay(intent_id, minutes, *, event=BIRMINGHAM, amount="249.00"):
    return PaymentCandidate(intent_id=intent_id, created=at(minutes), amount=Decimal(amount), event_name=event)


def reg(pk, minutes, *, event=BIRMINGHAM, email=None, intent=""):
    return RegistrationCandidate(
        pk=pk,
        created_at=at(minutes),
        event_name=event,
        email=email if email is not None else f"camper{pk}@example.com",
        stripe_payment_intent_id=intent,
    )


def pairs(result):
    return [(m.payment.intent_id, m.registration.pk if m.registration else None) for m in result.matches]


STRICT = MatchOptions.for_strategy(Strategy.STRICT)
SEQUENTIAL = MatchOptions.for_strategy(Strategy.SEQUENTIAL)
UNIQUE = MatchOptions.for_strategy(Strategy.UNIQUE_CUSTOMER)
EVENT_FIRST = MatchOptions.for_strategy(Strategy.EVENT_FIRST)


# =============================================================================
# TestStrict
# =============================================================================


@pytest.mark.unit
class TestStrict:
    def test_each_payment_takes_immediately_prior_registration(self):
        result = match_payments(
            [pay("pi_a", 6), pay("pi_b", 11)],
            [reg(1, 0), reg(2, 5), reg(3, 10)],
            STRICT,
        )

        assert pairs(result) == [("pi_a", 2), ("pi_b", 3)]
        assert all(m.method == MatchMethod.PROXIMITY for m in result.matches)
        assert [r.pk for r in result.unused_registrations] == [1]

    def test_registration_is_never_reused(self):
        result = match_payments(
            [pay("pi_a", 6), pay("pi_b", 7)],
            [reg(1, 0), reg(2, 5)],
            STRICT,
        )

        assert pairs(result) == [("pi_a", 2), ("pi_b", 1)]

    def test_payment_before_every_registration_is_unmatched(self):
        result = match_payments([pay("pi_a", 0)], [reg(1, 10)], STRICT)

        assert pairs(result) == [("pi_a", None)]
        assert result.matches[0].method == MatchMethod.UNMATCHED
        assert result.matches[0].gap is None
        assert result.unmatched_payments == [result.matches[0].payment]

    def test_registration_at_same_instant_counts_as_prior(self):
        result = match_payments([pay("pi_a", 5)], [reg(1, 5)], STRICT)

        assert pairs(result) == [("pi_a", 1)]
        assert result.matches[0].gap == datetime.timedelta(0)

    def test_records_gap_between_registration_and_payment(self):
        result = match_payments([pay("pi_a", 12.5)], [reg(1, 10)], STRICT)

        assert result.matches[0].gap == datetime.timedelta(minutes=2, seconds=30)

    def test_ignores_event_labels(self):
        result = match_payments(
            [pay("pi_a", 60, event=BIRMINGHAM)],
            [reg(1, 0, event=BIRMINGHAM), reg(2, 59, event=TEXAS)],
            STRICT,
        )

        assert pairs(result) == [("pi_a", 2)]

    def test_ties_go_to_lower_primary_key(self):
        result = match_payments([pay("pi_a", 10)], [reg(7, 5), reg(3, 5)], STRICT)

        assert pairs(result) == [("pi_a", 3)]

    def test_results_follow_payment_chronology_regardless_of_input_order(self):
        result = match_payments(
            [pay("pi_late", 30), pay("pi_early", 10)],
            [reg(2, 20), reg(1, 0)],
            STRICT,
        )

        assert pairs(result) == [("pi_early", 1), ("pi_late", 2)]


# =============================================================================
# TestSequential
# =============================================================================


@pytest.mark.unit
class TestSequential:
    def test_prefers_same_event_within_penalty(self):
        result = match_payments(
            [pay("pi_a", 60, event=BIRMINGHAM)],
            [reg(1, 20, event=BIRMINGHAM), reg(2, 50, event=TEXAS)],
            SEQUENTIAL,
        )

        # Texas: 10 min + 60 min penalty = 70 > Birmingham's 40 min.
        assert pairs(result) == [("pi_a", 1)]

    def test_other_event_wins_when_same_event_is_much_older(self):
        result = match_payments(
            [pay("pi_a", 60, event=BIRMINGHAM)],
            [reg(1, -20, event=BIRMINGHAM), reg(2, 50, event=TEXAS)],
            SEQUENTIAL,
        )

        assert pairs(result) == [("pi_a", 2)]

    def test_event_labels_match_by_containment_and_case(self):
        result = match_payments(
            [pay("pi_a", 60, event="birmingham slam camp 2025")],
            [reg(1, 10, event=BIRMINGHAM), reg(2, 55, event=TEXAS)],
            SEQUENTIAL,
        )

        assert pairs(result) == [("pi_a", 1)]

    def test_blank_event_label_carries_no_penalty(self):
        result = match_payments(
            [pay("pi_a", 60, event=BIRMINGHAM)],
            [reg(1, 10, event=BIRMINGHAM), reg(2, 55, event="")],
            SEQUENTIAL,
        )

        assert pairs(result) == [("pi_a", 2)]

    def test_falls_back_to_earliest_unused_registration(self):
        result = match_payments([pay("pi_a", 0)], [reg(1, 30), reg(2, 10)], SEQUENTIAL)

        match = result.matches[0]
        assert match.registration.pk == 2
        assert match.method == MatchMethod.FALLBACK
        assert match.gap == datetime.timedelta(minutes=-10)

    def test_unmatched_once_registrations_run_out(self):
        result = match_payments([pay("pi_a", 10), pay("pi_b", 20)], [reg(1, 0)], SEQUENTIAL)

        assert pairs(result) == [("pi_a", 1), ("pi_b", None)]


# =============================================================================
# TestEventFirst
# =============================================================================


@pytest.mark.unit
class TestEventFirst:
    def test_same_event_wins_regardless_of_gap(self):
        result = match_payments(
            [pay("pi_a", 600, event=TEXAS)],
            [reg(1, 0, event=TEXAS), reg(2, 599, event=BIRMINGHAM)],
            EVENT_FIRST,
        )

        assert pairs(result) == [("pi_a", 1)]

    def test_uses_other_events_when_no_same_event_candidate(self):
        result = match_payments(
            [pay("pi_a", 600, event=TEXAS)],
            [reg(1, 0, event=BIRMINGHAM), reg(2, 599, event=BIRMINGHAM)],
            EVENT_FIRST,
        )

        assert pairs(result) == [("pi_a", 2)]


# =============================================================================
# TestUniqueCustomer
# =============================================================================


@pytest.mark.unit
class TestUniqueCustomer:
    def test_skips_registrations_whose_email_was_credited(self):
        result = match_payments(
            [pay("pi_a", 6), pay("pi_b", 7)],
            [
                reg(1, 0, email="parent@example.com"),
                reg(2, 5, email="Parent@Example.com "),
                reg(3, -10, email="other@example.com"),
            ],
            UNIQUE,
        )

        assert pairs(result) == [("pi_a", 2), ("pi_b", 3)]
        assert [r.pk for r in result.unused_registrations] == [1]

    def test_blank_emails_do_not_block_each_other(self):
        result = match_payments(
            [pay("pi_a", 6), pay("pi_b", 7)],
            [reg(1, 0, email=""), reg(2, 5, email="")],
            UNIQUE,
        )

        assert pairs(result) == [("pi_a", 2), ("pi_b", 1)]


# =============================================================================
# TestAnchors
# =============================================================================


@pytest.mark.unit
class TestAnchors:
    def test_anchor_reserves_registration_for_its_payment(self):
        registrations = [reg(1, 0, intent="pi_late")]
        payments = [pay("pi_early", 1), pay("pi_late", 2)]

        anchored = match_payments(payments, registrations, STRICT)
        plain = match_payments(payments, registrations, MatchOptions.for_strategy(Strategy.STRICT, use_anchors=False))

        assert pairs(anchored) == [("pi_early", None), ("pi_late", 1)]
        assert anchored.matches[1].method == MatchMethod.DIRECT
        assert pairs(plain) == [("pi_early", 1), ("pi_late", None)]

    def test_anchor_may_point_at_later_registration(self):
        result = match_payments([pay("pi_a", 0)], [reg(1, 15, intent="pi_a")], STRICT)

        assert result.matches[0].method == MatchMethod.DIRECT
        assert result.matches[0].gap == datetime.timedelta(minutes=-15)

    def test_anchor_claims_email_for_unique_customer(self):
        result = match_payments(
            [pay("pi_a", 10), pay("pi_b", 20)],
            [reg(1, 5, email="same@example.com", intent="pi_b"), reg(2, 8, email="same@example.com")],
            UNIQUE,
        )

        assert pairs(result) == [("pi_a", None), ("pi_b", 1)]

    def test_only_earliest_registration_with_an_intent_is_an_anchor(self):
        result = match_payments(
            [pay("pi_a", 30)],
            [reg(1, 0, intent="pi_a"), reg(2, 10, intent="pi_a")],
            STRICT,
        )

        assert pairs(result) == [("pi_a", 1)]
        assert [r.pk for r in result.unused_registrations] == [2]


# =============================================================================
# TestOptions
# =============================================================================


@pytest.mark.unit
class TestOptions:
    def test_max_gap_excludes_old_registrations(self):
        options = MatchOptions.for_strategy(Strategy.STRICT, max_gap=datetime.timedelta(hours=1))

        result = match_payments([pay("pi_a", 180)], [reg(1, 0)], options)

        assert pairs(result) == [("pi_a", None)]

    def test_max_gap_also_limits_fallback(self):
        options = MatchOptions.for_strategy(Strategy.SEQUENTIAL, max_gap=datetime.timedelta(hours=1))

        result = match_payments([pay("pi_a", 0)], [reg(1, -30 * 24 * 60)], options)

        assert result.matches[0].method == MatchMethod.UNMATCHED
        assert result.matches[0].registration is None

    def test_fallback_takes_later_registration_within_max_gap(self):
        options = MatchOptions.for_strategy(Strategy.SEQUENTIAL, max_gap=datetime.timedelta(hours=1))

        result = match_payments([pay("pi_a", 0)], [reg(1, 30), reg(2, 24 * 60)], options)

        assert pairs(result) == [("pi_a", 1)]
        assert result.matches[0].method == MatchMethod.FALLBACK

    def test_for_strategy_rejects_unknown_name(self):
        with pytest.raises(ValueError, match="not a valid Strategy"):
            MatchOptions.for_strategy("closest")

    def test_for_strategy_accepts_string_value(self):
        assert MatchOptions.for_strategy("unique_customer").unique_email is True

    def test_sequential_preset(self):
        options = MatchOptions.for_strategy("sequential", event_mismatch_penalty=datetime.timedelta(minutes=30))

        assert options.prefer_same_event is True
        assert options.fallback_to_earliest_unused is True
        assert options.event_mismatch_penalty == datetime.timedelta(minutes=30)

    def test_to_dict_is_json_friendly(self):
        options = MatchOptions.for_strategy(Strategy.SEQUENTIAL, max_gap=datetime.timedelta(hours=2))

        assert options.to_dict() == {
            "use_anchors": True,
            "prefer_same_event": True,
            "event_first": False,
            "event_mismatch_penalty_seconds": 3600,
            "unique_email": False,
            "fallback_to_earliest_unused": True,
            "max_gap_seconds": 7200,
        }

    def test_default_options_are_strict(self):
        result = match_payments([pay("pi_a", 0)], [reg(1, 10)])

        assert pairs(result) == [("pi_a", None)]


# =============================================================================
# TestInputValidation
# =============================================================================


@pytest.mark.unit
class TestInputValidation:
    def test_rejects_duplicate_payment_intents(self):
        with pytest.raises(ValueError, match="Duplicate payment intent ID"):
            match_payments([pay("pi_a", 0), pay("pi_a", 5)], [])

    def test_rejects_duplicate_registration_keys(self):
        with pytest.raises(ValueError, match="Duplicate registration key"):
            match_payments([], [reg(1, 0), reg(1, 5)])

    def test_empty_inputs(self):
        result = match_payments([], [])

        assert result.matches == []
        assert result.unused_registrations == []


@pytest.mark.unit
@pytest.mark.parametrize("strategy", list(Strategy))
def test_no_registration_is_claimed_twice(strategy):
    registrations = [reg(pk, (pk * 7) % 50, event=BIRMINGHAM if pk % 2 else TEXAS) for pk in range(1, 21)]
    payments = [pay(f"pi_{n:02d}", (n * 11) % 60, event=TEXAS if n % 3 else BIRMINGHAM) for n in range(1, 31)]

    result = match_payments(payments, registrations, MatchOptions.for_strategy(strategy))

    claimed = [m.registration.pk for m in result.matched]
    assert len(claimed) == len(set(claimed))
    assert len(result.matches) == len(payments)
    assert len(claimed) + len(result.unused_registrations) == len(registrations)
