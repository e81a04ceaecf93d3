"""Reconciliation run and payment match models for django-camps."""

from django.db import models

from django_camps.reconciliation.matching import MatchMethod, Strategy


class ReconciliationRun(models.Model):
    """One pass of the matcher over the mirrored payments and registrations.

    Runs are kept so that results can be compared between strategies and
    audited later. ``applied`` records whether the run wrote payment status
    back onto the matched registrations.
    """

    strategy = models.CharField(
        max_length=30,
        choices=[(s.value, s.value.replace("_", " ").title()) for s in Strategy],
    )
    options = models.JSONField(blank=True, default=dict)
    event = models.ForeignKey(
        "camps_events.Event",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reconciliation_runs",
        help_text="When set, only this event's payments and registrations were considered.",
    )
    applied = models.BooleanField(default=False)
    payment_count = models.PositiveIntegerField(default=0)
    matched_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        get_latest_by = ["created_at", "id"]

    def __str__(self) -> str:
        return f"Run {self.pk} ({self.strategy}, {self.matched_count}/{self.payment_count})"

    @property
    def match_rate(self) -> float:
        """Return the fraction of payments paired with a registration."""
        if not self.payment_count:
            return 0.0
        return self.matched_count / self.payment_count


class PaymentMatch(models.Model):
    """The pairing recorded for one payment in a run."""

    run = models.ForeignKey(
        ReconciliationRun,
        on_delete=models.CASCADE,
        related_name="matches",
    )
    payment = models.ForeignKey(
        "camps_registration.StripePayment",
        on_delete=models.CASCADE,
        related_name="matches",
    )
    registration = models.ForeignKey(
        "camps_registration.Registration",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="matches",
    )
    method = models.CharField(
        max_length=20,
        choices=[(m.value, m.value.title()) for m in MatchMethod],
    )
    gap_seconds = models.IntegerField(
        null=True,
        blank=True,
        help_text="Seconds from registration to payment; negative when the registration came later.",
    )

    class Meta:
        ordering = ["payment__created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["run", "payment"],
                name="reconciliation_paymentmatch_unique_payment",
            ),
            models.UniqueConstraint(
                fields=["run", "registration"],
                condition=models.Q(registration__isnull=False),
                name="reconciliation_paymentmatch_unique_registration",
            ),
        ]

    def __str__(self) -> str:
        target = self.registration or "no registration"
        return f"{self.payment.stripe_payment_intent_id} -> {target} ({self.method})"
