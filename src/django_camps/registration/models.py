"""Registration and Stripe payment mirror models for django-camps."""

from django.db import models
from django.utils import timezone


class Registration(models.Model):
    """A camp or clinic sign-up form submission.

    Rows are often imported from older systems, so ``created_at`` is a
    plain settable timestamp rather than ``auto_now_add``: reconciliation
    depends on it reflecting when the form was actually submitted.
    """

    class RegistrationType(models.TextChoices):
        """How much of the event the registration covers."""

        FULL = "full", "Full event"
        SINGLE_DAY = "single_day", "Single day"
        TEAM = "team", "Team"

    class PaymentStatus(models.TextChoices):
        """Payment state as known to this database."""

        PENDING = "pending", "Pending"
        PAID = "paid", "Paid"
        FAILED = "failed", "Failed"
        UNKNOWN = "unknown", "Unknown"

    event = models.ForeignKey(
        "camps_events.Event",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="registrations",
    )
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    contact_name = models.CharField(
        max_length=300,
        blank=True,
        default="",
        help_text="Name of the camper, when different from the person filling the form.",
    )
    email = models.EmailField()
    phone = models.CharField(max_length=50, blank=True, default="")
    school_name = models.CharField(max_length=200, blank=True, default="")
    club_name = models.CharField(max_length=200, blank=True, default="")
    registration_type = models.CharField(
        max_length=20,
        choices=RegistrationType.choices,
        default=RegistrationType.FULL,
    )
    grade = models.CharField(max_length=20, blank=True, default="")
    shirt_size = models.CharField(max_length=20, blank=True, default="")
    stripe_payment_intent_id = models.CharField(max_length=200, blank=True, default="", db_index=True)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return f"{self.full_name} <{self.email}>"

    @property
    def full_name(self) -> str:
        """Return the registrant's first and last name."""
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def event_label(self) -> str:
        """Return the event name, or an empty string for legacy rows without one."""
        return self.event.name if self.event is not None else ""


class StripePayment(models.Model):
    """A local mirror of one Stripe PaymentIntent.

    Rows are upserted by ``PaymentIntentSyncService`` and never created from
    the storefront. ``amount`` is stored in major currency units.
    """

    class Status(models.TextChoices):
        """PaymentIntent statuses as reported by Stripe."""

        REQUIRES_PAYMENT_METHOD = "requires_payment_method", "Requires payment method"
        REQUIRES_CONFIRMATION = "requires_confirmation", "Requires confirmation"
        REQUIRES_ACTION = "requires_action", "Requires action"
        PROCESSING = "processing", "Processing"
        REQUIRES_CAPTURE = "requires_capture", "Requires capture"
        CANCELED = "canceled", "Canceled"
        SUCCEEDED = "succeeded", "Succeeded"

    stripe_payment_intent_id = models.CharField(max_length=200, unique=True)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default="usd")
    status = models.CharField(max_length=30, choices=Status.choices)
    event_name = models.CharField(max_length=300, blank=True, default="")
    receipt_email = models.EmailField(blank=True, default="")
    stripe_customer_id = models.CharField(max_length=200, blank=True, default="")
    description = models.TextField(blank=True, default="")
    metadata = models.JSONField(blank=True, default=dict)
    created_at = models.DateTimeField(
        db_index=True,
        help_text="When the PaymentIntent was created on Stripe.",
    )
    synced_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at", "stripe_payment_intent_id"]

    def __str__(self) -> str:
        return f"{self.stripe_payment_intent_id} ({self.status})"

    @property
    def is_succeeded(self) -> bool:
        """Return whether Stripe reports the intent as succeeded."""
        return self.status == self.Status.SUCCEEDED
