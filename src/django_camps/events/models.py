"""Event model for django-camps."""

from django.db import models
from encrypted_fields import EncryptedCharField

from django_camps.events.utils import event_labels_match


class Event(models.Model):
    """A camp, clinic, or tournament people register for.

    The central model the registration and reconciliation apps reference.
    An event may carry its own Stripe secret key when its payments were
    collected on a separate Stripe account.
    """

    class Category(models.TextChoices):
        """Kinds of events the business runs."""

        CAMP = "camp", "Camp"
        CLINIC = "clinic", "Clinic"
        TOURNAMENT = "tournament", "Tournament"

    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        default=Category.CAMP,
    )
    start_date = models.DateField()
    end_date = models.DateField()
    timezone = models.CharField(max_length=100, default="America/New_York")
    location = models.CharField(max_length=300, blank=True, default="")
    venue = models.CharField(max_length=300, blank=True, default="")
    base_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    stripe_secret_key = EncryptedCharField(max_length=200, blank=True, null=True, default=None)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-start_date"]

    def __str__(self) -> str:
        return self.name

    def matches_name(self, label: str | None) -> bool:
        """Return whether a free-text event label refers to this event.

        Stripe metadata carries whatever label the checkout form sent, so the
        comparison is case-insensitive and accepts containment either way
        ("Birmingham Slam Camp" matches "birmingham slam camp 2025").
        """
        return event_labels_match(self.name, label)
