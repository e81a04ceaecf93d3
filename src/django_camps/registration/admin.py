"""Django admin configuration for the registration app."""

from django.contrib import admin
from django.http import HttpRequest

from django_camps.registration.models import Registration, StripePayment


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    """Admin interface for camp and clinic registrations.

    Provides filtering by event and payment status, and search across the
    contact fields staff use when chasing a payment.
    """

    list_display = ("full_name", "email", "event", "registration_type", "payment_status", "created_at")
    list_filter = ("event", "payment_status", "registration_type")
    search_fields = ("first_name", "last_name", "contact_name", "email", "phone", "stripe_payment_intent_id")
    date_hierarchy = "created_at"
    readonly_fields = ("updated_at",)


@admin.register(StripePayment)
class StripePaymentAdmin(admin.ModelAdmin):
    """Read-only admin for mirrored Stripe payment intents.

    Rows are owned by the sync command, so add and change permissions are
    disabled.
    """

    list_display = ("stripe_payment_intent_id", "event_name", "amount", "currency", "status", "created_at")
    list_filter = ("status", "currency")
    search_fields = ("stripe_payment_intent_id", "event_name", "receipt_email", "stripe_customer_id")
    date_hierarchy = "created_at"

    def has_add_permission(self, request: HttpRequest) -> bool:  # noqa: ARG002
        """Disable manual creation."""
        return False

    def has_change_permission(self, request: HttpRequest, obj: StripePayment | None = None) -> bool:  # noqa: ARG002
        """Disable editing; rows are refreshed from Stripe."""
        return False
