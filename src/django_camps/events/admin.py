"""Django admin configuration for the events app."""

from django.contrib import admin

from django_camps.events.models import Event


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    """Admin interface for managing camps, clinics, and tournaments.

    The Stripe secret key is only editable in the collapsed "Stripe"
    fieldset so it is not shown at a glance.
    """

    list_display = ("name", "slug", "category", "start_date", "end_date", "is_active")
    list_filter = ("category", "is_active")
    search_fields = ("name", "slug", "location")
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ("created_at", "updated_at")
    fieldsets = (
        (
            None,
            {
                "fields": (
                    "name",
                    "slug",
                    "category",
                    "start_date",
                    "end_date",
                    "timezone",
                    "location",
                    "venue",
                    "base_price",
                    "is_active",
                ),
            },
        ),
        (
            "Stripe",
            {
                "classes": ("collapse",),
                "fields": ("stripe_secret_key",),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )
