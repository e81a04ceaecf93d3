"""Django admin configuration for the reconciliation app."""

from django.contrib import admin
from django.http import HttpRequest

from django_camps.reconciliation.models import PaymentMatch, ReconciliationRun


class PaymentMatchInline(admin.TabularInline):
    """Read-only display of the matches recorded for a run."""

    model = PaymentMatch
    extra = 0
    can_delete = False
    readonly_fields = ("payment", "registration", "method", "gap_seconds")

    def has_add_permission(self, request: HttpRequest, obj: ReconciliationRun | None = None) -> bool:  # noqa: ARG002
        """Matches are produced by the matcher only."""
        return False


@admin.register(ReconciliationRun)
class ReconciliationRunAdmin(admin.ModelAdmin):
    """Admin interface for browsing reconciliation runs."""

    list_display = ("id", "strategy", "event", "matched_count", "payment_count", "applied", "created_at")
    list_filter = ("strategy", "applied", "event")
    readonly_fields = ("strategy", "options", "event", "applied", "payment_count", "matched_count", "created_at")
    inlines = (PaymentMatchInline,)

    def has_add_permission(self, request: HttpRequest) -> bool:  # noqa: ARG002
        """Runs are created by the ``reconcile_payments`` command."""
        return False
