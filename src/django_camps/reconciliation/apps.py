"""Django app configuration for the reconciliation app."""

from django.apps import AppConfig


class DjangoCampsReconciliationConfig(AppConfig):
    """Configuration for the reconciliation app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "django_camps.reconciliation"
    label = "camps_reconciliation"
    verbose_name = "Reconciliation"
