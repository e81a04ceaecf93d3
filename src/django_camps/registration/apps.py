"""Django app configuration for the registration app."""

from django.apps import AppConfig


class DjangoCampsRegistrationConfig(AppConfig):
    """Configuration for the registration app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "django_camps.registration"
    label = "camps_registration"
    verbose_name = "Registration"
