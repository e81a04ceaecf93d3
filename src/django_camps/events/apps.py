"""Django app configuration for the events app."""

from django.apps import AppConfig


class DjangoCampsEventsConfig(AppConfig):
    """Configuration for the events app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "django_camps.events"
    label = "camps_events"
    verbose_name = "Events"
