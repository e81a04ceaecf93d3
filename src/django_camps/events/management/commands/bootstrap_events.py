"""Management command to bootstrap events from a TOML configuration file."""

from typing import Any

from django.core.management.base import BaseCommand, CommandError, CommandParser
from django.db import transaction

from django_camps.config_loader import load_events_config
from django_camps.events.models import Event

# Mapping from TOML short field names to Django model field names.
_EVENT_FIELD_MAP: dict[str, str] = {
    "name": "name",
    "slug": "slug",
    "category": "category",
    "start": "start_date",
    "end": "end_date",
    "timezone": "timezone",
    "location": "location",
    "venue": "venue",
    "price": "base_price",
}


def _map_fields(data: dict[str, Any], field_map: dict[str, str]) -> dict[str, Any]:
    """Map TOML config keys to Django model field names.

    Args:
        data: Raw config data with short field names.
        field_map: Mapping of config key -> model field name.

    Returns:
        Dict with model field names as keys.
    """
    result: dict[str, Any] = {}
    for config_key, model_field in field_map.items():
        if config_key in data:
            result[model_field] = data[config_key]
    return result


class Command(BaseCommand):
    """Bootstrap events from a TOML configuration file.

    Usage::

        manage.py bootstrap_events --config events.toml
        manage.py bootstrap_events --config events.toml --update
        manage.py bootstrap_events --config events.toml --dry-run
    """

    help = "Create or update camps, clinics, and tournaments from a TOML config file."

    def add_arguments(self, parser: CommandParser) -> None:
        """Define the command-line arguments accepted by this command.

        Args:
            parser: The argument parser to configure.
        """
        parser.add_argument(
            "--config",
            required=True,
            help="Path to the events TOML configuration file.",
        )
        parser.add_argument(
            "--update",
            action="store_true",
            default=False,
            help="Update existing events instead of failing on duplicate slugs.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            default=False,
            help="Validate the config and print what would be created without saving.",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the bootstrap command."""
        config_path: str = options["config"]
        update: bool = options["update"]
        dry_run: bool = options["dry_run"]

        try:
            events_data = load_events_config(config_path)
        except (FileNotFoundError, TypeError, ValueError) as exc:
            raise CommandError(str(exc)) from exc

        if dry_run:
            self.stdout.write(self.style.NOTICE("Dry run: no changes will be saved."))
            for item in events_data:
                self.stdout.write(f"  {item['slug']}: {item['name']} ({item['start']} to {item['end']})")
            return

        created = 0
        updated = 0
        with transaction.atomic():
            for item in events_data:
                if self._bootstrap_event(item, update=update):
                    created += 1
                else:
                    updated += 1

        self.stdout.write(self.style.SUCCESS(f"Created {created} events, updated {updated} events"))

    def _bootstrap_event(self, data: dict[str, Any], *, update: bool) -> bool:
        """Create or update one Event record.

        Returns:
            ``True`` when a new event was created, ``False`` when updated.

        Raises:
            CommandError: If the slug exists and ``update`` is ``False``.
        """
        slug = data["slug"]
        fields = _map_fields(data, _EVENT_FIELD_MAP)
        fields.pop("slug", None)

        existing = Event.objects.filter(slug=slug).first()
        if existing and not update:
            raise CommandError(f"Event with slug '{slug}' already exists. Use --update to update it.")

        if existing:
            for attr, value in fields.items():
                setattr(existing, attr, value)
            existing.save()
            self.stdout.write(self.style.SUCCESS(f"  Updated event: {existing.name}"))
            return False

        event = Event.objects.create(slug=slug, **fields)
        self.stdout.write(self.style.SUCCESS(f"  Created event: {event.name}"))
        return True
