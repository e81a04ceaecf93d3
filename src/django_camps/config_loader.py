"""TOML loader for event bootstrap configuration.

Loads and validates an events TOML file so that camps, clinics, and
tournaments can be created programmatically::

    [[events]]
    name = "Birmingham Slam Camp"
    category = "camp"
    start = 2025-06-19
    end = 2025-06-21
    timezone = "America/Chicago"
    location = "Birmingham, AL"
    price = 249.00
"""

import re
import tomllib
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

_REQUIRED_EVENT_FIELDS: set[str] = {"name", "start", "end"}
_CATEGORIES: frozenset[str] = frozenset({"camp", "clinic", "tournament"})

_SLUG_RE = re.compile(r"[^\w\s-]")
_WHITESPACE_RE = re.compile(r"[-\s]+")


def _slugify(value: str) -> str:
    """Convert a string to a URL-friendly slug.

    Args:
        value: The string to slugify.

    Returns:
        Lowercase, hyphen-separated slug.
    """
    value = _SLUG_RE.sub("", value.lower())
    return _WHITESPACE_RE.sub("-", value).strip("-")


def _validate_mapping(mapping: object, required: set[str], label: str) -> None:
    """Validate that *mapping* is a dict containing all *required* keys.

    Raises:
        TypeError: If *mapping* is not a dict.
        ValueError: If *mapping* is missing required keys.
    """
    if not isinstance(mapping, dict):
        msg = f"{label} must be a mapping, got {type(mapping).__name__}"
        raise TypeError(msg)
    missing = required - mapping.keys()
    if missing:
        msg = f"{label} is missing required fields: {', '.join(sorted(missing))}"
        raise ValueError(msg)


def _validate_event(item: dict[str, Any], label: str) -> None:
    """Check dates, category, and price on a single event mapping."""
    start, end = item["start"], item["end"]
    if not isinstance(start, date) or not isinstance(end, date):
        msg = f"{label}.start and {label}.end must be dates"
        raise ValueError(msg)
    if start > end:
        msg = f"{label}.start must not be after {label}.end"
        raise ValueError(msg)

    category = item.get("category", "camp")
    if category not in _CATEGORIES:
        msg = f"{label}.category must be one of: {', '.join(sorted(_CATEGORIES))}"
        raise ValueError(msg)

    price = item.get("price", Decimal("0"))
    if isinstance(price, int):
        price = Decimal(price)
        item["price"] = price
    if not isinstance(price, Decimal) or price < 0:
        msg = f"{label}.price must be a non-negative number"
        raise ValueError(msg)


def _validate_unique_slugs(items: list[dict[str, Any]], label: str) -> None:
    """Ensure each item has a unique, non-empty string slug."""
    seen: set[str] = set()
    duplicates: set[str] = set()

    for idx, item in enumerate(items):
        slug = item.get("slug")
        if not isinstance(slug, str) or not slug:
            msg = f"{label}[{idx}].slug must be a non-empty string"
            raise ValueError(msg)
        if slug in seen:
            duplicates.add(slug)
        seen.add(slug)

    if duplicates:
        msg = f"{label} has duplicate slugs: {', '.join(sorted(duplicates))}"
        raise ValueError(msg)


def load_events_config(path: str | Path) -> list[dict[str, Any]]:
    """Load and validate an events TOML configuration file.

    Args:
        path: Filesystem path to the TOML file.

    Returns:
        The list of ``[[events]]`` mappings with native types
        (``datetime.date`` for dates, ``Decimal`` for prices). Slugs are
        auto-generated from ``name`` when not explicitly provided.

    Raises:
        FileNotFoundError: If *path* does not exist.
        TypeError: If an entry is not a table.
        ValueError: If required fields are missing, values are invalid, or
            the file is not valid TOML.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Events config file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open("rb") as fh:
        try:
            data: dict[str, Any] = tomllib.load(fh, parse_float=Decimal)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {path}: {exc}"
            raise ValueError(msg) from exc

    events = data.get("events")
    if not isinstance(events, list) or not events:
        msg = "Missing required [[events]] entries in config file"
        raise ValueError(msg)

    for idx, item in enumerate(events):
        label = f"events[{idx}]"
        _validate_mapping(item, _REQUIRED_EVENT_FIELDS, label)
        _validate_event(item, label)
        if "slug" not in item:
            item["slug"] = _slugify(item["name"])

    _validate_unique_slugs(events, "events")
    return events
