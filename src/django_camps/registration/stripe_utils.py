"""Helpers for turning Stripe API values into database values, and key obfuscation for logging.

Stripe represents monetary amounts as integers in the smallest currency unit (e.g. cents
for USD) and timestamps as Unix epoch seconds. Most currencies are "normal-decimal" where
1 unit = 100 smallest units, but a subset of currencies are "zero-decimal" where the
integer amount *is* the unit amount.
"""

import datetime
from collections.abc import Mapping
from decimal import Decimal

_OBFUSCATE_VISIBLE_CHARS = 4

# Metadata keys the storefront has used over time for the event label.
EVENT_NAME_METADATA_KEYS: tuple[str, ...] = ("event_name", "eventName")

ZERO_DECIMAL_CURRENCIES: frozenset[str] = frozenset(
    {
        "BIF",
        "CLP",
        "DJF",
        "GNF",
        "JPY",
        "KMF",
        "KRW",
        "MGA",
        "PYG",
        "RWF",
        "UGX",
        "VND",
        "VUV",
        "XAF",
        "XOF",
        "XPF",
    }
)


def convert_amount_for_db(amount: int, currency: str) -> Decimal:
    """Convert an integer amount from the Stripe API to a Decimal for database storage.

    For normal-decimal currencies the integer is divided by 100 (e.g. ``1000`` becomes
    ``Decimal("10.00")``).  For zero-decimal currencies the integer is returned as-is
    wrapped in a Decimal.

    Args:
        amount: The integer amount in the smallest currency unit as returned by Stripe.
        currency: An ISO 4217 currency code (case-insensitive).

    Returns:
        The amount as a :class:`~decimal.Decimal` suitable for a Django ``DecimalField``.
    """
    if currency.upper() in ZERO_DECIMAL_CURRENCIES:
        return Decimal(str(amount))
    return Decimal(str(amount)) / 100


def timestamp_to_datetime(value: int) -> datetime.datetime:
    """Convert a Stripe epoch timestamp to an aware UTC datetime."""
    return datetime.datetime.fromtimestamp(value, tz=datetime.UTC)


def extract_event_name(metadata: Mapping[str, object] | None, default: str) -> str:
    """Return the event label stored in PaymentIntent metadata.

    Args:
        metadata: The ``metadata`` mapping of a PaymentIntent (may be ``None``).
        default: Label returned when no known key carries a non-blank value.
    """
    if metadata:
        for key in EVENT_NAME_METADATA_KEYS:
            value = metadata.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return default


def obfuscate_key(key: str) -> str:
    """Obfuscate an API key so it can be safely written to logs.

    Returns the last four characters of the key prefixed with ``"****"``.  If the key is
    shorter than four characters the entire value is masked and only ``"****"`` is
    returned.
    """
    if len(key) < _OBFUSCATE_VISIBLE_CHARS:
        return "****"
    return "****" + key[-_OBFUSCATE_VISIBLE_CHARS:]
