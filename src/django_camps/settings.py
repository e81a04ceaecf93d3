"""Typed configuration for django-camps.

Reads a single ``DJANGO_CAMPS`` dict from Django settings and exposes it as
composed, frozen dataclasses with sensible defaults.

Usage::

    from django_camps.settings import get_config

    config = get_config()
    config.stripe.secret_key
    config.reconciliation.strategy
    config.currency
"""

import functools
from collections.abc import Mapping
from dataclasses import dataclass, field

from django.conf import settings
from django.test.signals import setting_changed

from django_camps.reconciliation.matching import Strategy

_STRATEGY_NAMES: frozenset[str] = frozenset(s.value for s in Strategy)
_MAX_STRIPE_PAGE_SIZE = 100


@dataclass(frozen=True, slots=True)
class StripeConfig:
    """Stripe account configuration used for reading payment intents."""

    secret_key: str | None = None
    api_version: str = "2024-12-18"
    lookback_days: int = 360
    page_size: int = 100


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    """Defaults for matching payments to registrations."""

    strategy: str = "sequential"
    event_mismatch_penalty_minutes: int = 60
    max_gap_hours: int | None = None
    use_anchors: bool = True


@dataclass(frozen=True, slots=True)
class CampsConfig:
    """Top-level django-camps configuration."""

    stripe: StripeConfig = field(default_factory=StripeConfig)
    reconciliation: ReconciliationConfig = field(default_factory=ReconciliationConfig)
    currency: str = "USD"
    currency_symbol: str = "$"
    unknown_event_label: str = "Unknown Event"


@functools.lru_cache(maxsize=1)
def get_config() -> CampsConfig:
    """Build and return the camps configuration.

    Reads ``settings.DJANGO_CAMPS`` (a plain dict) and returns a frozen
    :class:`CampsConfig`.  The result is cached; the cache is cleared
    automatically when Django's ``setting_changed`` signal fires (e.g. inside
    ``override_settings``).
    """
    raw = getattr(settings, "DJANGO_CAMPS", {})
    if not isinstance(raw, Mapping):
        msg = "DJANGO_CAMPS must be a mapping (dict-like object)"
        raise TypeError(msg)
    raw_data = dict(raw)

    stripe_data = raw_data.pop("stripe", {})
    reconciliation_data = raw_data.pop("reconciliation", {})
    if not isinstance(stripe_data, Mapping):
        msg = "DJANGO_CAMPS['stripe'] must be a mapping (dict-like object)"
        raise TypeError(msg)
    if not isinstance(reconciliation_data, Mapping):
        msg = "DJANGO_CAMPS['reconciliation'] must be a mapping (dict-like object)"
        raise TypeError(msg)

    config = CampsConfig(
        stripe=StripeConfig(**dict(stripe_data)),
        reconciliation=ReconciliationConfig(**dict(reconciliation_data)),
        **raw_data,
    )
    _validate_camps_config(config)
    return config


def _validate_camps_config(config: CampsConfig) -> None:
    """Validate high-impact configuration values with clear error messages."""
    for name in ("currency", "currency_symbol", "unknown_event_label"):
        value = getattr(config, name)
        if not isinstance(value, str) or not value.strip():
            msg = f"DJANGO_CAMPS['{name}'] must be a non-empty string"
            raise ValueError(msg)

    stripe_config = config.stripe
    if not isinstance(stripe_config.lookback_days, int) or stripe_config.lookback_days <= 0:
        msg = "DJANGO_CAMPS['stripe']['lookback_days'] must be a positive integer"
        raise ValueError(msg)
    if not isinstance(stripe_config.page_size, int) or not 1 <= stripe_config.page_size <= _MAX_STRIPE_PAGE_SIZE:
        msg = f"DJANGO_CAMPS['stripe']['page_size'] must be an integer between 1 and {_MAX_STRIPE_PAGE_SIZE}"
        raise ValueError(msg)

    recon = config.reconciliation
    if recon.strategy not in _STRATEGY_NAMES:
        msg = (
            f"DJANGO_CAMPS['reconciliation']['strategy'] must be one of: {', '.join(sorted(_STRATEGY_NAMES))}"
        )
        raise ValueError(msg)
    if not isinstance(recon.event_mismatch_penalty_minutes, int) or recon.event_mismatch_penalty_minutes < 0:
        msg = "DJANGO_CAMPS['reconciliation']['event_mismatch_penalty_minutes'] must be a non-negative integer"
        raise ValueError(msg)
    if recon.max_gap_hours is not None and (not isinstance(recon.max_gap_hours, int) or recon.max_gap_hours <= 0):
        msg = "DJANGO_CAMPS['reconciliation']['max_gap_hours'] must be a positive integer or None"
        raise ValueError(msg)
    if not isinstance(recon.use_anchors, bool):
        msg = "DJANGO_CAMPS['reconciliation']['use_anchors'] must be a boolean"
        raise TypeError(msg)


def _clear_config_cache(*, setting: str, **kwargs: object) -> None:  # noqa: ARG001
    """Clear the cached config when Django settings change during tests."""
    if setting == "DJANGO_CAMPS":
        get_config.cache_clear()


setting_changed.connect(_clear_config_cache, dispatch_uid="django_camps.settings.clear_config_cache")
