"""Typed configuration for django-club.

Reads a single ``DJANGO_CLUB`` dict from Django settings and exposes it as
composed, frozen dataclasses with sensible defaults.

Usage::

    from django_club.settings import get_config

    config = get_config()
    config.stripe.secret_key
    config.membership.unit_amount
    config.frontend_url
"""

import functools
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.test.signals import setting_changed

MEMBERSHIP_INTERVALS: frozenset[str] = frozenset({"day", "week", "month", "year"})


@dataclass(frozen=True, slots=True)
class StripeConfig:
    """Stripe payment gateway configuration.

    ``allow_unsigned_webhooks`` only matters when ``webhook_secret`` is empty.
    It lets a local development server accept raw webhook payloads forwarded
    without a signature and must stay off in production.
    """

    secret_key: str | None = None
    publishable_key: str | None = None
    webhook_secret: str | None = None
    api_version: str = "2024-12-18"
    webhook_tolerance: int = 300
    allow_unsigned_webhooks: bool = False


@dataclass(frozen=True, slots=True)
class MembershipConfig:
    """The flat recurring membership price charged at checkout."""

    product_name: str = "Club Membership"
    unit_amount: Decimal = Decimal("50.00")
    currency: str = "USD"
    interval: str = "month"


@dataclass(frozen=True, slots=True)
class SettlementConfig:
    """Webhook settlement behaviour.

    With ``deduplicate`` on, Stripe events are processed once per event id and
    at most one roster Player is derived per Registration. With it off, every
    delivery re-runs activation and inserts another Player.
    """

    deduplicate: bool = True


@dataclass(frozen=True, slots=True)
class ClubConfig:
    """Top-level django-club configuration."""

    stripe: StripeConfig = field(default_factory=StripeConfig)
    membership: MembershipConfig = field(default_factory=MembershipConfig)
    settlement: SettlementConfig = field(default_factory=SettlementConfig)
    frontend_url: str = "http://localhost:5173"
    success_path: str = "/dashboard?success=true"
    cancel_path: str = "/register?canceled=true"
    upload_max_bytes: int = 10 * 1024 * 1024


@functools.lru_cache(maxsize=1)
def get_config() -> ClubConfig:
    """Build and return the club configuration.

    Reads ``settings.DJANGO_CLUB`` (a plain dict) and returns a frozen
    :class:`ClubConfig`.  The result is cached; the cache is cleared
    automatically when Django's ``setting_changed`` signal fires (e.g. inside
    ``override_settings``).
    """
    raw = getattr(settings, "DJANGO_CLUB", {})
    if not isinstance(raw, Mapping):
        msg = "DJANGO_CLUB must be a mapping (dict-like object)"
        raise TypeError(msg)
    raw_data = dict(raw)

    stripe_data = raw_data.pop("stripe", {})
    membership_data = raw_data.pop("membership", {})
    settlement_data = raw_data.pop("settlement", {})
    if not isinstance(stripe_data, Mapping):
        msg = "DJANGO_CLUB['stripe'] must be a mapping (dict-like object)"
        raise TypeError(msg)
    if not isinstance(membership_data, Mapping):
        msg = "DJANGO_CLUB['membership'] must be a mapping (dict-like object)"
        raise TypeError(msg)
    if not isinstance(settlement_data, Mapping):
        msg = "DJANGO_CLUB['settlement'] must be a mapping (dict-like object)"
        raise TypeError(msg)

    membership_kwargs = dict(membership_data)
    if "unit_amount" in membership_kwargs:
        try:
            membership_kwargs["unit_amount"] = Decimal(str(membership_kwargs["unit_amount"]))
        except InvalidOperation:
            msg = "DJANGO_CLUB['membership']['unit_amount'] must be a decimal amount"
            raise ValueError(msg) from None

    config = ClubConfig(
        stripe=StripeConfig(**dict(stripe_data)),
        membership=MembershipConfig(**membership_kwargs),
        settlement=SettlementConfig(**dict(settlement_data)),
        **raw_data,
    )
    _validate_club_config(config)
    return config


def _validate_club_config(config: ClubConfig) -> None:
    """Validate high-impact configuration values with clear error messages."""
    if config.membership.unit_amount <= 0:
        msg = "DJANGO_CLUB['membership']['unit_amount'] must be greater than zero"
        raise ValueError(msg)
    if not isinstance(config.membership.currency, str) or len(config.membership.currency.strip()) != 3:  # noqa: PLR2004
        msg = "DJANGO_CLUB['membership']['currency'] must be a 3-letter ISO currency code"
        raise ValueError(msg)
    if config.membership.interval not in MEMBERSHIP_INTERVALS:
        msg = f"DJANGO_CLUB['membership']['interval'] must be one of {sorted(MEMBERSHIP_INTERVALS)}"
        raise ValueError(msg)
    if not isinstance(config.settlement.deduplicate, bool):
        msg = "DJANGO_CLUB['settlement']['deduplicate'] must be a boolean"
        raise TypeError(msg)
    if not isinstance(config.stripe.allow_unsigned_webhooks, bool):
        msg = "DJANGO_CLUB['stripe']['allow_unsigned_webhooks'] must be a boolean"
        raise TypeError(msg)
    if not isinstance(config.stripe.webhook_tolerance, int) or config.stripe.webhook_tolerance <= 0:
        msg = "DJANGO_CLUB['stripe']['webhook_tolerance'] must be a positive integer"
        raise ValueError(msg)
    if not isinstance(config.frontend_url, str) or not config.frontend_url.startswith(("http://", "https://")):
        msg = "DJANGO_CLUB['frontend_url'] must be an absolute http(s) URL"
        raise ValueError(msg)
    if not isinstance(config.upload_max_bytes, int) or config.upload_max_bytes <= 0:
        msg = "DJANGO_CLUB['upload_max_bytes'] must be a positive integer"
        raise ValueError(msg)


def _clear_config_cache(*, setting: str, **kwargs: object) -> None:  # noqa: ARG001
    """Clear the cached config when Django settings change during tests."""
    if setting == "DJANGO_CLUB":
        get_config.cache_clear()


setting_changed.connect(_clear_config_cache, dispatch_uid="django_club.settings.clear_config_cache")
