"""Checkout service: turns an intake submission into a Stripe Checkout Session.

Produces exactly one persisted registration row (new or resumed) and one hosted
checkout URL bound to it. Nothing is retried; the caller decides whether to
submit again.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

import stripe
from django.db import DatabaseError

from django_club.registration.forms import RegistrationDataForm, normalize_registration_keys
from django_club.registration.models import Registration
from django_club.registration.stripe_client import StripeClient
from django_club.settings import get_config

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractBaseUser

    from django_club.settings import ClubConfig

logger = logging.getLogger(__name__)


class CheckoutError(Exception):
    """Raised when a checkout session cannot be produced.

    Covers persistence failures and payment processor failures. The message
    is safe to show to the submitting guardian.
    """


class RegistrationNotFound(CheckoutError):  # noqa: N818
    """Raised when a resumed checkout references an unknown registration."""


class InvalidRegistrationData(CheckoutError):  # noqa: N818
    """Raised when ``registrationData`` fails server-side validation.

    Attributes:
        errors: Field name to list of messages, as produced by the form.
    """

    def __init__(self, errors: dict[str, list[str]]) -> None:
        """Store the per-field validation errors."""
        super().__init__("Invalid registration data")
        self.errors = errors


@dataclass(frozen=True, slots=True)
class CheckoutResult:
    """Outcome of :meth:`CheckoutService.start_checkout`."""

    registration: Registration
    url: str
    created: bool


def build_default_urls(config: ClubConfig) -> tuple[str, str]:
    """Return the default ``(success_url, cancel_url)`` for the front end.

    Args:
        config: The club configuration holding ``frontend_url`` and paths.

    Returns:
        Absolute success and cancel URLs.
    """
    base = config.frontend_url.rstrip("/")
    return f"{base}{config.success_path}", f"{base}{config.cancel_path}"


class CheckoutService:
    """Stateless service for starting membership checkout."""

    @staticmethod
    def start_checkout(
        *,
        registration_data: Mapping[str, object] | None = None,
        registration_id: object | None = None,
        success_url: str | None = None,
        guardian: AbstractBaseUser | None = None,
    ) -> CheckoutResult:
        """Create or resume a pending registration and open a checkout session.

        When ``registration_id`` is given the existing row is reused and no new
        row is written. Otherwise ``registration_data`` is validated and saved
        as a PENDING registration. A registration saved here stays PENDING if
        the processor call then fails.

        Args:
            registration_data: The intake payload for a new registration.
            registration_id: The id of a registration to resume.
            success_url: Optional override for the post-payment redirect.
            guardian: The authenticated parent submitting the form, if any.

        Returns:
            A :class:`CheckoutResult` with the registration and hosted URL.

        Raises:
            RegistrationNotFound: If ``registration_id`` does not resolve.
            InvalidRegistrationData: If the new payload fails validation.
            CheckoutError: If saving the registration or calling Stripe fails.
        """
        config = get_config()
        created = False

        if registration_id not in (None, ""):
            try:
                registration = Registration.objects.get(pk=registration_id)
            except (Registration.DoesNotExist, ValueError, TypeError):
                raise RegistrationNotFound("Registration not found") from None
        else:
            registration = _create_pending_registration(registration_data or {}, guardian=guardian)
            created = True

        default_success, cancel_url = build_default_urls(config)
        try:
            url = StripeClient(config).create_subscription_checkout_session(
                registration,
                success_url=success_url or default_success,
                cancel_url=cancel_url,
            )
        except (stripe.StripeError, ValueError) as exc:
            logger.error("Stripe error opening checkout for registration %s: %s", registration.pk, exc)
            raise CheckoutError(str(exc) or "Failed to create checkout session") from exc

        _mark_payment_pending(registration)
        return CheckoutResult(registration=registration, url=url, created=created)


def _create_pending_registration(
    registration_data: Mapping[str, object],
    *,
    guardian: AbstractBaseUser | None,
) -> Registration:
    """Validate and insert a new PENDING registration.

    Raises:
        InvalidRegistrationData: If the payload does not match the schema.
        CheckoutError: If the insert fails.
    """
    if not isinstance(registration_data, Mapping):
        raise InvalidRegistrationData({"registrationData": ["Must be an object."]})

    form = RegistrationDataForm(data=normalize_registration_keys(registration_data))
    if not form.is_valid():
        raise InvalidRegistrationData({field: list(messages) for field, messages in form.errors.items()})

    registration = form.save(commit=False)
    registration.status = Registration.Status.PENDING
    registration.payment_status = Registration.PaymentStatus.UNSET
    if guardian is not None and getattr(guardian, "is_authenticated", False):
        registration.guardian = guardian
    try:
        registration.save()
    except DatabaseError as exc:
        logger.exception("Database error saving registration for %s", registration.full_name)
        raise CheckoutError("Failed to save registration data") from exc

    logger.info("Created pending registration %s for %s", registration.pk, registration.full_name)
    return registration


def _mark_payment_pending(registration: Registration) -> None:
    """Record that a checkout session is open, unless already paid."""
    if registration.payment_status == Registration.PaymentStatus.PAID:
        return
    try:
        Registration.objects.filter(pk=registration.pk).exclude(
            payment_status=Registration.PaymentStatus.PAID,
        ).update(payment_status=Registration.PaymentStatus.PENDING)
    except DatabaseError:
        logger.exception("Could not mark registration %s payment as pending", registration.pk)
        return
    registration.payment_status = Registration.PaymentStatus.PENDING
