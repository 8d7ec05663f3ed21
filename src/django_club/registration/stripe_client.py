"""Stripe client wrapper for club membership checkout.

Uses the modern ``stripe.StripeClient`` pattern (v1 namespace) bound to the
secret key and API version from ``DJANGO_CLUB['stripe']``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import stripe

from django_club.registration.stripe_utils import convert_amount_for_api, obfuscate_key
from django_club.settings import get_config

if TYPE_CHECKING:
    from django_club.registration.models import Registration
    from django_club.settings import ClubConfig

logger = logging.getLogger(__name__)

_INTERVAL_LABELS = {"day": "Daily", "week": "Weekly", "month": "Monthly", "year": "Yearly"}


class StripeClient:
    """Club Stripe API client.

    Args:
        config: Optional configuration override; defaults to :func:`get_config`.

    Raises:
        ValueError: If no Stripe secret key is configured.
    """

    def __init__(self, config: ClubConfig | None = None) -> None:
        """Initialize the client with the configured Stripe credentials."""
        self.config = config or get_config()
        secret_key = self.config.stripe.secret_key
        if not secret_key:
            msg = (
                "No Stripe secret key is configured. "
                "Set DJANGO_CLUB['stripe']['secret_key'] before initializing StripeClient."
            )
            raise ValueError(msg)

        self.client = stripe.StripeClient(
            str(secret_key),
            stripe_version=self.config.stripe.api_version,
        )
        logger.debug("Initialized StripeClient with key %s", obfuscate_key(str(secret_key)))

    def create_subscription_checkout_session(
        self,
        registration: Registration,
        *,
        success_url: str,
        cancel_url: str,
    ) -> str:
        """Open a hosted subscription Checkout Session for a registration.

        The registration id is carried as ``client_reference_id`` and echoed in
        ``metadata``; the settlement webhook uses it to find the registration
        again. No idempotency key is sent, so repeating the call opens a second
        session.

        Args:
            registration: The registration the membership is paid for.
            success_url: Where Stripe sends the browser after payment.
            cancel_url: Where Stripe sends the browser when checkout is abandoned.

        Returns:
            The hosted checkout URL.

        Raises:
            ValueError: If Stripe returns a session without a URL.
        """
        membership = self.config.membership
        session = self.client.v1.checkout.sessions.create(
            params={
                "payment_method_types": ["card"],
                "mode": "subscription",
                "line_items": [
                    {
                        "price_data": {
                            "currency": membership.currency.lower(),
                            "product_data": {
                                "name": membership.product_name,
                                "description": f"{_INTERVAL_LABELS[membership.interval]} membership for {registration.full_name}",
                            },
                            "unit_amount": convert_amount_for_api(membership.unit_amount, membership.currency),
                            "recurring": {"interval": membership.interval},
                        },
                        "quantity": 1,
                    },
                ],
                "success_url": success_url,
                "cancel_url": cancel_url,
                "client_reference_id": str(registration.pk),
                "metadata": {"registration_id": str(registration.pk)},
            },
        )

        url = session.url
        if not url:
            msg = f"Stripe returned no checkout URL for registration {registration.pk}"
            raise ValueError(msg)

        logger.info("Opened checkout session %s for registration %s", session.id, registration.pk)
        return url
