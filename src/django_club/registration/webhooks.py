"""Stripe webhook handling for the registration app.

Provides a registry-based dispatch system for processing Stripe webhook events.
Each event kind (e.g. ``checkout.session.completed``) maps to a handler class
that wraps processing with idempotency checks and error capture.

The ``stripe_webhook`` view verifies the event signature, records the raw event,
and delegates to the appropriate handler. Stripe delivers at least once and in
no particular order, so handlers must tolerate zero, one, or many deliveries.

Usage in URL configuration::

    from django_club.registration.webhooks import stripe_webhook

    urlpatterns = [
        path("webhooks/stripe/", stripe_webhook),
    ]
"""

from __future__ import annotations

import json
import logging
import traceback
import uuid
from typing import TYPE_CHECKING

import stripe
from django.db import IntegrityError, transaction
from django.http import HttpResponse, HttpResponseBadRequest
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from django_club.registration.models import EventProcessingException, StripeEvent
from django_club.registration.services.settlement import SettlementService
from django_club.settings import get_config

if TYPE_CHECKING:
    from django.http import HttpRequest

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class WebhookRegistry:
    """Registry mapping Stripe event kinds to handler classes.

    Handlers are registered at module load time and looked up by the webhook
    view when an event arrives.
    """

    def __init__(self) -> None:
        """Initialize an empty handler registry."""
        self._registry: dict[str, type[Webhook]] = {}

    def register(self, kind: str, handler_class: type[Webhook]) -> None:
        """Register a handler class for a Stripe event kind.

        Args:
            kind: The Stripe event type string (e.g. ``"checkout.session.completed"``).
            handler_class: A ``Webhook`` subclass that handles this event kind.
        """
        self._registry[kind] = handler_class

    def get(self, kind: str) -> type[Webhook] | None:
        """Return the handler class for a given event kind, or ``None``."""
        return self._registry.get(kind)

    def keys(self) -> list[str]:
        """Return all registered event kinds."""
        return list(self._registry.keys())


registry = WebhookRegistry()


# ---------------------------------------------------------------------------
# Base handler
# ---------------------------------------------------------------------------


class Webhook:
    """Base class for Stripe webhook event handlers.

    Subclasses set ``name`` to the Stripe event kind they handle and implement
    ``process_webhook()``. The base ``process()`` method skips already processed
    events when deduplication is on and captures exceptions.

    Attributes:
        name: The Stripe event kind this handler processes.
        event: The ``StripeEvent`` model instance being handled.
    """

    name: str = ""

    def __init__(self, event: StripeEvent) -> None:
        """Bind the handler to a specific Stripe event record."""
        self.event = event

    def process(self) -> None:
        """Run the handler with idempotency and error capture.

        On success, marks the event as processed. On failure, captures the
        traceback to ``EventProcessingException`` and re-raises.
        """
        if self.event.processed and get_config().settlement.deduplicate:
            logger.info("Event %s already processed, skipping", self.event.stripe_id)
            return

        try:
            self.process_webhook()
            self.event.processed = True
            self.event.save(update_fields=["processed"])
        except Exception:
            self.log_exception()
            raise

    def process_webhook(self) -> None:
        """Implement event-specific processing logic.

        Raises:
            NotImplementedError: Subclasses must override this method.
        """
        raise NotImplementedError

    def log_exception(self) -> None:
        """Capture the current exception to ``EventProcessingException``."""
        tb = traceback.format_exc()
        logger.error(
            "Error processing webhook %s (event %s): %s",
            self.name,
            self.event.stripe_id,
            tb,
        )
        EventProcessingException.objects.create(
            event=self.event,
            data=str(self.event.payload),
            message=str(tb)[:500],
            traceback=tb,
        )


def _event_data_object(event: StripeEvent) -> dict[str, object]:
    """Extract the ``data.object`` dict from a StripeEvent payload."""
    payload = event.payload
    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(data, dict):
            obj = data.get("object")
            if isinstance(obj, dict):
                return obj
    return {}


# ---------------------------------------------------------------------------
# Concrete handlers
# ---------------------------------------------------------------------------


class CheckoutSessionCompletedWebhook(Webhook):
    """Handles ``checkout.session.completed`` events.

    Activates the registration named by the session's ``client_reference_id``
    and derives its roster Player. Sessions without a reference are ignored.
    """

    name = "checkout.session.completed"

    def process_webhook(self) -> None:
        """Settle the registration referenced by the checkout session."""
        session = _event_data_object(self.event)
        registration_id = session.get("client_reference_id")
        if not registration_id:
            logger.warning("Checkout session %s has no client_reference_id, ignoring", session.get("id"))
            return

        subscription = session.get("subscription")
        if isinstance(subscription, dict):
            subscription = subscription.get("id")

        SettlementService.settle_checkout(
            str(registration_id),
            str(subscription or ""),
            deduplicate=get_config().settlement.deduplicate,
        )


# ---------------------------------------------------------------------------
# Handler registration
# ---------------------------------------------------------------------------

registry.register("checkout.session.completed", CheckoutSessionCompletedWebhook)


# ---------------------------------------------------------------------------
# Webhook endpoint view
# ---------------------------------------------------------------------------


def _construct_event(payload: bytes, sig_header: str) -> dict[str, object]:
    """Verify and decode the webhook body.

    With a signing secret configured the signature is checked over the exact
    request bytes. Without one the JSON body is trusted as-is, which is only
    permitted when ``allow_unsigned_webhooks`` is on. Either way the event is
    decoded from the raw body, not from the SDK's ``Event`` object.

    Raises:
        stripe.SignatureVerificationError: If the signature does not match.
        ValueError: If the body is not a JSON object or unsigned events are
            not allowed.
    """
    config = get_config()
    webhook_secret = config.stripe.webhook_secret
    if webhook_secret:
        stripe.Webhook.construct_event(
            payload,
            sig_header,
            str(webhook_secret),
            tolerance=config.stripe.webhook_tolerance,
        )
    elif not config.stripe.allow_unsigned_webhooks:
        msg = "No webhook signing secret configured"
        raise ValueError(msg)
    else:
        logger.warning("Accepting unsigned Stripe webhook; configure a webhook secret outside development")

    event = json.loads(payload)
    if not isinstance(event, dict):
        msg = "Webhook payload must be a JSON object"
        raise ValueError(msg)
    return event


def _record_event(event: dict[str, object]) -> tuple[StripeEvent, bool]:
    """Persist the inbound event, returning ``(record, created)``.

    Unsigned development payloads may lack an id; those get a local one so they
    are still recorded.
    """
    stripe_id = str(event.get("id") or f"local_{uuid.uuid4().hex}")
    data = event.get("data")
    data_object = data.get("object", {}) if isinstance(data, dict) else {}
    customer_id = ""
    if isinstance(data_object, dict):
        customer_id = data_object.get("customer", "") or ""

    defaults = {
        "kind": str(event.get("type", "")),
        "livemode": bool(event.get("livemode", False)),
        "payload": json.loads(json.dumps(event, default=str)),
        "customer_id": str(customer_id),
        "api_version": str(event.get("api_version") or ""),
    }
    try:
        with transaction.atomic():
            return StripeEvent.objects.get_or_create(stripe_id=stripe_id, defaults=defaults)
    except IntegrityError:
        return StripeEvent.objects.get(stripe_id=stripe_id), False


@csrf_exempt
@require_POST
def stripe_webhook(request: HttpRequest) -> HttpResponse:
    """Receive and process Stripe webhook events.

    Verifies the signature, records the event, and dispatches it to the
    registered handler. Signature or payload failures answer 400 with a plain
    text ``Webhook Error`` body and change nothing. Everything else, including
    unknown event kinds and handler failures, is acknowledged with an empty 200
    so Stripe does not redeliver.

    Args:
        request: The incoming HTTP request from Stripe.

    Returns:
        An ``HttpResponse`` with status 200, or 400 on verification failure.
    """
    payload = request.body
    sig_header = request.META.get("HTTP_STRIPE_SIGNATURE", "")

    try:
        event = _construct_event(payload, sig_header)
    except (stripe.SignatureVerificationError, ValueError) as exc:
        logger.warning("Webhook Error: %s", exc)
        return HttpResponseBadRequest(f"Webhook Error: {exc}", content_type="text/plain")

    stripe_event, created = _record_event(event)
    kind = stripe_event.kind

    if not created and stripe_event.processed and get_config().settlement.deduplicate:
        logger.info("Duplicate Stripe event %s, returning 200", stripe_event.stripe_id)
        return HttpResponse(status=200)

    handler_class = registry.get(kind)
    if handler_class is None:
        logger.info("Unhandled event type %s", kind)
        return HttpResponse(status=200)

    try:
        handler_class(stripe_event).process()
    except Exception:
        logger.exception(
            "Error processing Stripe event %s (kind=%s)",
            stripe_event.stripe_id,
            kind,
        )

    return HttpResponse(status=200)
