"""Settlement service: finalizes a registration once Stripe confirms payment.

Activation of the registration is the durable source of truth. Deriving the
roster Player afterwards is best-effort: a failure there is logged and left
for manual reconciliation, and never undoes the activation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import DatabaseError, transaction
from django.utils import timezone

from django_club.registration.models import Registration
from django_club.registration.signals import registration_activated
from django_club.roster.models import Player
from django_club.roster.services import calculate_age_group

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SettlementResult:
    """Outcome of :meth:`SettlementService.settle_checkout`.

    ``registration`` is ``None`` when the reference matched no row. ``player``
    is ``None`` when roster materialization failed.
    """

    registration: Registration | None
    player: Player | None = None
    player_created: bool = False


def player_fields_from_registration(registration: Registration) -> dict[str, object]:
    """Build the Player column values copied from an activated registration.

    Args:
        registration: The registration the roster entry is derived from.

    Returns:
        Keyword arguments for ``Player`` creation.
    """
    return {
        "guardian_id": registration.guardian_id,
        "full_name": registration.full_name,
        "date_of_birth": registration.dob,
        "gender": registration.gender,
        "position": registration.position or "TBD",
        "jersey_size": registration.jersey_size,
        "medical_conditions": registration.medical_conditions,
        "photo_url": registration.photo_url,
        "age_group": registration.age_group or calculate_age_group(registration.dob),
        "team_assigned": "Unassigned",
        "jersey_number": "-",
    }


class SettlementService:
    """Stateless service applying completed checkouts to registrations."""

    @staticmethod
    def settle_checkout(
        registration_id: object,
        subscription_id: str,
        *,
        deduplicate: bool,
    ) -> SettlementResult:
        """Activate a registration and derive its roster Player.

        The activation is a single-row update with no version check, so a
        concurrent staff edit on the same row is last-writer-wins. Re-running
        it for an already active registration writes the same values again.

        Args:
            registration_id: The ``client_reference_id`` from the checkout session.
            subscription_id: The Stripe subscription created by the checkout.
            deduplicate: When ``True`` an existing Player derived from this
                registration is reused instead of inserting another one.

        Returns:
            A :class:`SettlementResult` describing what was written.
        """
        try:
            updated = Registration.objects.filter(pk=registration_id).update(
                status=Registration.Status.ACTIVE,
                payment_status=Registration.PaymentStatus.PAID,
                stripe_subscription_id=subscription_id or "",
                updated_at=timezone.now(),
            )
        except (ValueError, TypeError):
            updated = 0

        if not updated:
            logger.warning("Checkout completed for unknown registration %s, nothing to settle", registration_id)
            return SettlementResult(registration=None)

        registration = Registration.objects.get(pk=registration_id)
        logger.info("Registration %s activated (subscription %s)", registration.pk, subscription_id)
        registration_activated.send(
            sender=Registration,
            registration=registration,
            subscription_id=subscription_id,
        )

        player, created = _materialize_player(registration, deduplicate=deduplicate)
        return SettlementResult(registration=registration, player=player, player_created=created)


def _materialize_player(registration: Registration, *, deduplicate: bool) -> tuple[Player | None, bool]:
    """Insert the roster Player for ``registration`` inside its own savepoint.

    Returns:
        ``(player, created)``; ``(None, False)`` when the insert failed.
    """
    try:
        with transaction.atomic():
            if deduplicate:
                # Serializes concurrent deliveries for the same registration.
                Registration.objects.select_for_update().get(pk=registration.pk)
                existing = Player.objects.filter(source_registration=registration).order_by("pk").first()
                if existing is not None:
                    logger.info(
                        "Player %s already exists for registration %s, skipping insert",
                        existing.pk,
                        registration.pk,
                    )
                    return existing, False
            player = Player.objects.create(
                source_registration=registration,
                **player_fields_from_registration(registration),
            )
    except DatabaseError:
        logger.exception("Error creating player record for registration %s", registration.pk)
        return None, False

    logger.info("Player %s created from registration %s", player.pk, registration.pk)
    return player, True
