"""Roster services: age groups, coach promotion, and player assignment."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from django_club.roster.models import Coach, Player, Profile

if TYPE_CHECKING:
    import datetime

logger = logging.getLogger(__name__)

AGE_GROUP_LIMITS: tuple[tuple[int, str], ...] = (
    (6, "U6"),
    (8, "U8"),
    (10, "U10"),
    (12, "U12"),
    (14, "U14"),
    (16, "U16"),
)
OPEN_AGE_GROUP = "Open"


def calculate_age_group(dob: datetime.date | None, today: datetime.date | None = None) -> str:
    """Return the age-group bucket for a birth date.

    Age is counted by calendar year (``today.year - dob.year``), matching how
    the club places players for a season rather than by exact birthday.

    Args:
        dob: The player's date of birth. ``None`` falls into the youngest group.
        today: Reference date; defaults to the current local date.

    Returns:
        One of ``U6``, ``U8``, ``U10``, ``U12``, ``U14``, ``U16`` or ``Open``.
    """
    if dob is None:
        return AGE_GROUP_LIMITS[0][1]
    today = today or timezone.localdate()
    age = today.year - dob.year
    for limit, label in AGE_GROUP_LIMITS:
        if age <= limit:
            return label
    return OPEN_AGE_GROUP


class RosterService:
    """Stateless service for staff roster management."""

    @staticmethod
    @transaction.atomic
    def promote_to_coach(profile: Profile) -> Coach:
        """Give a profile the coach role and create its Coach roster entry.

        The role update happens before the Coach insert. Both run in one
        transaction, so a failed insert rolls the role change back.

        Args:
            profile: The profile to promote.

        Returns:
            The new or existing :class:`Coach` for the profile.

        Raises:
            ValidationError: If the profile is an admin (admins are not demoted).
        """
        profile = Profile.objects.select_for_update().get(pk=profile.pk)
        if profile.role == Profile.Role.ADMIN:
            raise ValidationError("Admin profiles cannot be converted to coaches.")

        profile.role = Profile.Role.COACH
        profile.save(update_fields=["role", "updated_at"])

        coach, created = Coach.objects.update_or_create(
            profile=profile,
            defaults={
                "full_name": profile.full_name or str(profile.user),
                "photo_url": profile.photo_url,
            },
        )
        logger.info("Profile %s promoted to coach (%s)", profile.pk, "created" if created else "updated")
        return coach

    @staticmethod
    def set_role(profile: Profile, role: str) -> Profile:
        """Change a profile's role, rejecting values outside :class:`Profile.Role`.

        Raises:
            ValidationError: If ``role`` is not a known role.
        """
        if role not in Profile.Role.values:
            raise ValidationError(f"Unknown role {role!r}.")
        Profile.objects.filter(pk=profile.pk).update(role=role, updated_at=timezone.now())
        profile.role = role
        return profile

    @staticmethod
    def assign_coach(player: Player, coach: Coach | None) -> Player:
        """Assign (or clear, with ``None``) the coach for a player."""
        Player.objects.filter(pk=player.pk).update(coach=coach, updated_at=timezone.now())
        player.coach = coach
        logger.info("Player %s assigned to coach %s", player.pk, coach.pk if coach else None)
        return player

    @staticmethod
    def assign_team(player: Player, team: str) -> Player:
        """Move a player to a team; an empty name puts it back to ``Unassigned``."""
        team = team.strip() or "Unassigned"
        Player.objects.filter(pk=player.pk).update(team_assigned=team, updated_at=timezone.now())
        player.team_assigned = team
        return player
