"""Roster models: profiles, coaches, and post-payment players."""

from django.conf import settings
from django.db import models


class Profile(models.Model):
    """Club-facing details and role for an account.

    The role gates which dashboards an account can reach. Values outside
    :class:`Role` are rejected by :meth:`full_clean` and by the roster services.
    """

    class Role(models.TextChoices):
        """Access roles for club accounts."""

        USER = "user", "User"
        COACH = "coach", "Coach"
        ADMIN = "admin", "Admin"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="club_profile",
    )
    full_name = models.CharField(max_length=200, blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    photo_url = models.URLField(max_length=500, blank=True, default="")
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.USER)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["full_name"]

    def __str__(self) -> str:
        return f"{self.full_name or self.user} ({self.role})"


class Coach(models.Model):
    """Roster entry for a profile promoted to the coach role."""

    profile = models.OneToOneField(
        Profile,
        on_delete=models.CASCADE,
        related_name="coach",
    )
    full_name = models.CharField(max_length=200)
    photo_url = models.URLField(max_length=500, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["full_name"]

    def __str__(self) -> str:
        return self.full_name


class Player(models.Model):
    """The canonical roster record for a child once payment clears.

    Derived from a :class:`~django_club.registration.models.Registration` by
    the settlement webhook and then managed by staff. ``source_registration``
    is intentionally not unique so that the legacy replay behaviour (one
    extra Player per redelivered event) stays representable.
    """

    guardian = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="players",
    )
    source_registration = models.ForeignKey(
        "club_registration.Registration",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="players",
    )
    full_name = models.CharField(max_length=200)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, blank=True, default="")
    position = models.CharField(max_length=50, default="TBD")
    jersey_size = models.CharField(max_length=10, blank=True, default="")
    jersey_number = models.CharField(max_length=5, default="-")
    medical_conditions = models.TextField(blank=True, default="")
    team_assigned = models.CharField(max_length=100, default="Unassigned")
    age_group = models.CharField(max_length=10, blank=True, default="")
    coach = models.ForeignKey(
        Coach,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="players",
    )
    photo_url = models.URLField(max_length=500, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["full_name"]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.team_assigned})"
