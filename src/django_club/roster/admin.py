"""Django admin configuration for the roster app."""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from django.db import models

from django_club.roster.models import Coach, Player, Profile
from django_club.roster.services import RosterService

if TYPE_CHECKING:
    from django.db.models import QuerySet
    from django.http import HttpRequest


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    """Admin interface for club profiles with a coach promotion action."""

    list_display = ("full_name", "user", "role", "phone")
    list_filter = ("role",)
    search_fields = ("full_name", "user__email", "phone")
    formfield_overrides = {models.URLField: {"assume_scheme": "https"}}
    actions = ("make_coach",)

    @admin.action(description="Promote selected profiles to coach")
    def make_coach(self, request: HttpRequest, queryset: QuerySet[Profile]) -> None:
        """Promote each selected profile, skipping admins."""
        for profile in queryset:
            try:
                RosterService.promote_to_coach(profile)
            except ValidationError as exc:
                self.message_user(request, f"{profile}: {exc.messages[0]}", messages.WARNING)


@admin.register(Coach)
class CoachAdmin(admin.ModelAdmin):
    """Admin interface for coaches."""

    list_display = ("full_name", "profile", "created_at")
    formfield_overrides = {models.URLField: {"assume_scheme": "https"}}
    search_fields = ("full_name",)


@admin.register(Player)
class PlayerAdmin(admin.ModelAdmin):
    """Admin interface for the roster.

    ``source_registration`` is shown so staff can spot duplicate players left
    by replayed settlement events.
    """

    list_display = ("full_name", "age_group", "team_assigned", "coach", "position", "source_registration")
    list_filter = ("team_assigned", "age_group", "gender", "coach")
    search_fields = ("full_name",)
    raw_id_fields = ("guardian", "source_registration")
    formfield_overrides = {models.URLField: {"assume_scheme": "https"}}
