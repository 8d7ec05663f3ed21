"""Django app configuration for the roster app."""

from django.apps import AppConfig


class DjangoClubRosterConfig(AppConfig):
    """Configuration for the roster app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "django_club.roster"
    label = "club_roster"
    verbose_name = "Roster"
