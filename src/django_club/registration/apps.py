"""Django app configuration for the registration app."""

from django.apps import AppConfig


class DjangoClubRegistrationConfig(AppConfig):
    """Configuration for the registration app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "django_club.registration"
    label = "club_registration"
    verbose_name = "Registration"
