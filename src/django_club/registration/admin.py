"""Django admin configuration for the registration app."""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from django.db import models

from django_club.registration.models import EventProcessingException, Registration, StripeEvent
from django_club.registration.services.staff import StaffRegistrationService

if TYPE_CHECKING:
    from django.db.models import QuerySet
    from django.http import HttpRequest


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    """Admin interface for registrations.

    Lifecycle fields are read-only here; use the actions so that status
    changes go through the transition rules.
    """

    list_display = (
        "first_name",
        "last_name",
        "dob",
        "age_group",
        "status",
        "payment_status",
        "assigned_staff",
        "created_at",
    )
    list_filter = ("status", "payment_status", "gender", "age_group")
    search_fields = ("first_name", "last_name", "manual_parent_name", "guardian__email", "stripe_subscription_id")
    readonly_fields = ("status", "payment_status", "stripe_subscription_id", "created_at", "updated_at")
    formfield_overrides = {models.URLField: {"assume_scheme": "https"}}
    actions = ("approve_registrations", "mark_paid")

    @admin.action(description="Approve selected registrations")
    def approve_registrations(self, request: HttpRequest, queryset: QuerySet[Registration]) -> None:
        """Move selected pending registrations to active."""
        approved = 0
        for registration in queryset:
            try:
                StaffRegistrationService.approve(registration)
            except ValidationError:
                continue
            approved += 1
        self.message_user(request, f"Approved {approved} registration(s).", messages.SUCCESS)

    @admin.action(description="Mark selected registrations as paid")
    def mark_paid(self, request: HttpRequest, queryset: QuerySet[Registration]) -> None:
        """Set payment status to paid (which also activates)."""
        for registration in queryset:
            StaffRegistrationService.set_payment_status(registration, Registration.PaymentStatus.PAID)
        self.message_user(request, f"Marked {queryset.count()} registration(s) as paid.", messages.SUCCESS)


@admin.register(StripeEvent)
class StripeEventAdmin(admin.ModelAdmin):
    """Read-only admin for Stripe webhook events."""

    list_display = ("stripe_id", "kind", "processed", "livemode", "created_at")
    list_filter = ("kind", "processed", "livemode")
    search_fields = ("stripe_id", "customer_id")
    readonly_fields = (
        "stripe_id",
        "kind",
        "livemode",
        "payload",
        "customer_id",
        "processed",
        "api_version",
        "created_at",
    )

    def has_add_permission(self, request: HttpRequest) -> bool:  # noqa: ARG002, D102
        return False

    def has_change_permission(self, request: HttpRequest, obj: StripeEvent | None = None) -> bool:  # noqa: ARG002, D102
        return False

    def has_delete_permission(self, request: HttpRequest, obj: StripeEvent | None = None) -> bool:  # noqa: ARG002, D102
        return False


@admin.register(EventProcessingException)
class EventProcessingExceptionAdmin(admin.ModelAdmin):
    """Read-only admin for webhook processing errors."""

    list_display = ("message", "event", "created_at")
    list_filter = ("created_at",)
    search_fields = ("message",)
    readonly_fields = ("event", "data", "message", "traceback", "created_at")

    def has_add_permission(self, request: HttpRequest) -> bool:  # noqa: ARG002, D102
        return False

    def has_change_permission(self, request: HttpRequest, obj: EventProcessingException | None = None) -> bool:  # noqa: ARG002, D102
        return False

    def has_delete_permission(self, request: HttpRequest, obj: EventProcessingException | None = None) -> bool:  # noqa: ARG002, D102
        return False
