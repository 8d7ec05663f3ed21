"""Staff operations on registrations.

Manual entry, approval, payment status overrides, and staff assignment. Each
write is a single-row update without a version check; a staff edit racing a
settlement webhook on the same row is last-writer-wins.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.core.exceptions import ValidationError
from django.utils import timezone

from django_club.registration.forms import ManualRegistrationForm
from django_club.registration.models import Registration
from django_club.registration.services.checkout import CheckoutService
from django_club.roster.services import calculate_age_group

if TYPE_CHECKING:
    from collections.abc import Mapping

    from django.contrib.auth.models import AbstractBaseUser

    from django_club.registration.services.checkout import CheckoutResult

logger = logging.getLogger(__name__)


class StaffRegistrationService:
    """Stateless service for staff registration management."""

    @staticmethod
    def record_manual(
        data: Mapping[str, object],
        *,
        staff_user: AbstractBaseUser | None = None,
    ) -> Registration:
        """Create an ACTIVE registration entered by staff, bypassing payment.

        Pass the result to :meth:`start_payment` to collect the membership fee
        as well.

        Args:
            data: Form data matching :class:`ManualRegistrationForm`.
            staff_user: The staff member entering the registration.

        Returns:
            The created registration.

        Raises:
            ValidationError: If the data fails form validation.
        """
        form = ManualRegistrationForm(data=data)
        if not form.is_valid():
            raise ValidationError(form.errors.get_json_data())

        cleaned = form.cleaned_data
        registration = Registration.objects.create(
            guardian=None,
            first_name=cleaned["first_name"],
            last_name=cleaned["last_name"],
            dob=cleaned["dob"],
            gender=cleaned["gender"],
            manual_parent_name=cleaned["manual_parent_name"],
            manual_phone=cleaned["manual_phone"],
            photo_url=cleaned["photo_url"],
            age_group=cleaned["age_group"] or calculate_age_group(cleaned["dob"]),
            waiver_signed_at=timezone.now() if cleaned["waiver_signed"] else None,
            status=Registration.Status.ACTIVE,
        )
        logger.info(
            "Registration %s entered manually by %s",
            registration.pk,
            getattr(staff_user, "pk", None),
        )
        return registration

    @staticmethod
    def approve(registration: Registration) -> Registration:
        """Move a PENDING registration to ACTIVE.

        Raises:
            ValidationError: If the transition table does not allow it.
        """
        if not registration.can_transition_to(Registration.Status.ACTIVE):
            raise ValidationError(f"Registration in status {registration.status!r} cannot be approved.")

        Registration.objects.filter(pk=registration.pk).update(
            status=Registration.Status.ACTIVE,
            updated_at=timezone.now(),
        )
        registration.status = Registration.Status.ACTIVE
        logger.info("Registration %s approved", registration.pk)
        return registration

    @staticmethod
    def set_payment_status(registration: Registration, payment_status: str) -> Registration:
        """Override the payment status of a registration.

        Setting ``paid`` also activates the registration so that a paid
        registration is never left pending.

        Raises:
            ValidationError: If ``payment_status`` is not a known value.
        """
        if payment_status not in Registration.PaymentStatus.values:
            raise ValidationError(f"Unknown payment status {payment_status!r}.")

        changes: dict[str, object] = {"payment_status": payment_status, "updated_at": timezone.now()}
        if payment_status == Registration.PaymentStatus.PAID:
            changes["status"] = Registration.Status.ACTIVE

        Registration.objects.filter(pk=registration.pk).update(**changes)
        registration.payment_status = payment_status
        if "status" in changes:
            registration.status = Registration.Status.ACTIVE
        logger.info("Registration %s payment status set to %r", registration.pk, payment_status)
        return registration

    @staticmethod
    def assign_staff(registration: Registration, staff_user: AbstractBaseUser | None) -> Registration:
        """Assign (or clear, with ``None``) the staff member for a registration."""
        Registration.objects.filter(pk=registration.pk).update(
            assigned_staff=staff_user,
            updated_at=timezone.now(),
        )
        registration.assigned_staff = staff_user
        return registration

    @staticmethod
    def start_payment(registration: Registration, *, success_url: str | None = None) -> CheckoutResult:
        """Open a membership checkout for a registration entered by staff.

        Resumes checkout by id, so no new row is written. The settlement webhook
        later marks the registration paid and adds it to the roster.

        Raises:
            CheckoutError: If Stripe cannot open a session.
        """
        return CheckoutService.start_checkout(registration_id=registration.pk, success_url=success_url)
