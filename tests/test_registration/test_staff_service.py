"""Tests for StaffRegistrationService."""

import datetime
from unittest.mock import patch

import pytest
from django.core.exceptions import ValidationError

from django_club.registration.models import Registration
from django_club.registration.services.staff import StaffRegistrationService
from django_club.roster.services import calculate_age_group


@pytest.fixture
def staff_user(django_user_model):
    return django_user_model.objects.create_user(username="coach_admin", password="pw", is_staff=True)


@pytest.fixture
def pending(db):
    return Registration.objects.create(first_name="Ama", last_name="Owusu", dob=datetime.date(2015, 4, 2))


def _manual_data(**overrides):
    data = {
        "first_name": "Yaw",
        "last_name": "Mensah",
        "dob": "2012-09-15",
        "gender": "Male",
        "manual_parent_name": "Efua Mensah",
        "manual_phone": "555-0100",
        "waiver_signed": "on",
    }
    data.update(overrides)
    return data


@pytest.mark.django_db
class TestRecordManual:
    def test_creates_active_registration_without_guardian(self, staff_user):
        registration = StaffRegistrationService.record_manual(_manual_data(), staff_user=staff_user)

        assert registration.status == Registration.Status.ACTIVE
        assert registration.payment_status == Registration.PaymentStatus.UNSET
        assert registration.guardian is None
        assert registration.manual_parent_name == "Efua Mensah"
        assert registration.manual_phone == "555-0100"
        assert registration.waiver_accepted

    def test_age_group_is_computed(self):
        registration = StaffRegistrationService.record_manual(_manual_data())
        assert registration.age_group == calculate_age_group(datetime.date(2012, 9, 15))

    def test_explicit_age_group_kept(self):
        registration = StaffRegistrationService.record_manual(_manual_data(age_group="U14"))
        assert registration.age_group == "U14"

    def test_unchecked_waiver(self):
        data = _manual_data()
        del data["waiver_signed"]
        registration = StaffRegistrationService.record_manual(data)
        assert registration.waiver_signed_at is None

    def test_invalid_data_raises(self):
        with pytest.raises(ValidationError):
            StaffRegistrationService.record_manual(_manual_data(first_name=""))
        assert not Registration.objects.exists()


@pytest.mark.django_db
class TestApprove:
    def test_pending_becomes_active(self, pending):
        StaffRegistrationService.approve(pending)

        pending.refresh_from_db()
        assert pending.status == Registration.Status.ACTIVE
        assert pending.payment_status == Registration.PaymentStatus.UNSET

    def test_active_cannot_be_approved_again(self, pending):
        StaffRegistrationService.approve(pending)
        with pytest.raises(ValidationError, match="cannot be approved"):
            StaffRegistrationService.approve(pending)


@pytest.mark.django_db
class TestSetPaymentStatus:
    def test_paid_also_activates(self, pending):
        StaffRegistrationService.set_payment_status(pending, Registration.PaymentStatus.PAID)

        pending.refresh_from_db()
        assert pending.payment_status == Registration.PaymentStatus.PAID
        assert pending.status == Registration.Status.ACTIVE

    def test_pending_payment_keeps_status(self, pending):
        StaffRegistrationService.set_payment_status(pending, Registration.PaymentStatus.PENDING)

        pending.refresh_from_db()
        assert pending.payment_status == Registration.PaymentStatus.PENDING
        assert pending.status == Registration.Status.PENDING

    def test_unknown_status_rejected(self, pending):
        with pytest.raises(ValidationError, match="Unknown payment status"):
            StaffRegistrationService.set_payment_status(pending, "refunded")


@pytest.mark.django_db
class TestAssignStaff:
    def test_assign_and_clear(self, pending, staff_user):
        StaffRegistrationService.assign_staff(pending, staff_user)
        pending.refresh_from_db()
        assert pending.assigned_staff == staff_user

        StaffRegistrationService.assign_staff(pending, None)
        pending.refresh_from_db()
        assert pending.assigned_staff is None


@pytest.mark.django_db
class TestStartPayment:
    def test_resumes_checkout_for_manual_registration(self):
        registration = StaffRegistrationService.record_manual(_manual_data())

        with patch("django_club.registration.services.checkout.StripeClient") as mock_cls:
            mock_cls.return_value.create_subscription_checkout_session.return_value = "https://checkout.stripe.com/m"
            result = StaffRegistrationService.start_payment(registration)

        assert result.url == "https://checkout.stripe.com/m"
        assert result.created is False
        assert Registration.objects.count() == 1
        registration.refresh_from_db()
        assert registration.status == Registration.Status.ACTIVE
        assert registration.payment_status == Registration.PaymentStatus.PENDING
