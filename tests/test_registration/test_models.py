"""Tests for registration model behaviour and constraints."""

import datetime

import pytest
from django.db import IntegrityError, transaction

from django_club.registration.models import EventProcessingException, Registration, StripeEvent


@pytest.fixture
def registration(db):
    return Registration.objects.create(
        first_name="Ama",
        last_name="Owusu",
        dob=datetime.date(2015, 4, 2),
        gender=Registration.Gender.FEMALE,
    )


@pytest.mark.django_db
class TestRegistration:
    def test_defaults(self, registration):
        assert registration.status == Registration.Status.PENDING
        assert registration.payment_status == Registration.PaymentStatus.UNSET
        assert registration.position == "TBD"
        assert registration.stripe_subscription_id == ""
        assert registration.guardian is None

    def test_full_name_and_str(self, registration):
        assert registration.full_name == "Ama Owusu"
        assert str(registration) == "Ama Owusu (pending)"

    def test_waiver_accepted(self, registration):
        assert registration.waiver_accepted is False
        registration.waiver_signed_at = datetime.datetime(2025, 6, 1, tzinfo=datetime.UTC)
        assert registration.waiver_accepted is True

    def test_pending_can_become_active(self, registration):
        assert registration.can_transition_to(Registration.Status.ACTIVE)

    def test_active_is_terminal(self, registration):
        registration.status = Registration.Status.ACTIVE
        assert not registration.can_transition_to(Registration.Status.PENDING)
        assert not registration.can_transition_to(Registration.Status.ACTIVE)

    def test_pending_cannot_stay_pending(self, registration):
        assert not registration.can_transition_to(Registration.Status.PENDING)

    def test_paid_requires_active(self, registration):
        with pytest.raises(IntegrityError), transaction.atomic():
            Registration.objects.filter(pk=registration.pk).update(payment_status=Registration.PaymentStatus.PAID)

    def test_paid_and_active_is_allowed(self, registration):
        Registration.objects.filter(pk=registration.pk).update(
            status=Registration.Status.ACTIVE,
            payment_status=Registration.PaymentStatus.PAID,
        )
        registration.refresh_from_db()
        assert registration.payment_status == Registration.PaymentStatus.PAID

    def test_guardian_deletion_keeps_registration(self, registration, django_user_model):
        parent = django_user_model.objects.create_user(username="kofi", password="pw")
        registration.guardian = parent
        registration.save()
        parent.delete()
        registration.refresh_from_db()
        assert registration.guardian is None


@pytest.mark.django_db
class TestStripeEvent:
    def test_str(self):
        event = StripeEvent.objects.create(stripe_id="evt_1", kind="checkout.session.completed")
        assert str(event) == "checkout.session.completed (evt_1)"
        assert event.processed is False

    def test_stripe_id_unique(self):
        StripeEvent.objects.create(stripe_id="evt_dup", kind="x")
        with pytest.raises(IntegrityError), transaction.atomic():
            StripeEvent.objects.create(stripe_id="evt_dup", kind="x")

    def test_exception_str_and_cascade(self):
        event = StripeEvent.objects.create(stripe_id="evt_2", kind="x")
        exc = EventProcessingException.objects.create(event=event, message="boom")
        assert str(exc) == "boom"
        event.delete()
        assert not EventProcessingException.objects.filter(pk=exc.pk).exists()
