"""Registration and Stripe event models for django-club."""

from django.conf import settings
from django.db import models


class Registration(models.Model):
    """A guardian's submission for one child, pending financial settlement.

    Created as PENDING by the intake flow (or directly as ACTIVE by staff
    manual entry) and activated by the Stripe settlement webhook. The
    ``status`` only ever moves forward, see :attr:`TRANSITIONS`.
    """

    class Status(models.TextChoices):
        """Lifecycle states for a registration."""

        PENDING = "pending", "Pending"
        ACTIVE = "active", "Active"

    class PaymentStatus(models.TextChoices):
        """Settlement states for the membership payment."""

        UNSET = "", "Unset"
        PENDING = "pending", "Pending"
        PAID = "paid", "Paid"

    class Gender(models.TextChoices):
        """Gender options offered by the intake form."""

        MALE = "Male", "Male"
        FEMALE = "Female", "Female"

    TRANSITIONS: dict[str, frozenset[str]] = {
        Status.PENDING: frozenset({Status.ACTIVE}),
        Status.ACTIVE: frozenset(),
    }

    guardian = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="registrations",
        help_text="The parent account that submitted this registration. Empty for staff manual entries.",
    )
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    dob = models.DateField()
    gender = models.CharField(max_length=10, choices=Gender.choices, default=Gender.MALE)
    position = models.CharField(max_length=50, blank=True, default="TBD")
    jersey_size = models.CharField(max_length=10, blank=True, default="")
    medical_conditions = models.TextField(blank=True, default="")
    birth_cert_path = models.CharField(max_length=500, blank=True, default="")
    photo_url = models.URLField(max_length=500, blank=True, default="")
    waiver_signed_at = models.DateTimeField(null=True, blank=True)
    signature = models.CharField(max_length=200, blank=True, default="")
    manual_parent_name = models.CharField(max_length=200, blank=True, default="")
    manual_phone = models.CharField(max_length=50, blank=True, default="")
    age_group = models.CharField(max_length=10, blank=True, default="")
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        blank=True,
        default=PaymentStatus.UNSET,
    )
    stripe_subscription_id = models.CharField(max_length=200, blank=True, default="")
    assigned_staff = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_registrations",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(payment_status="paid") | models.Q(status="active"),
                name="club_registration_paid_implies_active",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.status})"

    @property
    def full_name(self) -> str:
        """Return the child's name as shown on the roster."""
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def waiver_accepted(self) -> bool:
        """Return whether the guardian signed the liability waiver."""
        return self.waiver_signed_at is not None

    def can_transition_to(self, status: str) -> bool:
        """Return whether ``status`` is a legal next lifecycle state.

        Args:
            status: The target ``Registration.Status`` value.

        Returns:
            ``True`` when the transition table allows moving to ``status``.
        """
        return status in self.TRANSITIONS.get(self.status, frozenset())


class StripeEvent(models.Model):
    """A Stripe webhook event as received, before and after processing.

    Every verified delivery is recorded here. ``processed`` is set once the
    registered handler finishes without raising.
    """

    stripe_id = models.CharField(max_length=255, unique=True)
    kind = models.CharField(max_length=255)
    livemode = models.BooleanField(default=False)
    payload = models.JSONField(default=dict, blank=True)
    customer_id = models.CharField(max_length=255, blank=True, default="")
    api_version = models.CharField(max_length=100, blank=True, default="")
    processed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.kind} ({self.stripe_id})"


class EventProcessingException(models.Model):
    """A captured failure from a webhook handler run."""

    event = models.ForeignKey(
        StripeEvent,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="exceptions",
    )
    data = models.TextField(blank=True, default="")
    message = models.CharField(max_length=500)
    traceback = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.message
