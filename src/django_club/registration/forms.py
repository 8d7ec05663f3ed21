"""Forms for the registration app.

``RegistrationDataForm`` is the server-side schema for the ``registrationData``
object posted by the intake wizard. Lifecycle fields (``status``,
``payment_status``, ``guardian``) are never read from the payload.
"""

import re
from collections.abc import Mapping

from django import forms

from django_club.registration.models import Registration

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def normalize_registration_keys(data: Mapping[str, object]) -> dict[str, object]:
    """Return ``data`` with camelCase keys converted to snake_case.

    The intake client posts ``firstName``/``waiverSignedAt`` style keys while
    the model uses ``first_name``/``waiver_signed_at``. A ``dob`` sent as a full
    ISO timestamp (``2015-04-02T12:00:00.000Z``) is cut down to its date part.

    Args:
        data: The raw ``registrationData`` mapping.

    Returns:
        A new dict suitable for binding to :class:`RegistrationDataForm`.
    """
    normalized: dict[str, object] = {}
    for key, value in data.items():
        normalized[_CAMEL_BOUNDARY.sub("_", str(key)).lower()] = value

    dob = normalized.get("dob")
    if isinstance(dob, str) and "T" in dob:
        normalized["dob"] = dob.split("T", 1)[0]
    return normalized


class RegistrationDataForm(forms.ModelForm):
    """Validates a guardian's intake submission before it is persisted."""

    photo_url = forms.URLField(max_length=500, required=False, assume_scheme="https")

    class Meta:
        model = Registration
        fields = [
            "first_name",
            "last_name",
            "dob",
            "gender",
            "position",
            "jersey_size",
            "medical_conditions",
            "birth_cert_path",
            "photo_url",
            "waiver_signed_at",
            "signature",
            "age_group",
        ]

    def clean_first_name(self) -> str:
        """Reject names made only of whitespace."""
        value = self.cleaned_data["first_name"].strip()
        if not value:
            raise forms.ValidationError("First name is required.")
        return value

    def clean_last_name(self) -> str:
        """Reject names made only of whitespace."""
        value = self.cleaned_data["last_name"].strip()
        if not value:
            raise forms.ValidationError("Last name is required.")
        return value

    def clean(self) -> dict:
        """Require a typed signature whenever the waiver timestamp is present."""
        cleaned = super().clean()
        if cleaned.get("waiver_signed_at") and not (cleaned.get("signature") or "").strip():
            self.add_error("signature", "A typed signature is required when the waiver is accepted.")
        if not cleaned.get("position"):
            cleaned["position"] = "TBD"
        return cleaned


class ManualRegistrationForm(forms.Form):
    """Staff entry of a player who registered outside the online flow."""

    first_name = forms.CharField(max_length=100)
    last_name = forms.CharField(max_length=100)
    dob = forms.DateField()
    gender = forms.ChoiceField(choices=Registration.Gender.choices, initial=Registration.Gender.MALE)
    manual_parent_name = forms.CharField(max_length=200, required=False)
    manual_phone = forms.CharField(max_length=50, required=False)
    photo_url = forms.URLField(max_length=500, required=False, assume_scheme="https")
    age_group = forms.CharField(max_length=10, required=False)
    waiver_signed = forms.BooleanField(required=False, initial=True)


class PaymentStatusForm(forms.Form):
    """Staff override of a registration's payment status."""

    payment_status = forms.ChoiceField(choices=Registration.PaymentStatus.choices, required=False)
