"""Tests for the JSON views in django_club.registration.views."""

import datetime
import json
from unittest.mock import MagicMock, patch

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client, override_settings
from django.urls import reverse

from django_club.registration.models import Registration
from django_club.registration.services.checkout import CheckoutError

CHECKOUT_URL = "https://checkout.stripe.com/c/cs_test_view"


@pytest.fixture
def client():
    return Client()


@pytest.fixture
def mock_stripe_client():
    with patch("django_club.registration.services.checkout.StripeClient") as mock_cls:
        instance = MagicMock()
        instance.create_subscription_checkout_session.return_value = CHECKOUT_URL
        mock_cls.return_value = instance
        yield instance


def _post_json(client, body):
    return client.post(
        reverse("registration:create-checkout-session"),
        data=body if isinstance(body, str | bytes) else json.dumps(body),
        content_type="application/json",
    )


def _registration_data():
    return {
        "firstName": "Ama",
        "lastName": "Owusu",
        "dob": "2015-04-02",
        "gender": "Female",
        "photoUrl": "https://cdn.example.com/photos/ama.jpg",
        "waiverSignedAt": "2025-06-01T10:30:00Z",
        "signature": "Kofi Owusu",
    }


# =============================================================================
# CreateCheckoutSessionView
# =============================================================================


@pytest.mark.django_db
class TestCreateCheckoutSessionView:
    def test_new_registration_returns_url(self, client, mock_stripe_client):
        response = _post_json(client, {"registrationData": _registration_data()})

        assert response.status_code == 200
        assert response.json() == {"url": CHECKOUT_URL}
        registration = Registration.objects.get()
        assert registration.status == Registration.Status.PENDING
        assert registration.guardian is None

    def test_logged_in_guardian_owns_registration(self, client, mock_stripe_client, django_user_model):
        parent = django_user_model.objects.create_user(username="kofi", password="pw")
        client.force_login(parent)

        _post_json(client, {"registrationData": _registration_data()})

        assert Registration.objects.get().guardian == parent

    def test_resume_with_success_url(self, client, mock_stripe_client):
        registration = Registration.objects.create(first_name="Yaw", last_name="Mensah", dob=datetime.date(2012, 9, 15))

        response = _post_json(
            client,
            {"registrationId": str(registration.pk), "successUrl": "https://club.example.com/paid"},
        )

        assert response.status_code == 200
        kwargs = mock_stripe_client.create_subscription_checkout_session.call_args.kwargs
        assert kwargs["success_url"] == "https://club.example.com/paid"
        assert Registration.objects.count() == 1

    def test_unknown_registration_returns_404(self, client, mock_stripe_client):
        response = _post_json(client, {"registrationId": "424242"})

        assert response.status_code == 404
        assert response.json() == {"error": "Registration not found"}
        assert not Registration.objects.exists()

    def test_invalid_data_returns_400_with_fields(self, client, mock_stripe_client):
        data = _registration_data()
        data["firstName"] = ""

        response = _post_json(client, {"registrationData": data})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid registration data"
        assert "first_name" in body["fields"]
        assert not Registration.objects.exists()

    def test_malformed_json_returns_400(self, client, mock_stripe_client):
        response = _post_json(client, "{not json")
        assert response.status_code == 400
        assert response.json() == {"error": "Request body must be valid JSON"}

    def test_non_object_body_returns_400(self, client, mock_stripe_client):
        response = _post_json(client, [1, 2, 3])
        assert response.status_code == 400

    def test_non_string_success_url_returns_400(self, client, mock_stripe_client):
        response = _post_json(client, {"registrationData": _registration_data(), "successUrl": 12})
        assert response.status_code == 400
        assert not Registration.objects.exists()

    def test_checkout_error_returns_500(self, client):
        with patch(
            "django_club.registration.views.CheckoutService.start_checkout",
            side_effect=CheckoutError("Stripe is unavailable"),
        ):
            response = _post_json(client, {"registrationData": _registration_data()})

        assert response.status_code == 500
        assert response.json() == {"error": "Stripe is unavailable"}

    def test_get_not_allowed(self, client):
        response = client.get(reverse("registration:create-checkout-session"))
        assert response.status_code == 405


# =============================================================================
# UploadView
# =============================================================================


@pytest.mark.django_db
class TestUploadView:
    def _upload(self, client, *, category="photos", name="ama.jpg", content=b"\xff\xd8\xff"):
        data = {"category": category}
        if name is not None:
            data["file"] = SimpleUploadedFile(name, content, content_type="image/jpeg")
        return client.post(reverse("registration:upload"), data=data)

    def test_upload_returns_url(self, client):
        response = self._upload(client)

        assert response.status_code == 200
        url = response.json()["url"]
        assert url.startswith("http://testserver/media/photos/")
        assert url.endswith(".jpg")

    def test_missing_file_returns_400(self, client):
        response = self._upload(client, name=None)
        assert response.status_code == 400
        assert response.json() == {"error": "No file provided"}

    def test_unknown_category_returns_400(self, client):
        response = self._upload(client, category="avatars")
        assert response.status_code == 400
        assert response.json() == {"error": "Failed to upload file. Please try again."}

    def test_oversized_file_returns_400(self, client):
        club = {"stripe": {"secret_key": "sk_test_club123"}, "upload_max_bytes": 2}
        with override_settings(DJANGO_CLUB=club):
            response = self._upload(client)
        assert response.status_code == 400
        assert response.json() == {"error": "File is too large"}
