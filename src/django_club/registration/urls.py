"""URL configuration for the registration app.

Mount under an API prefix in the host project::

    urlpatterns = [
        path("api/", include("django_club.registration.urls")),
    ]
"""

from django.urls import path

from django_club.registration.views import CreateCheckoutSessionView, UploadView
from django_club.registration.webhooks import stripe_webhook

app_name = "registration"

urlpatterns = [
    path("create-checkout-session/", CreateCheckoutSessionView.as_view(), name="create-checkout-session"),
    path("uploads/", UploadView.as_view(), name="upload"),
    path("webhooks/stripe/", stripe_webhook, name="stripe-webhook"),
]
