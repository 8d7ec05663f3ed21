"""JSON views for the registration app.

``CreateCheckoutSessionView`` is the server side of the intake wizard's final
step; ``UploadView`` backs the wizard's document and photo fields. Both answer
JSON so the single-page front end can surface errors inline.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from django_club.registration.services.checkout import (
    CheckoutError,
    CheckoutService,
    InvalidRegistrationData,
    RegistrationNotFound,
)
from django_club.registration.uploads import upload_file
from django_club.settings import get_config

if TYPE_CHECKING:
    from django.http import HttpRequest

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name="dispatch")
class CreateCheckoutSessionView(View):
    """Create (or resume) a registration and return a hosted checkout URL.

    Request body::

        {"registrationData": {...}} | {"registrationId": "42"}, optional "successUrl"

    Responses: ``{"url": ...}`` on success; ``{"error": ...}`` with 400 for a
    malformed body or invalid data, 404 for an unknown registration id, and
    500 for persistence or payment processor failures.
    """

    http_method_names = ["post"]

    def post(self, request: HttpRequest, **kwargs: str) -> JsonResponse:  # noqa: ARG002
        """Handle the checkout request.

        Args:
            request: The incoming HTTP request with a JSON body.
            **kwargs: URL keyword arguments (unused).

        Returns:
            A JSON response with the checkout URL or an error message.
        """
        try:
            body = json.loads(request.body or b"{}")
        except ValueError:
            return JsonResponse({"error": "Request body must be valid JSON"}, status=400)
        if not isinstance(body, dict):
            return JsonResponse({"error": "Request body must be a JSON object"}, status=400)

        success_url = body.get("successUrl")
        if success_url is not None and not isinstance(success_url, str):
            return JsonResponse({"error": "successUrl must be a string"}, status=400)

        try:
            result = CheckoutService.start_checkout(
                registration_data=body.get("registrationData"),
                registration_id=body.get("registrationId"),
                success_url=success_url,
                guardian=request.user if hasattr(request, "user") else None,
            )
        except RegistrationNotFound as exc:
            return JsonResponse({"error": str(exc)}, status=404)
        except InvalidRegistrationData as exc:
            return JsonResponse({"error": str(exc), "fields": exc.errors}, status=400)
        except CheckoutError as exc:
            return JsonResponse({"error": str(exc)}, status=500)

        return JsonResponse({"url": result.url})


@method_decorator(csrf_exempt, name="dispatch")
class UploadView(View):
    """Store one intake file and return its public URL.

    Expects a multipart POST with ``file`` and ``category`` (``photos`` or
    ``documents``). The returned URL is absolute so that it passes ``photo_url``
    validation when the wizard submits it. Upload failures answer 400 with
    ``{"error": ...}`` so the wizard keeps the step gate closed.
    """

    http_method_names = ["post"]

    def post(self, request: HttpRequest, **kwargs: str) -> JsonResponse:  # noqa: ARG002
        """Handle a single file upload."""
        file = request.FILES.get("file")
        if file is None:
            return JsonResponse({"error": "No file provided"}, status=400)
        if file.size > get_config().upload_max_bytes:
            return JsonResponse({"error": "File is too large"}, status=400)

        url = upload_file(file, request.POST.get("category", ""))
        if url is None:
            return JsonResponse({"error": "Failed to upload file. Please try again."}, status=400)
        return JsonResponse({"url": request.build_absolute_uri(url)})
