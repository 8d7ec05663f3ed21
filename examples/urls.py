"""URL configuration for the example development server."""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView

urlpatterns = [
    path("", RedirectView.as_view(pattern_name="admin:index"), name="root"),
    path("admin/", admin.site.urls),
    path("api/", include("django_club.registration.urls")),
    *static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT),
]
