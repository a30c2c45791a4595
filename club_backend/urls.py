"""
URL configuration for the club backend.

All API endpoints live under ``/api/``.  Authentication endpoints are
nested under ``/api/auth/``, billing under ``/api/payments/`` and the
back-office under ``/api/admin/``.
"""
from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView

from club_backend.views import index
from users.views import ProfileView

urlpatterns = [
    path("", index, name="index"),
    path("django-admin/", admin.site.urls),

    path("api/", RedirectView.as_view(pattern_name="swagger-ui", permanent=False)),

    # Swagger/Redoc
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),

    # Auth endpoints
    path("api/auth/", include("users.urls")),
    path("api/profile/", ProfileView.as_view(), name="profile"),

    path("api/", include("points.urls")),
    path("api/", include("events.urls")),
    path("api/payments/", include("payments.urls")),
    path("api/admin/", include("backoffice.urls")),
]
