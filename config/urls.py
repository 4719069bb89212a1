"""Root URL configuration — all API routes are versioned under /api/v1/."""

from django.contrib import admin
from django.urls import include, path

from apps.accounts.views import StatusView

urlpatterns = [
    path("", StatusView.as_view(), name="status"),
    path("admin/", admin.site.urls),
    path("api/v1/auth/", include("apps.accounts.urls")),
    path("api/v1/", include("apps.users.urls")),
]
