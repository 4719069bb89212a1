"""
Accounts URL configuration.

All endpoints are mounted under /api/v1/auth/ by the root URL config.
"""

from django.urls import path

from .views import LoginView, SignupView

urlpatterns = [
    path("signup/", SignupView.as_view(), name="auth-signup"),
    path("login/", LoginView.as_view(), name="auth-login"),
]
