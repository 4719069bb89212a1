"""
Views for signup, login and the service status probe.

Session tokens are issued by ``apps.accounts.tokens``; everything under
``/api/v1/users/`` is guarded by ``BearerTokenAuthentication``.
"""

import logging

from django.conf import settings
from django.utils import timezone
from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.users.serializers import UserSerializer

from .serializers import LoginSerializer, SignupSerializer
from .tokens import issue_token

logger = logging.getLogger(__name__)


def _session_payload(user):
    return {
        "user": UserSerializer(user).data,
        "token": issue_token(user.pk),
    }


# ---------------------------------------------------------------------------
# Signup
# ---------------------------------------------------------------------------
class SignupView(generics.CreateAPIView):
    """
    POST /api/v1/auth/signup/

    Creates a new user account and returns a session token so the user is
    logged in immediately after registration.
    """

    serializer_class = SignupSerializer
    permission_classes = [AllowAny]
    authentication_classes = []

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info("New signup: %s", user.pk)
        return Response(_session_payload(user), status=status.HTTP_201_CREATED)


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------
class LoginView(APIView):
    """
    POST /api/v1/auth/login/

    Authenticates email + password and returns a session token together
    with the user profile.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]

        logger.info("Login: %s", user.pk)
        return Response(_session_payload(user), status=status.HTTP_200_OK)


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------
class StatusView(APIView):
    """GET / — liveness probe."""

    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response(
            {
                "message": "App is running",
                "time_zone": settings.TIME_ZONE,
                "time": timezone.now().isoformat(),
            }
        )
