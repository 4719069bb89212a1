"""
Bearer-token authentication for DRF.

A linear gate: no ``Authorization: Bearer`` header means no identity (the
``IsAuthenticated`` permission then answers 401); a header whose token
fails verification is rejected with 403 before the view runs.
"""

import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.authentication import BaseAuthentication, get_authorization_header

from .exceptions import InvalidTokenCredentials
from .tokens import ExpiredToken, TokenError, verify_token

User = get_user_model()
logger = logging.getLogger(__name__)

AUTH_HEADER_TYPE = "Bearer"


class BearerTokenAuthentication(BaseAuthentication):
    """Resolve ``request.user`` from a signed session token."""

    keyword = AUTH_HEADER_TYPE

    def authenticate(self, request):
        token = self.get_token(request)
        if token is None:
            return None

        try:
            identity = verify_token(token)
        except ExpiredToken:
            logger.info("Rejected expired token.")
            raise InvalidTokenCredentials("Token has expired.")
        except TokenError:
            logger.info("Rejected invalid token.")
            raise InvalidTokenCredentials()

        try:
            user = User.objects.get(pk=identity)
        except (User.DoesNotExist, DjangoValidationError, ValueError):
            raise InvalidTokenCredentials("Token does not belong to a known user.")

        if not user.is_active:
            raise InvalidTokenCredentials("This account has been deactivated.")

        return user, identity

    def get_token(self, request):
        """Return the raw token from the Authorization header, or None."""
        parts = get_authorization_header(request).split()
        if not parts or parts[0].lower() != self.keyword.lower().encode():
            return None
        if len(parts) == 1:
            # Scheme without a token is the same as no credentials
            return None
        if len(parts) != 2:
            raise InvalidTokenCredentials("Malformed Authorization header.")
        try:
            return parts[1].decode()
        except UnicodeError:
            raise InvalidTokenCredentials("Malformed Authorization header.")

    def authenticate_header(self, request):
        return self.keyword
