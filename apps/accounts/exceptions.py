"""
Error taxonomy shared by the accounts and users apps.

Every domain error is a DRF ``APIException`` so services can raise them
directly and the view boundary renders ``{"detail": ...}`` with the right
status code.  The catch-all for everything else lives in ``handlers``.
"""

from rest_framework import exceptions, status


class Unauthorized(exceptions.NotAuthenticated):
    default_detail = "Unauthorized."


class InvalidTokenCredentials(exceptions.PermissionDenied):
    """The bearer token was present but failed verification."""

    default_detail = "Invalid token."
    default_code = "invalid_token"


class NotFound(exceptions.NotFound):
    default_detail = "User not found."


class InvalidInput(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "invalid"


class Conflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "conflict"


class UpstreamFailure(exceptions.APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Image upload failed. Please try again later."
    default_code = "upstream_failure"


# ---------------------------------------------------------------------------
# Relationship errors
# ---------------------------------------------------------------------------
class SelfReferenceError(InvalidInput):
    default_detail = "You cannot follow or connect with yourself."
    default_code = "self_reference"


class AlreadyRelated(Conflict):
    default_detail = "Already following this user."
    default_code = "already_related"


class NotFollowing(InvalidInput):
    default_detail = "You are not following this user."
    default_code = "not_following"

