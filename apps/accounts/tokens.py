"""
Session token issuing and verification.

Tokens are HS256-signed JWTs carrying the user's identifier and an expiry.
There is no revocation list: a token stays valid until ``exp`` regardless
of server-side state, so keep ``JWT_ACCESS_TOKEN_TTL`` modest.
"""

import logging
from datetime import datetime, timezone

import jwt
from django.conf import settings

logger = logging.getLogger(__name__)

IDENTITY_CLAIM = "user_id"


class TokenError(Exception):
    """Base class for token verification failures."""


class InvalidToken(TokenError):
    """Malformed, tampered with, or missing the identity claim."""


class ExpiredToken(TokenError):
    """Signature is valid but the token is past its expiry."""


def issue_token(identity, *, secret=None, ttl=None, now=None):
    """
    Return a signed token for ``identity``.

    Parameters
    ----------
    identity : uuid.UUID | str
        The user identifier embedded in the ``user_id`` claim.
    secret : str | None
        Signing key; defaults to ``settings.JWT_SECRET_KEY``.
    ttl : datetime.timedelta | None
        Lifetime; defaults to ``settings.JWT_ACCESS_TOKEN_TTL``.
    now : datetime.datetime | None
        Issue time, for deterministic output in tests.
    """
    if secret is None:
        secret = settings.JWT_SECRET_KEY
    if ttl is None:
        ttl = settings.JWT_ACCESS_TOKEN_TTL
    issued_at = now if now is not None else datetime.now(timezone.utc)

    payload = {
        IDENTITY_CLAIM: str(identity),
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + ttl).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def verify_token(token, *, secret=None):
    """
    Verify ``token`` and return the identity it carries.

    Raises
    ------
    ExpiredToken
        If the token is past its expiry.
    InvalidToken
        If the token is malformed, its signature does not match, or it has
        no identity claim.
    """
    if secret is None:
        secret = settings.JWT_SECRET_KEY
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", IDENTITY_CLAIM]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise ExpiredToken("Token has expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidToken("Invalid token.") from exc

    return payload[IDENTITY_CLAIM]
