"""Tests for the bearer-token authentication gate."""

from datetime import datetime, timedelta, timezone

import pytest
from rest_framework import status
from rest_framework.test import APIClient

from apps.accounts.tokens import issue_token
from apps.users.models import Relationship

PROTECTED_URL = "/api/v1/users/me/"


def _client_with(header):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=header)
    return client


@pytest.mark.django_db
class TestBearerTokenAuthentication:

    def test_valid_token(self, token_client, user):
        r = token_client.get(PROTECTED_URL)
        assert r.status_code == status.HTTP_200_OK
        assert r.data["id"] == str(user.pk)

    def test_missing_header_is_401(self, api_client):
        r = api_client.get(PROTECTED_URL)
        assert r.status_code == status.HTTP_401_UNAUTHORIZED
        assert r["WWW-Authenticate"] == "Bearer"

    def test_other_scheme_is_401(self):
        r = _client_with("Basic dXNlcjpwYXNz").get(PROTECTED_URL)
        assert r.status_code == status.HTTP_401_UNAUTHORIZED

    def test_tampered_token_is_403(self, user):
        token = issue_token(user.pk)
        forged = token.rsplit(".", 1)[0] + ".invalidsignature"
        r = _client_with(f"Bearer {forged}").get(PROTECTED_URL)
        assert r.status_code == status.HTTP_403_FORBIDDEN

    def test_wrong_secret_is_403(self, user):
        token = issue_token(user.pk, secret="not-the-server-secret")
        r = _client_with(f"Bearer {token}").get(PROTECTED_URL)
        assert r.status_code == status.HTTP_403_FORBIDDEN

    def test_expired_token_is_403(self, user):
        issued = datetime.now(timezone.utc) - timedelta(days=3)
        token = issue_token(user.pk, ttl=timedelta(days=1), now=issued)
        r = _client_with(f"Bearer {token}").get(PROTECTED_URL)
        assert r.status_code == status.HTTP_403_FORBIDDEN
        assert "expired" in r.data["detail"]

    def test_unknown_user_is_403(self, user):
        token = issue_token("00000000-0000-0000-0000-000000000000")
        r = _client_with(f"Bearer {token}").get(PROTECTED_URL)
        assert r.status_code == status.HTTP_403_FORBIDDEN

    def test_inactive_user_is_403(self, user):
        user.is_active = False
        user.save()
        r = _client_with(f"Bearer {issue_token(user.pk)}").get(PROTECTED_URL)
        assert r.status_code == status.HTTP_403_FORBIDDEN

    def test_scheme_without_token_is_401(self):
        r = _client_with("Bearer").get(PROTECTED_URL)
        assert r.status_code == status.HTTP_401_UNAUTHORIZED
        assert r["WWW-Authenticate"] == "Bearer"

    def test_malformed_header_is_403(self):
        r = _client_with("Bearer a b").get(PROTECTED_URL)
        assert r.status_code == status.HTTP_403_FORBIDDEN

    def test_rejected_token_has_no_side_effects(self, user, other_user):
        issued = datetime.now(timezone.utc) - timedelta(days=3)
        token = issue_token(user.pk, ttl=timedelta(days=1), now=issued)
        r = _client_with(f"Bearer {token}").post(
            "/api/v1/users/follow/", {"target_id": str(other_user.pk)}, format="json"
        )
        assert r.status_code == status.HTTP_403_FORBIDDEN
        assert not Relationship.objects.exists()
