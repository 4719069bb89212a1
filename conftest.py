"""
Root conftest — shared pytest fixtures and factory-boy factories.

All fixtures use the ``db`` marker implicitly via ``@pytest.mark.django_db``
on individual tests, or via the ``db`` fixture where noted.
"""

import pytest
from rest_framework.test import APIClient

import factory
from django.contrib.auth import get_user_model

from apps.accounts.tokens import issue_token
from apps.users.models import Relationship

User = get_user_model()


# ===================================================================
# Factories
# ===================================================================

class UserFactory(factory.django.DjangoModelFactory):
    """Create a User with a hashed password and unique username/email."""

    class Meta:
        model = User
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f"testuser{n}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    full_name = factory.Sequence(lambda n: f"Test User {n}")
    password = factory.PostGeneration(
        lambda obj, create, extracted, **kw: obj.set_password(extracted or "TestPass123!")
        or obj.save()
    )


class RelationshipFactory(factory.django.DjangoModelFactory):
    """Create a follow edge between two fresh users."""

    class Meta:
        model = Relationship

    source = factory.SubFactory(UserFactory)
    target = factory.SubFactory(UserFactory)
    kind = Relationship.Kind.FOLLOW


class FakeImageHost:
    """In-memory stand-in for ``CloudinaryImageHost``."""

    def __init__(self, *, fail_upload=False, fail_delete=False):
        self.fail_upload = fail_upload
        self.fail_delete = fail_delete
        self.uploads = []
        self.deleted = []
        self.validated = []

    def validate(self, image):
        self.validated.append(image)

    def upload(self, image, slot):
        if self.fail_upload:
            from apps.accounts.exceptions import UpstreamFailure

            raise UpstreamFailure()
        url = f"https://res.cloudinary.com/test-cloud/image/upload/v1/{slot}-{len(self.uploads)}.webp"
        self.uploads.append((slot, url))
        return url

    def delete(self, image_url):
        self.deleted.append(image_url)
        return not self.fail_delete


# ===================================================================
# Fixtures
# ===================================================================

@pytest.fixture
def api_client():
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture
def user(db):
    """A persisted User instance (password: TestPass123!)."""
    return UserFactory()


@pytest.fixture
def other_user(db):
    """A second user for cross-user tests."""
    return UserFactory()


@pytest.fixture
def auth_client(user):
    """Authenticated DRF client for ``user``."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def token_client(user):
    """Client sending a real ``Authorization: Bearer`` header for ``user``."""
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(user.pk)}")
    return client


@pytest.fixture
def image_host():
    """Fake image host injected into profile updates."""
    return FakeImageHost()
