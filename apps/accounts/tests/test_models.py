"""Tests for the custom User model."""

import uuid

import pytest
from django.contrib.auth import get_user_model
from django.db import IntegrityError

from apps.accounts.models import DEFAULT_BIO

User = get_user_model()


@pytest.mark.django_db
class TestUserModel:
    """Model-level tests: fields, defaults, constraints, __str__."""

    def test_create_user(self):
        user = User.objects.create_user(
            email="model@example.com",
            password="Pass1234!",
            full_name="Model User",
            username="modeluser",
        )
        assert isinstance(user.pk, uuid.UUID)
        assert user.email == "model@example.com"
        assert user.check_password("Pass1234!")
        assert user.password != "Pass1234!"

    def test_email_normalised(self):
        user = User.objects.create_user(
            email="Mixed@Example.COM", password="x", full_name="M"
        )
        assert user.email == "mixed@example.com"

    def test_email_required(self):
        with pytest.raises(ValueError):
            User.objects.create_user(email="", password="x", full_name="No Email")

    def test_email_unique(self):
        User.objects.create_user(email="dup@example.com", password="x", full_name="A")
        with pytest.raises(IntegrityError):
            User.objects.create_user(email="dup@example.com", password="x", full_name="B")

    def test_username_unique(self):
        User.objects.create_user(email="a@x.com", password="x", full_name="A", username="same")
        with pytest.raises(IntegrityError):
            User.objects.create_user(email="b@x.com", password="x", full_name="B", username="same")

    def test_username_optional_and_not_colliding(self):
        u1 = User.objects.create_user(email="n1@x.com", password="x", full_name="A")
        u2 = User.objects.create_user(email="n2@x.com", password="x", full_name="B", username="")
        assert u1.username is None
        assert u2.username is None

    def test_defaults(self):
        user = User.objects.create_user(email="d@x.com", password="x", full_name="D")
        assert user.bio == DEFAULT_BIO
        assert user.profile_image == ""
        assert user.cover_image == ""
        assert user.location == ""

    def test_str_representation(self):
        user = User.objects.create_user(
            email="str@example.com", password="x", full_name="Str User", username="struser"
        )
        assert str(user) == "struser (str@example.com)"

    def test_str_falls_back_to_full_name(self):
        user = User.objects.create_user(email="fn@x.com", password="x", full_name="Ada L")
        assert str(user) == "Ada L (fn@x.com)"

    def test_create_superuser(self):
        admin = User.objects.create_superuser(email="root@x.com", password="x", full_name="Root")
        assert admin.is_staff and admin.is_superuser

    def test_ordering_by_date_joined_desc(self):
        u1 = User.objects.create_user(email="f@x.com", password="x", full_name="First")
        u2 = User.objects.create_user(email="s@x.com", password="x", full_name="Second")
        ordered = list(User.objects.filter(pk__in=[u1.pk, u2.pk]))
        assert ordered[0] == u2  # most recent first
