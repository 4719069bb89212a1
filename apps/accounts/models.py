"""Custom User model with UUID primary key, email login and profile fields."""

import uuid

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.contrib.auth.validators import UnicodeUsernameValidator
from django.db import models

DEFAULT_BIO = "Hey there! I am using Uni-Tribe"


class UserManager(BaseUserManager):
    """Manager for a user model keyed on email rather than username."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("An email address is required.")
        email = self.normalize_email(email).lower()
        # Blank usernames are stored as NULL so they never collide
        if not extra_fields.get("username"):
            extra_fields["username"] = None
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.

    Uses UUID as primary key (avoids sequential ID enumeration) and email
    as the login identifier. Username is optional but unique when set.
    Follower / following / connection lists are not stored here; they are
    derived from ``apps.users.models.Relationship`` edges.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, blank=False)
    username = models.CharField(
        max_length=150,
        unique=True,
        null=True,
        blank=True,
        validators=[UnicodeUsernameValidator()],
        error_messages={"unique": "A user with that username already exists."},
    )
    full_name = models.CharField(max_length=150)
    bio = models.TextField(max_length=500, blank=True, default=DEFAULT_BIO)
    profile_image = models.URLField(
        max_length=500,
        blank=True,
        default="",
        help_text="Cloudinary URL for the user's profile image.",
    )
    cover_image = models.URLField(
        max_length=500,
        blank=True,
        default="",
        help_text="Cloudinary URL for the user's cover banner.",
    )
    location = models.CharField(max_length=150, blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)

    # Replaced by full_name
    first_name = None
    last_name = None

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["full_name"]

    class Meta:
        ordering = ["-date_joined"]

    def __str__(self):
        return f"{self.username or self.full_name} ({self.email})"
