"""
Serializers for signup and login.

Signup validates shape and password strength here; uniqueness of email and
username is decided by ``UserDirectory.create`` so a duplicate surfaces as
409 Conflict rather than a field error.
"""

from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.contrib.auth.validators import UnicodeUsernameValidator
from rest_framework import serializers

from apps.users.services import UserDirectory


# ---------------------------------------------------------------------------
# Signup
# ---------------------------------------------------------------------------
class SignupSerializer(serializers.Serializer):
    """
    Handles new-user registration (also used by ``POST /users/``).

    Accepts email, password, full name and optional username, bio and
    location.  Runs Django's built-in password validators.
    """

    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True, min_length=8, validators=[validate_password]
    )
    full_name = serializers.CharField(max_length=150)
    username = serializers.CharField(
        max_length=150,
        required=False,
        allow_blank=True,
        allow_null=True,
        validators=[UnicodeUsernameValidator()],
    )
    bio = serializers.CharField(max_length=500, required=False, allow_blank=True)
    location = serializers.CharField(max_length=150, required=False, allow_blank=True)

    def validate_email(self, value):
        """Normalise to lower case; uniqueness is checked on create."""
        return value.lower().strip()

    def validate_username(self, value):
        if not value:
            return None
        return value.strip() or None

    def create(self, validated_data):
        directory = self.context.get("directory") or UserDirectory()
        return directory.create(**validated_data)


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------
class LoginSerializer(serializers.Serializer):
    """
    Validates login credentials.  The view issues the session token; this
    serializer authenticates and returns the user.
    """

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        user = authenticate(
            self.context.get("request"),
            email=attrs["email"].lower().strip(),
            password=attrs["password"],
        )
        if user is None:
            raise serializers.ValidationError("Invalid email or password.")
        if not user.is_active:
            raise serializers.ValidationError("This account has been deactivated.")
        attrs["user"] = user
        return attrs
