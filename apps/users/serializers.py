"""
Serializers for user records, profile updates and relationship requests.

The password hash is never part of any representation.
"""

from django.contrib.auth import get_user_model
from django.contrib.auth.validators import UnicodeUsernameValidator
from django.core.files.uploadedfile import UploadedFile
from rest_framework import serializers

from .models import Relationship

User = get_user_model()


# ---------------------------------------------------------------------------
# User (read)
# ---------------------------------------------------------------------------
class UserSerializer(serializers.ModelSerializer):
    """
    Public representation of a user.

    ``followers``, ``following`` and ``connections`` are lists of user IDs
    read from the relationship edges (prefetched by ``UserDirectory.all``).
    """

    followers = serializers.SerializerMethodField()
    following = serializers.SerializerMethodField()
    connections = serializers.SerializerMethodField()
    created_at = serializers.DateTimeField(source="date_joined", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "full_name",
            "bio",
            "profile_image",
            "cover_image",
            "location",
            "followers",
            "following",
            "connections",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_followers(self, obj):
        return [
            str(edge.source_id)
            for edge in obj.incoming_relationships.all()
            if edge.kind == Relationship.Kind.FOLLOW
        ]

    def get_following(self, obj):
        return [
            str(edge.target_id)
            for edge in obj.outgoing_relationships.all()
            if edge.kind == Relationship.Kind.FOLLOW
        ]

    def get_connections(self, obj):
        return [
            str(edge.target_id)
            for edge in obj.outgoing_relationships.all()
            if edge.kind == Relationship.Kind.CONNECTION
        ]


# ---------------------------------------------------------------------------
# Profile update
# ---------------------------------------------------------------------------
class ImagePayloadField(serializers.Field):
    """
    Accepts an uploaded file (multipart) or a base64 ``data:`` URI (JSON).

    Type and size checks happen in the image host, right before upload.
    """

    default_error_messages = {
        "invalid": "Expected an image file or a base64 data URI.",
    }

    def to_internal_value(self, data):
        if isinstance(data, UploadedFile):
            return data
        if isinstance(data, str):
            return data.strip() or None
        self.fail("invalid")

    def to_representation(self, value):
        return None


class ProfileUpdateSerializer(serializers.Serializer):
    """
    Partial profile update.  Every field is optional; omitted fields are
    left untouched.  ``profile`` and ``cover`` carry replacement images.
    """

    username = serializers.CharField(
        max_length=150,
        required=False,
        allow_blank=True,
        allow_null=True,
        validators=[UnicodeUsernameValidator()],
    )
    full_name = serializers.CharField(max_length=150, required=False)
    bio = serializers.CharField(max_length=500, required=False, allow_blank=True)
    location = serializers.CharField(max_length=150, required=False, allow_blank=True)
    profile = ImagePayloadField(required=False, allow_null=True, write_only=True)
    cover = ImagePayloadField(required=False, allow_null=True, write_only=True)

    IMAGE_FIELDS = ("profile", "cover")

    def split(self):
        """Return ``(field_changes, images)`` from validated data."""
        data = dict(self.validated_data)
        images = {name: data.pop(name) for name in self.IMAGE_FIELDS if name in data}
        return data, images


# ---------------------------------------------------------------------------
# Relationship requests
# ---------------------------------------------------------------------------
class RelationshipTargetSerializer(serializers.Serializer):
    """Body of follow / unfollow / connect requests."""

    target_id = serializers.UUIDField()
