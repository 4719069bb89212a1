"""
Domain services for the user directory, relationships and profile updates.

Each service is a plain object constructed by the caller (views build them
per request) so collaborators such as the image host can be swapped out in
tests.  Errors are raised as ``apps.accounts.exceptions`` types and turned
into responses at the view boundary.
"""

import logging
import uuid

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q

from apps.accounts.cloudinary_utils import COVER, PROFILE
from apps.accounts.exceptions import (
    AlreadyRelated,
    Conflict,
    InvalidInput,
    NotFollowing,
    NotFound,
    SelfReferenceError,
    Unauthorized,
)

from .models import Relationship

User = get_user_model()
logger = logging.getLogger(__name__)

# Image slot → User field holding its URL
SLOT_FIELDS = {
    PROFILE: "profile_image",
    COVER: "cover_image",
}


# ---------------------------------------------------------------------------
# User directory
# ---------------------------------------------------------------------------
class UserDirectory:
    """CRUD and search over user records."""

    SEARCH_FIELDS = ("username", "email", "full_name", "location")
    UPDATABLE_FIELDS = frozenset([
        "username",
        "full_name",
        "bio",
        "location",
        "profile_image",
        "cover_image",
    ])

    def all(self):
        return User.objects.prefetch_related(
            "outgoing_relationships", "incoming_relationships"
        )

    @staticmethod
    def parse_id(user_id):
        """Return ``user_id`` as a UUID, or raise ``InvalidInput``."""
        if isinstance(user_id, uuid.UUID):
            return user_id
        try:
            return uuid.UUID(str(user_id))
        except (TypeError, ValueError, AttributeError):
            raise InvalidInput("Malformed user identifier.")

    def get_by_id(self, user_id):
        try:
            return self.all().get(pk=self.parse_id(user_id))
        except User.DoesNotExist:
            raise NotFound()

    def get_by_username(self, username):
        try:
            return self.all().get(username=username)
        except User.DoesNotExist:
            raise NotFound()

    def ensure_email_available(self, email, *, exclude=None):
        qs = User.objects.filter(email__iexact=email)
        if exclude is not None:
            qs = qs.exclude(pk=exclude.pk)
        if qs.exists():
            raise Conflict("A user with this email already exists.")

    def ensure_username_available(self, username, *, exclude=None):
        qs = User.objects.filter(username=username)
        if exclude is not None:
            qs = qs.exclude(pk=exclude.pk)
        if qs.exists():
            raise Conflict("This username is already taken.")

    def create(self, *, email, password, full_name, username=None, **extra_fields):
        """
        Create a user with a hashed password.

        Raises ``Conflict`` if the email or username is already taken.
        """
        email = email.lower().strip()
        username = username or None
        self.ensure_email_available(email)
        if username:
            self.ensure_username_available(username)

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    email=email,
                    password=password,
                    full_name=full_name,
                    username=username,
                    **extra_fields,
                )
        except IntegrityError as exc:
            # Lost a race with a concurrent signup
            raise Conflict("A user with this email or username already exists.") from exc

        logger.info("Created user %s", user.pk)
        return user

    def search(self, query, exclude_id=None):
        """
        Case-insensitive substring search across username, email, full
        name and location.

        A blank query yields an empty queryset.  ``exclude_id`` (normally
        the caller) is never part of the result.
        """
        query = (query or "").strip()
        if not query:
            return User.objects.none()

        condition = Q()
        for field in self.SEARCH_FIELDS:
            condition |= Q(**{f"{field}__icontains": query})

        qs = self.all().filter(condition)
        if exclude_id is not None:
            qs = qs.exclude(pk=self.parse_id(exclude_id))
        return qs

    def update(self, user_id, fields):
        """
        Merge ``fields`` into the user record; unspecified fields are kept.

        A username change to one already in use raises ``Conflict``; the
        record is left untouched in that case.
        """
        user = self.get_by_id(user_id)
        unknown = set(fields) - self.UPDATABLE_FIELDS
        if unknown:
            raise InvalidInput(f"Fields cannot be updated: {', '.join(sorted(unknown))}.")

        changes = dict(fields)
        if "username" in changes:
            changes["username"] = changes["username"] or None
            if changes["username"] and changes["username"] != user.username:
                self.ensure_username_available(changes["username"], exclude=user)

        for field, value in changes.items():
            setattr(user, field, value)

        try:
            with transaction.atomic():
                user.save(update_fields=[*changes, "updated_at"])
        except IntegrityError as exc:
            raise Conflict("This username is already taken.") from exc

        return user

    def delete(self, user_id):
        user = self.get_by_id(user_id)
        user.delete()
        logger.info("Deleted user %s", user_id)


# ---------------------------------------------------------------------------
# Relationships
# ---------------------------------------------------------------------------
class RelationshipManager:
    """Follow / unfollow / connect edges between users."""

    def __init__(self, directory):
        self.directory = directory

    def _resolve_pair(self, user_id, target_id):
        user_pk = self.directory.parse_id(user_id)
        target_pk = self.directory.parse_id(target_id)
        if user_pk == target_pk:
            raise SelfReferenceError()
        return self.directory.get_by_id(user_pk), self.directory.get_by_id(target_pk)

    def follow(self, user_id, target_id):
        user, target = self._resolve_pair(user_id, target_id)
        _, created = Relationship.objects.get_or_create(
            source=user, target=target, kind=Relationship.Kind.FOLLOW
        )
        if not created:
            raise AlreadyRelated()
        logger.info("%s followed %s", user.pk, target.pk)
        return user

    def unfollow(self, user_id, target_id):
        user, target = self._resolve_pair(user_id, target_id)
        deleted, _ = Relationship.objects.filter(
            source=user, target=target, kind=Relationship.Kind.FOLLOW
        ).delete()
        if not deleted:
            raise NotFollowing()
        logger.info("%s unfollowed %s", user.pk, target.pk)
        return user

    def connect(self, user_id, target_id):
        user, target = self._resolve_pair(user_id, target_id)
        with transaction.atomic():
            _, created = Relationship.objects.get_or_create(
                source=user, target=target, kind=Relationship.Kind.CONNECTION
            )
            if not created:
                raise AlreadyRelated("Already connected with this user.")
            Relationship.objects.get_or_create(
                source=target, target=user, kind=Relationship.Kind.CONNECTION
            )
        logger.info("%s connected with %s", user.pk, target.pk)
        return user

    def following_of(self, user_id):
        return self._ids(
            Relationship.objects.filter(source_id=user_id, kind=Relationship.Kind.FOLLOW),
            "target_id",
        )

    def followers_of(self, user_id):
        return self._ids(
            Relationship.objects.filter(target_id=user_id, kind=Relationship.Kind.FOLLOW),
            "source_id",
        )

    def connections_of(self, user_id):
        return self._ids(
            Relationship.objects.filter(source_id=user_id, kind=Relationship.Kind.CONNECTION),
            "target_id",
        )

    @staticmethod
    def _ids(queryset, column):
        return [str(pk) for pk in queryset.values_list(column, flat=True)]


# ---------------------------------------------------------------------------
# Profile update workflow
# ---------------------------------------------------------------------------
class ProfileUpdateWorkflow:
    """
    Apply a caller's profile edits, replacing profile / cover images.

    New images are uploaded first and the old ones are deleted only after
    the record is saved, so a failed upload never loses the current image.
    Deletions are best-effort; upload failures abort the update.
    """

    def __init__(self, directory, image_host):
        self.directory = directory
        self.image_host = image_host

    def update(self, caller_id, fields, images=None):
        try:
            user = self.directory.get_by_id(caller_id)
        except NotFound:
            raise Unauthorized()

        changes = dict(fields)
        username = changes.get("username")
        if username and username != user.username:
            self.directory.ensure_username_available(username, exclude=user)

        images = {slot: data for slot, data in (images or {}).items() if data}
        for data in images.values():
            self.image_host.validate(data)

        uploaded = {}
        try:
            for slot, data in images.items():
                uploaded[slot] = self.image_host.upload(data, slot)
        except Exception:
            self._discard(uploaded.values())
            raise

        previous = [getattr(user, SLOT_FIELDS[slot]) for slot in uploaded]
        for slot, url in uploaded.items():
            changes[SLOT_FIELDS[slot]] = url

        try:
            updated = self.directory.update(user.pk, changes)
        except Exception:
            self._discard(uploaded.values())
            raise

        self._discard(url for url in previous if url)
        return updated

    def _discard(self, urls):
        for url in urls:
            self.image_host.delete(url)
