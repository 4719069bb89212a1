"""Relationship edges between users (follow and connection)."""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import F, Q


class Relationship(models.Model):
    """
    A directed edge ``source → target`` of a given kind.

    Followers / following / connection lists are read off this table, so
    "A follows B" and "B's followers contain A" are the same row.  A
    connection is mutual and stored as two rows, one per direction.
    Deleting either user cascades its edges away.
    """

    class Kind(models.TextChoices):
        FOLLOW = "follow", "Follow"
        CONNECTION = "connection", "Connection"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    source = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="outgoing_relationships",
    )
    target = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="incoming_relationships",
    )
    kind = models.CharField(max_length=20, choices=Kind.choices)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["source", "target", "kind"],
                name="unique_relationship_per_kind",
            ),
            models.CheckConstraint(
                condition=~Q(source=F("target")),
                name="relationship_not_self",
            ),
        ]
        indexes = [
            models.Index(fields=["target", "kind"], name="relationship_target_kind_idx"),
        ]

    def __str__(self):
        return f"{self.source_id} -{self.kind}-> {self.target_id}"
