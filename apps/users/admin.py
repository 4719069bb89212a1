"""Admin configuration for the users app."""

from django.contrib import admin

from .models import Relationship


@admin.register(Relationship)
class RelationshipAdmin(admin.ModelAdmin):
    list_display = ("source", "kind", "target", "created_at")
    list_filter = ("kind",)
    search_fields = ("source__email", "source__username", "target__email", "target__username")
    raw_id_fields = ("source", "target")
    readonly_fields = ("created_at",)
