"""
django-filter FilterSet for the user list.

Supports filtering by:
  - username (case-insensitive substring)
  - full_name (case-insensitive substring)
  - location (case-insensitive substring)
"""

from django.contrib.auth import get_user_model
from django_filters import rest_framework as filters

User = get_user_model()


class UserFilter(filters.FilterSet):
    """
    Filterable fields exposed as query parameters on GET /users/.

    Examples:
        ?location=berlin
        ?full_name=ada&username=lovelace
    """

    username = filters.CharFilter(lookup_expr="icontains")
    full_name = filters.CharFilter(lookup_expr="icontains")
    location = filters.CharFilter(lookup_expr="icontains")

    class Meta:
        model = User
        fields = ["username", "full_name", "location"]
