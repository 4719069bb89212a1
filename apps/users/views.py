"""
ViewSet for the user directory, relationships and profile updates.

Key patterns:
  - Every route requires a valid bearer token (default authentication)
  - Writes to a user record are restricted to its owner (IsSelfOrReadOnly)
  - Views stay thin: each request builds its own service objects and the
    services raise typed API errors that DRF renders
"""

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.cloudinary_utils import CloudinaryImageHost
from apps.accounts.serializers import SignupSerializer

from .filters import UserFilter
from .permissions import IsSelfOrReadOnly
from .serializers import (
    ProfileUpdateSerializer,
    RelationshipTargetSerializer,
    UserSerializer,
)
from .services import ProfileUpdateWorkflow, RelationshipManager, UserDirectory


def get_image_host():
    """Image host used by profile updates (patched in tests)."""
    return CloudinaryImageHost.from_settings()


class UserViewSet(viewsets.ModelViewSet):
    """
    Users and their relationships.

    list     → GET    /api/v1/users/                     (filterable, sortable)
    create   → POST   /api/v1/users/
    read     → GET    /api/v1/users/{id}/
    update   → PUT    /api/v1/users/{id}/                (owner only, partial merge)
    update   → PATCH  /api/v1/users/{id}/                (owner only)
    delete   → DELETE /api/v1/users/{id}/                (owner only)
    me       → GET / PATCH /api/v1/users/me/
    search   → GET    /api/v1/users/search/?q=keyword
    username → GET    /api/v1/users/username/{username}/
    follow   → POST   /api/v1/users/follow/              {"target_id": "<uuid>"}
    unfollow → POST   /api/v1/users/unfollow/            {"target_id": "<uuid>"}
    connect  → POST   /api/v1/users/connect/             {"target_id": "<uuid>"}

    Query parameters on list:
      ?username=ada ?full_name=ada ?location=berlin  — substring filters
      ?ordering=-date_joined                         — sort
      ?page=1                                        — pagination

    Profile updates accept JSON (images as base64 data URIs) or multipart
    form data (images as files in ``profile`` / ``cover``).
    """

    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated, IsSelfOrReadOnly]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = UserFilter
    ordering_fields = ["date_joined", "username", "full_name"]
    ordering = ["-date_joined"]

    # ----- service wiring -----

    def get_directory(self):
        return UserDirectory()

    def get_relationships(self):
        return RelationshipManager(self.get_directory())

    def get_profile_workflow(self):
        return ProfileUpdateWorkflow(self.get_directory(), get_image_host())

    # ----- CRUD -----

    def get_queryset(self):
        return self.get_directory().all()

    def get_object(self):
        user = self.get_directory().get_by_id(self.kwargs["pk"])
        self.check_object_permissions(self.request, user)
        return user

    def create(self, request, *args, **kwargs):
        serializer = SignupSerializer(
            data=request.data, context={"directory": self.get_directory()}
        )
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        # PUT and PATCH both merge: omitted fields are never cleared
        user = self.get_object()
        return self._update_profile(request, user)

    def destroy(self, request, *args, **kwargs):
        user = self.get_object()
        self.get_directory().delete(user.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    def _update_profile(self, request, user):
        serializer = ProfileUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        fields, images = serializer.split()

        updated = self.get_profile_workflow().update(user.pk, fields, images)
        return Response(UserSerializer(updated).data)

    # ----- Custom actions -----

    @action(detail=False, methods=["get", "put", "patch"], url_path="me")
    def me(self, request):
        """GET / PATCH /api/v1/users/me/ — the caller's own record."""
        if request.method == "GET":
            user = self.get_directory().get_by_id(request.user.pk)
            return Response(UserSerializer(user).data)
        return self._update_profile(request, request.user)

    @action(detail=False, methods=["get"], url_path="search")
    def search(self, request):
        """
        GET /api/v1/users/search/?q=keyword

        Substring match on username, email, full name and location.  A
        blank query returns an empty page; the caller is never listed.
        """
        qs = self.get_directory().search(
            request.query_params.get("q", ""), exclude_id=request.user.pk
        )
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(UserSerializer(page, many=True).data)
        return Response(UserSerializer(qs, many=True).data)

    @action(detail=False, methods=["get"], url_path=r"username/(?P<username>[^/]+)")
    def by_username(self, request, username=None):
        """GET /api/v1/users/username/{username}/"""
        user = self.get_directory().get_by_username(username)
        return Response(UserSerializer(user).data)

    def _target_id(self, request):
        serializer = RelationshipTargetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data["target_id"]

    @action(detail=False, methods=["post"], url_path="follow")
    def follow(self, request):
        relationships = self.get_relationships()
        relationships.follow(request.user.pk, self._target_id(request))
        return Response(
            {
                "detail": "Now you are following this user.",
                "following": relationships.following_of(request.user.pk),
            },
            status=status.HTTP_200_OK,
        )

    @action(detail=False, methods=["post"], url_path="unfollow")
    def unfollow(self, request):
        relationships = self.get_relationships()
        relationships.unfollow(request.user.pk, self._target_id(request))
        return Response(
            {
                "detail": "You have unfollowed this user.",
                "following": relationships.following_of(request.user.pk),
            },
            status=status.HTTP_200_OK,
        )

    @action(detail=False, methods=["post"], url_path="connect")
    def connect(self, request):
        relationships = self.get_relationships()
        relationships.connect(request.user.pk, self._target_id(request))
        return Response(
            {
                "detail": "You are now connected with this user.",
                "connections": relationships.connections_of(request.user.pk),
            },
            status=status.HTTP_200_OK,
        )
