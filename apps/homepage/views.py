"""
apps.homepage.views
~~~~~~~~~~~~~~~~~~~
GET /applications/home/ – the signed-in user's workspaces and applications.
"""
from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.homepage.services.application_fetcher import get_all_applications
from .serializers import UserHomepageSerializer


class UserHomepageView(APIView):
    """GET /applications/home/ – aggregate homepage for the current user."""

    @extend_schema(
        summary="Get Homepage",
        description=(
            "Lists every workspace the caller belongs to with its applications. "
            "Workspaces and applications are ordered by the caller's recency lists; "
            "Git-connected applications appear once, on their default branch. "
            "Release notes are included when the feed is reachable."
        ),
        responses={
            200: UserHomepageSerializer,
            401: OpenApiResponse(description="Not signed in."),
        },
        tags=["Applications"],
    )
    def get(self, request: Request) -> Response:
        homepage = get_all_applications(request.user)
        return Response(UserHomepageSerializer(homepage).data)
