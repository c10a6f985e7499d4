"""
apps.applications.views
~~~~~~~~~~~~~~~~~~~~~~~
POST /applications/{id}/recent/ – record that the caller opened an application.
"""
from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from common.session import get_current_user
from apps.applications.services import get_application_for_member
from apps.users import services as user_services


class ApplicationRecentView(APIView):
    """Moves the application and its workspace to the front of the recency lists."""

    @extend_schema(
        summary="Record Recently Used Application",
        request=None,
        responses={
            204: OpenApiResponse(description="Recency lists updated."),
            401: OpenApiResponse(description="Not signed in."),
            403: OpenApiResponse(description="Caller is not a member of the workspace."),
            404: OpenApiResponse(description="Application not found."),
        },
        tags=["Applications"],
    )
    def post(self, request: Request, application_id: str) -> Response:
        user = get_current_user(request)
        application = get_application_for_member(application_id, user)
        user_services.record_recent_application(user, application)
        return Response(status=status.HTTP_204_NO_CONTENT)
