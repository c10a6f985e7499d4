"""
apps.workspaces.views
~~~~~~~~~~~~~~~~~~~~~
Thin DRF API views for workspaces.  All business logic is delegated to
:mod:`apps.workspaces.services.workspace_service`.

Endpoints
---------
POST   /workspaces/        – Create workspace (caller becomes administrator)
GET    /workspaces/{id}/   – Workspace with its member roles
"""
from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from common.session import get_current_user
from apps.workspaces.services import workspace_service
from .serializers import (
    WorkspaceCreateSerializer,
    WorkspaceDetailSerializer,
    WorkspaceSerializer,
)


class WorkspaceCreateView(APIView):
    """POST /workspaces/ – create a new workspace."""

    @extend_schema(
        summary="Create Workspace",
        request=WorkspaceCreateSerializer,
        responses={
            201: WorkspaceSerializer,
            400: OpenApiResponse(description="Validation error – name missing or blank."),
            401: OpenApiResponse(description="Not signed in."),
            409: OpenApiResponse(description="A workspace with that name already exists."),
        },
        tags=["Workspaces"],
    )
    def post(self, request: Request) -> Response:
        user = get_current_user(request)
        serializer = WorkspaceCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        workspace = workspace_service.create_workspace(
            name=serializer.validated_data["name"],
            owner=user,
        )
        return Response(
            WorkspaceSerializer(workspace).data,
            status=status.HTTP_201_CREATED,
        )


class WorkspaceDetailView(APIView):
    """GET /workspaces/{id}/ – workspace plus member roles."""

    @extend_schema(
        summary="Get Workspace",
        responses={
            200: WorkspaceDetailSerializer,
            401: OpenApiResponse(description="Not signed in."),
            403: OpenApiResponse(description="Caller is not a member."),
            404: OpenApiResponse(description="Workspace not found."),
        },
        tags=["Workspaces"],
    )
    def get(self, request: Request, workspace_id: str) -> Response:
        user = get_current_user(request)
        workspace = workspace_service.get_workspace(workspace_id, user)
        roles = workspace_service.get_user_roles_by_workspace([workspace.id])
        payload = {
            "workspace": workspace,
            "user_roles": roles.get(workspace.id, []),
        }
        return Response(WorkspaceDetailSerializer(payload).data)
