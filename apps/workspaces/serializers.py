"""
apps.workspaces.serializers
~~~~~~~~~~~~~~~~~~~~~~~~~~~
I/O-only serializers for the Workspaces API.
No business logic; shape validation only.
"""
from rest_framework import serializers

from .models import Workspace


class WorkspaceSerializer(serializers.ModelSerializer):
    """Read serializer for a Workspace."""

    class Meta:
        model = Workspace
        fields = ["id", "name", "slug", "created_at", "updated_at"]
        read_only_fields = fields


class WorkspaceCreateSerializer(serializers.Serializer):
    """Validates POST /workspaces/ request body."""

    name = serializers.CharField(max_length=255)


class UserRoleSerializer(serializers.Serializer):
    """One member of a workspace and their role."""

    username = serializers.CharField()
    name = serializers.CharField(allow_blank=True)
    role = serializers.CharField()


class WorkspaceDetailSerializer(serializers.Serializer):
    """Response shape for GET /workspaces/{id}/."""

    workspace = WorkspaceSerializer()
    user_roles = UserRoleSerializer(many=True)
