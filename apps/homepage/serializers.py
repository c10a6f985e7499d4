"""
apps.homepage.serializers
~~~~~~~~~~~~~~~~~~~~~~~~~
Response shapes for GET /applications/home/.  Read-only; they render the
dataclasses built by :mod:`apps.homepage.services.application_fetcher`.
"""
from rest_framework import serializers

from apps.workspaces.serializers import UserRoleSerializer, WorkspaceSerializer


class HomepageUserSerializer(serializers.Serializer):
    id = serializers.IntegerField(source="pk")
    username = serializers.CharField(source="get_username")
    email = serializers.EmailField()
    name = serializers.CharField(source="get_full_name")


class PageRefSerializer(serializers.Serializer):
    id = serializers.CharField()
    is_default = serializers.BooleanField()
    slug = serializers.CharField(allow_blank=True)


class HomepageApplicationSerializer(serializers.Serializer):
    id = serializers.CharField()
    workspace_id = serializers.IntegerField()
    name = serializers.CharField()
    slug = serializers.CharField(allow_blank=True)
    is_public = serializers.BooleanField()
    git_metadata = serializers.JSONField(allow_null=True)
    pages = PageRefSerializer(many=True)
    published_pages = PageRefSerializer(many=True)


class WorkspaceApplicationsSerializer(serializers.Serializer):
    workspace = WorkspaceSerializer()
    applications = HomepageApplicationSerializer(many=True)
    user_roles = UserRoleSerializer(many=True)


class ReleaseNodeSerializer(serializers.Serializer):
    tag_name = serializers.CharField()
    name = serializers.CharField(allow_blank=True)
    url = serializers.CharField(allow_blank=True)
    published_at = serializers.CharField(allow_null=True)


class UserHomepageSerializer(serializers.Serializer):
    """Full homepage payload."""

    user = HomepageUserSerializer()
    workspace_applications = WorkspaceApplicationsSerializer(many=True)
    release_items = ReleaseNodeSerializer(many=True)
    new_releases_count = serializers.CharField(allow_blank=True)
