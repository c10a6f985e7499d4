"""
apps.workspaces.admin
"""
from django.contrib import admin

from .models import Workspace, WorkspaceMembership


class WorkspaceMembershipInline(admin.TabularInline):
    model = WorkspaceMembership
    extra = 0


@admin.register(Workspace)
class WorkspaceAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "slug", "created_at"]
    search_fields = ["name", "slug"]
    readonly_fields = ["id", "slug", "created_at", "updated_at"]
    ordering = ["id"]
    inlines = [WorkspaceMembershipInline]

    def get_fields(self, request, obj=None):
        """Show the ID at the top of the detail form."""
        fields = super().get_fields(request, obj)
        if obj and "id" in fields:
            fields = list(fields)
            fields.remove("id")
            fields.insert(0, "id")
        return fields


@admin.register(WorkspaceMembership)
class WorkspaceMembershipAdmin(admin.ModelAdmin):
    list_display = ["workspace", "user", "role", "created_at"]
    list_filter = ["role", "workspace"]
    search_fields = ["workspace__name", "user__username", "user__email"]
    ordering = ["workspace", "id"]
