"""
apps.users.admin
"""
from django.contrib import admin

from .models import UserData


@admin.register(UserData)
class UserDataAdmin(admin.ModelAdmin):
    list_display = ["id", "user", "release_notes_viewed_version", "updated_at"]
    search_fields = ["user__username", "user__email"]
    readonly_fields = ["id", "created_at", "updated_at"]
    ordering = ["id"]
