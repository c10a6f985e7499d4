"""
apps.applications.admin
"""
from django.contrib import admin

from .models import Application, Page


class PageInline(admin.TabularInline):
    model = Page
    extra = 0
    readonly_fields = ["id"]


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "workspace", "is_public", "created_at"]
    list_filter = ["is_public", "workspace"]
    search_fields = ["name", "slug", "workspace__name"]
    readonly_fields = ["id", "created_at", "updated_at"]
    ordering = ["id"]
    inlines = [PageInline]
