"""
apps.users.models
~~~~~~~~~~~~~~~~~
UserData – per-user preferences that sit beside ``auth.User``.
"""
from django.conf import settings
from django.db import models


class UserData(models.Model):
    """
    Per-user state that drives homepage ordering and release-note badges.

    Fields
    ------
    user
        One-to-one link to the Django auth user.
    recently_used_workspace_ids
        Workspace primary keys, most recent first.  Used only as a sort hint;
        ids that no longer resolve are ignored by readers.
    recently_used_app_ids
        Application primary keys, most recent first.
    release_notes_viewed_version
        The platform version whose release notes the user has seen.  ``None``
        until the first homepage visit.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="user_data",
    )
    recently_used_workspace_ids = models.JSONField(default=list, blank=True)
    recently_used_app_ids = models.JSONField(default=list, blank=True)
    release_notes_viewed_version = models.CharField(
        max_length=50,
        null=True,
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "User Data"
        verbose_name_plural = "User Data"

    def __str__(self) -> str:
        return f"UserData({self.user_id})"
