"""
apps.workspaces.models
~~~~~~~~~~~~~~~~~~~~~~
Workspace – container of applications – and the membership that grants a
user a role inside it.
"""
from django.conf import settings
from django.db import models
from django.utils.text import slugify


class Workspace(models.Model):
    """
    A group of applications shared by its members.

    Fields
    ------
    id
        Auto-incrementing integer primary key.  These ids are what the
        per-user recency lists store.
    name
        Human-readable unique name (e.g. ``"Acme Corp"``).
    slug
        URL-safe version of ``name``, auto-generated on first save.
    created_at / updated_at
        Automatic timestamps.
    """

    name = models.CharField(max_length=255, unique=True)
    slug = models.SlugField(
        max_length=255,
        unique=True,
        blank=True,
        help_text="URL-safe identifier auto-generated from the workspace name.",
    )
    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through="WorkspaceMembership",
        related_name="workspaces",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]
        verbose_name = "Workspace"
        verbose_name_plural = "Workspaces"

    def save(self, *args, **kwargs) -> None:
        """Auto-populate ``slug`` on first save."""
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"#{self.id} {self.name}" if self.id else self.name


class WorkspaceMembership(models.Model):
    """A user's role inside one workspace."""

    class Role(models.TextChoices):
        ADMINISTRATOR = "administrator", "Administrator"
        DEVELOPER = "developer", "Developer"
        VIEWER = "viewer", "App Viewer"

    workspace = models.ForeignKey(
        Workspace,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="workspace_memberships",
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.VIEWER,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["workspace", "id"]
        unique_together = [("workspace", "user")]
        verbose_name = "Workspace Membership"
        verbose_name_plural = "Workspace Memberships"

    def __str__(self) -> str:
        return f"{self.workspace.slug}/{self.user} [{self.role}]"
