"""
apps.applications.models
~~~~~~~~~~~~~~~~~~~~~~~~
Application – a low-code app owned by a workspace – and its Pages.
"""
from django.db import models
from django.utils.text import slugify

from apps.workspaces.models import Workspace


class Application(models.Model):
    """
    An application inside a :class:`~apps.workspaces.models.Workspace`.

    A Git-connected application is stored as one row per branch.  Every row
    carries ``git_metadata``; only the default-branch row is shown on the
    homepage (see :mod:`apps.applications.visibility`).

    Fields
    ------
    git_metadata
        ``None`` for applications not connected to Git, otherwise a dict
        with ``branchName``, ``defaultBranchName``, ``defaultApplicationId``
        and ``remoteUrl`` keys.  Any of them may be missing on rows left
        behind by a failed connect or branch-creation flow.
    pages / published_pages
        Ordered lists of ``{"id": <page pk>, "isDefault": bool}``
        references for edit mode and view mode respectively.  Exactly one
        entry per list is normally marked default.
    """

    workspace = models.ForeignKey(
        Workspace,
        on_delete=models.CASCADE,
        related_name="applications",
    )
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, blank=True)
    git_metadata = models.JSONField(
        null=True,
        blank=True,
        help_text="Git branch metadata; null when the app is not Git-connected.",
    )
    pages = models.JSONField(default=list, blank=True)
    published_pages = models.JSONField(default=list, blank=True)
    is_public = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]
        verbose_name = "Application"
        verbose_name_plural = "Applications"

    def save(self, *args, **kwargs) -> None:
        """Auto-populate ``slug`` on first save."""
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        branch = (self.git_metadata or {}).get("branchName")
        suffix = f" @{branch}" if branch else ""
        return f"{self.workspace_id}/{self.name}{suffix}"


class Page(models.Model):
    """
    A page of an :class:`Application`.

    The unpublished fields describe the page as edited; the published
    fields are ``None`` until the application is deployed.
    """

    application = models.ForeignKey(
        Application,
        on_delete=models.CASCADE,
        related_name="page_records",
    )
    unpublished_name = models.CharField(max_length=255)
    unpublished_slug = models.SlugField(max_length=255, blank=True)
    published_name = models.CharField(max_length=255, null=True, blank=True)
    published_slug = models.SlugField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["application", "id"]
        verbose_name = "Page"
        verbose_name_plural = "Pages"

    def save(self, *args, **kwargs) -> None:
        """Derive missing slugs from the page names."""
        if not self.unpublished_slug:
            self.unpublished_slug = slugify(self.unpublished_name)
        if self.published_name and not self.published_slug:
            self.published_slug = slugify(self.published_name)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.application_id}/{self.unpublished_slug}"
