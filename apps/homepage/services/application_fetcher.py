"""
apps.homepage.services.application_fetcher
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Builds the signed-in user's homepage: every workspace they belong to, each
with the applications they can open, ordered by what they used last.

Pipeline
--------
1. Reject anonymous users.
2. Load the user's :class:`~apps.users.models.UserData` (empty if absent).
3. Resolve the user's workspace memberships.
4. List the homepage-visible applications of those workspaces and sort them
   by the application recency list.
5. Group them by workspace.  Recently used workspaces come first, then the
   remaining memberships.  Workspaces without applications are kept.
6. Fill in the slug of each application's default edit and view page.
7. Attach release notes and the "new releases" badge count.  A failing
   feed never fails the homepage.
8. Mark the current release notes as seen for first-time visitors.

Public API
----------
get_all_applications(user, release_notes=None) -> UserHomepage
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field

import structlog

from common.session import require_signed_in
from apps.applications.models import Application, Page
from apps.applications.services import (
    find_pages_by_application_ids,
    list_homepage_applications,
)
from apps.applications.visibility import application_id_for_response
from apps.homepage.services.recency import prioritise_ids, sort_by_recency
from apps.release_notes.services import (
    ReleaseNode,
    ReleaseNotesService,
    ReleaseNotesUnavailableError,
)
from apps.users import services as user_services
from apps.users.models import UserData
from apps.workspaces.models import Workspace
from apps.workspaces.services import workspace_service

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class PageRef:
    """An entry of ``Application.pages`` / ``published_pages`` with its resolved slug."""

    id: int | str
    is_default: bool = False
    slug: str = ""

    @classmethod
    def from_stored(cls, ref: dict) -> "PageRef":
        return cls(id=ref.get("id"), is_default=bool(ref.get("isDefault")))


@dataclass
class HomepageApplication:
    """
    An application as listed on the homepage.

    ``id`` is the client-facing id (the default application id for Git
    branches); ``row_id`` is the primary key of the row that was listed and
    is what pages are attached to.
    """

    id: int | str
    row_id: int
    workspace_id: int
    name: str
    slug: str
    is_public: bool
    git_metadata: dict | None
    pages: list[PageRef] = field(default_factory=list)
    published_pages: list[PageRef] = field(default_factory=list)

    @classmethod
    def from_model(cls, application: Application) -> "HomepageApplication":
        return cls(
            id=application_id_for_response(application.pk, application.git_metadata),
            row_id=application.pk,
            workspace_id=application.workspace_id,
            name=application.name,
            slug=application.slug,
            is_public=application.is_public,
            git_metadata=application.git_metadata,
            pages=[PageRef.from_stored(ref) for ref in application.pages or []],
            published_pages=[PageRef.from_stored(ref) for ref in application.published_pages or []],
        )


@dataclass
class WorkspaceApplications:
    workspace: Workspace
    applications: list[HomepageApplication] = field(default_factory=list)
    user_roles: list[dict] = field(default_factory=list)


@dataclass
class UserHomepage:
    user: object
    workspace_applications: list[WorkspaceApplications] = field(default_factory=list)
    release_items: list[ReleaseNode] = field(default_factory=list)
    new_releases_count: str = ""


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def get_all_applications(user, release_notes: ReleaseNotesService | None = None) -> UserHomepage:
    """
    Return the homepage for *user*.

    Args:
        user: The requesting user.  ``None`` and anonymous users are rejected.
        release_notes: Release-notes client; a default
            :class:`ReleaseNotesService` is used when omitted.

    Raises:
        common.exceptions.NotSignedInError: *user* is ``None`` or anonymous.
    """
    user = require_signed_in(user)
    user_data = user_services.get_for_user(user)
    homepage = UserHomepage(user=user)

    workspace_ids = workspace_service.get_workspace_ids_for_user(user)
    if workspace_ids:
        homepage.workspace_applications = _group_by_workspace(workspace_ids, user_data)

    _enrich_page_slugs(homepage)
    _attach_release_notes(homepage, user_data, release_notes or ReleaseNotesService())

    user_services.ensure_viewed_current_version_release_notes(user)

    logger.info(
        "homepage_built",
        user_id=user.pk,
        workspaces=len(homepage.workspace_applications),
        applications=sum(len(g.applications) for g in homepage.workspace_applications),
    )
    return homepage


def _group_by_workspace(workspace_ids: list[int], user_data: UserData) -> list[WorkspaceApplications]:
    ordered_ids = prioritise_ids(user_data.recently_used_workspace_ids, workspace_ids)
    workspaces = workspace_service.find_by_ids(workspace_ids)
    user_roles = workspace_service.get_user_roles_by_workspace(workspace_ids)

    applications = sort_by_recency(
        (HomepageApplication.from_model(app) for app in list_homepage_applications(workspace_ids)),
        user_data.recently_used_app_ids,
        key=lambda app: app.id,
    )
    by_workspace: dict[int, list[HomepageApplication]] = defaultdict(list)
    for app in applications:
        by_workspace[app.workspace_id].append(app)

    groups = []
    for workspace_id in ordered_ids:
        workspace = workspaces.get(workspace_id)
        if workspace is None:
            continue
        groups.append(
            WorkspaceApplications(
                workspace=workspace,
                applications=by_workspace.get(workspace_id, []),
                user_roles=user_roles.get(workspace_id, []),
            )
        )
    return groups


def _enrich_page_slugs(homepage: UserHomepage) -> None:
    applications = [
        app
        for group in homepage.workspace_applications
        for app in group.applications
    ]
    if not applications:
        return

    pages_by_app = find_pages_by_application_ids(app.row_id for app in applications)
    for app in applications:
        _set_default_page_slug(app, app.pages, pages_by_app, "unpublished_slug")
        _set_default_page_slug(app, app.published_pages, pages_by_app, "published_slug")


def _set_default_page_slug(
    app: HomepageApplication,
    refs: list[PageRef],
    pages_by_app: dict[int, list[Page]],
    slug_attr: str,
) -> None:
    """
    Copy the slug of the default page in *refs* from its Page row.

    Inconsistent data is logged and leaves the slug empty; it never fails
    the homepage.
    """
    default_ref = next((ref for ref in refs if ref.is_default), None)
    if default_ref is None:
        return

    pages = pages_by_app.get(app.row_id)
    if not pages:
        logger.error("homepage_no_pages_for_application", application_id=app.row_id)
        return

    page = next((p for p in pages if str(p.pk) == str(default_ref.id)), None)
    if page is None:
        logger.error(
            "homepage_default_page_not_found",
            application_id=app.row_id,
            page_id=default_ref.id,
        )
        return

    slug = getattr(page, slug_attr)
    if slug is None:
        logger.error(
            "homepage_page_version_missing",
            application_id=app.row_id,
            page_id=default_ref.id,
            field=slug_attr,
        )
        return
    default_ref.slug = slug


def _attach_release_notes(
    homepage: UserHomepage,
    user_data: UserData,
    release_notes: ReleaseNotesService,
) -> None:
    try:
        nodes = release_notes.get_release_nodes()
    except ReleaseNotesUnavailableError as exc:
        logger.warning("homepage_release_notes_skipped", detail=exc.detail)
        nodes = []
    except Exception:  # noqa: BLE001 - release notes never fail the homepage
        logger.exception("homepage_release_notes_failed")
        nodes = []

    homepage.release_items = nodes
    count = release_notes.compute_new_from(user_data.release_notes_viewed_version, nodes)
    homepage.new_releases_count = "" if count == "0" else count
