"""
apps.applications.services.application_service
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Queries over applications and pages used by the homepage and the
recent-application endpoint.
"""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

import structlog

from common.exceptions import NotFoundError, PermissionDeniedError
from apps.applications.models import Application, Page
from apps.applications.visibility import is_homepage_visible
from apps.workspaces.models import WorkspaceMembership

logger = structlog.get_logger(__name__)


def list_homepage_applications(workspace_ids: Iterable[int]) -> list[Application]:
    """
    Return the applications of *workspace_ids* that belong on the homepage.

    Rows are returned in primary-key order with non-default Git branch
    copies removed (see :func:`~apps.applications.visibility.is_homepage_visible`).
    The branch filter runs in Python because the metadata rules compare two
    JSON keys with each other.
    """
    applications = Application.objects.filter(workspace_id__in=list(workspace_ids)).order_by("id")
    visible = [app for app in applications if is_homepage_visible(app.git_metadata)]
    logger.debug(
        "homepage_applications_listed",
        visible=len(visible),
        hidden_branches=len(applications) - len(visible),
    )
    return visible


def find_pages_by_application_ids(application_ids: Iterable[int]) -> dict[int, list[Page]]:
    """Return ``{application_id: [Page, ...]}`` for every page of *application_ids*."""
    pages_by_app: dict[int, list[Page]] = defaultdict(list)
    pages = (
        Page.objects
        .filter(application_id__in=list(application_ids))
        .only("id", "application_id", "unpublished_slug", "published_slug")
    )
    for page in pages:
        pages_by_app[page.application_id].append(page)
    return dict(pages_by_app)


def get_application_for_member(application_id: int | str, user) -> Application:
    """
    Fetch an application whose workspace *user* belongs to.

    Raises:
        common.exceptions.NotFoundError: If the application does not exist.
        common.exceptions.PermissionDeniedError: If *user* is not a member of
            the owning workspace.
    """
    application = None
    if str(application_id).isdigit():
        application = Application.objects.filter(pk=int(application_id)).first()
    if application is None:
        raise NotFoundError(f"Application '{application_id}' not found.")

    is_member = WorkspaceMembership.objects.filter(
        workspace_id=application.workspace_id,
        user=user,
    ).exists()
    if not is_member:
        raise PermissionDeniedError("You do not have access to this application.")
    return application
