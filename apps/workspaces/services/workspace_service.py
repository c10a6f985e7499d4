"""
apps.workspaces.services.workspace_service
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
All business logic for workspaces and their memberships.

Views must call only these functions.  The homepage fetcher uses the
lookup helpers to resolve a user's workspaces and their member roles.
"""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

import structlog
from django.db import IntegrityError, transaction
from django.db.models import Q

from common.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from apps.workspaces.models import Workspace, WorkspaceMembership

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Workspace CRUD
# ---------------------------------------------------------------------------

def create_workspace(*, name: str, owner) -> Workspace:
    """
    Create a new :class:`Workspace` and make *owner* its administrator.

    Args:
        name: Unique display name for the workspace.
        owner: The authenticated user creating the workspace.

    Returns:
        The newly created ``Workspace``.

    Raises:
        common.exceptions.ConflictError: If a workspace with *name* (or the
            slug derived from it) already exists.
    """
    try:
        with transaction.atomic():
            workspace = Workspace.objects.create(name=name)
            WorkspaceMembership.objects.create(
                workspace=workspace,
                user=owner,
                role=WorkspaceMembership.Role.ADMINISTRATOR,
            )
    except IntegrityError as exc:
        raise ConflictError(f"A workspace named '{name}' already exists.") from exc

    logger.info(
        "workspace_created",
        workspace_id=workspace.id,
        name=workspace.name,
        owner_id=owner.pk,
    )
    return workspace


def get_workspace(workspace_id: str | int, user) -> Workspace:
    """
    Fetch a :class:`Workspace` the user belongs to, by ID or slug.

    Raises:
        common.exceptions.NotFoundError: If no such workspace exists.
        common.exceptions.PermissionDeniedError: If *user* is not a member.
    """
    if str(workspace_id).isdigit():
        q = Q(id=int(workspace_id)) | Q(slug=str(workspace_id))
    else:
        q = Q(slug=str(workspace_id))

    workspace = Workspace.objects.filter(q).first()
    if workspace is None:
        raise NotFoundError(f"Workspace '{workspace_id}' not found.")

    if not workspace.memberships.filter(user=user).exists():
        raise PermissionDeniedError(
            f"You are not a member of workspace '{workspace.slug}'."
        )
    return workspace


# ---------------------------------------------------------------------------
# Lookups used by the homepage
# ---------------------------------------------------------------------------

def get_workspace_ids_for_user(user) -> list[int]:
    """Return the ids of every workspace *user* is a member of, oldest membership first."""
    return list(
        WorkspaceMembership.objects
        .filter(user=user)
        .order_by("id")
        .values_list("workspace_id", flat=True)
    )


def find_by_ids(workspace_ids: Iterable[int]) -> dict[int, Workspace]:
    """Return ``{id: Workspace}`` for the ids that exist; unknown ids are dropped."""
    return {ws.id: ws for ws in Workspace.objects.filter(id__in=list(workspace_ids))}


def get_user_roles_by_workspace(workspace_ids: Iterable[int]) -> dict[int, list[dict]]:
    """
    Return the members of each workspace as ``{username, name, role}`` dicts.

    A single query covers every workspace; members are listed in the order
    they joined.
    """
    roles: dict[int, list[dict]] = defaultdict(list)
    memberships = (
        WorkspaceMembership.objects
        .filter(workspace_id__in=list(workspace_ids))
        .select_related("user")
        .order_by("workspace_id", "id")
    )
    for membership in memberships:
        roles[membership.workspace_id].append(
            {
                "username": membership.user.get_username(),
                "name": membership.user.get_full_name(),
                "role": membership.role,
            }
        )
    return dict(roles)
