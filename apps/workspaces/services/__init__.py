"""
apps.workspaces.services package.
"""
from .workspace_service import (  # noqa: F401
    create_workspace,
    find_by_ids,
    get_user_roles_by_workspace,
    get_workspace,
    get_workspace_ids_for_user,
)
