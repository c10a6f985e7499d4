"""
apps.applications.visibility
~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Decides which application rows the homepage lists.

A Git-connected application is stored once per branch.  The homepage must
list each application exactly once, so only the default-branch row is
shown.  Two kinds of broken rows are also kept visible so they can still be
opened and repaired:

1. A Git connect that failed after the SSH key was generated leaves
   metadata with neither ``branchName`` nor ``defaultBranchName``.
2. Rows whose ``defaultBranchName`` went missing (failed branch creation,
   corrupted data) are indistinguishable from non-default branches and are
   hidden, unless ``branchName`` still equals ``defaultBranchName``.

This module is **pure Python** and needs no Django setup to test.

Public API
----------
is_homepage_visible(git_metadata) -> bool
application_id_for_response(application_id, git_metadata) -> int | str
"""
from __future__ import annotations


def is_homepage_visible(git_metadata: dict | None) -> bool:
    """
    Return ``True`` if an application row with *git_metadata* belongs on
    the homepage.

    Visible when any of:

    - *git_metadata* is ``None`` (not Git-connected);
    - both ``branchName`` and ``defaultBranchName`` are empty or missing;
    - ``branchName`` is non-empty and equals ``defaultBranchName``.

    Example::

        is_homepage_visible(None)                                          # True
        is_homepage_visible({})                                            # True
        is_homepage_visible({"branchName": "main", "defaultBranchName": "main"})  # True
        is_homepage_visible({"branchName": "feat", "defaultBranchName": "main"})  # False
    """
    if git_metadata is None:
        return True

    branch = git_metadata.get("branchName") or ""
    default_branch = git_metadata.get("defaultBranchName") or ""

    if not branch and not default_branch:
        return True
    return bool(branch) and branch == default_branch


def application_id_for_response(application_id: int, git_metadata: dict | None) -> int | str:
    """
    Return the id clients should use to address the application.

    Branch rows of a Git-connected application share the id of the
    default-branch application, stored as ``defaultApplicationId``.  Rows
    without it, and non-Git rows, expose their own primary key.
    """
    if git_metadata:
        default_id = git_metadata.get("defaultApplicationId")
        if default_id:
            return default_id
    return application_id
