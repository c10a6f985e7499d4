"""
apps.users.services
~~~~~~~~~~~~~~~~~~~
Reads and writes of :class:`~apps.users.models.UserData`.

Writers lock the row with ``SELECT FOR UPDATE`` so two concurrent requests
from the same user cannot drop each other's recency updates.
"""
from __future__ import annotations

import structlog
from django.conf import settings
from django.db import transaction

from apps.applications.visibility import application_id_for_response
from apps.homepage.services.recency import touch_recent
from .models import UserData

logger = structlog.get_logger(__name__)


def get_for_user(user) -> UserData:
    """
    Return the stored ``UserData`` for *user*, or an unsaved empty one.

    Readers never create rows; the empty instance behaves like a user with
    no recency history and no viewed release notes.
    """
    user_data = UserData.objects.filter(user=user).first()
    if user_data is None:
        return UserData(user=user)
    return user_data


def _lock_for_user(user) -> UserData:
    user_data, created = UserData.objects.select_for_update().get_or_create(user=user)
    if created:
        logger.info("user_data_created", user_id=user.pk)
    return user_data


def record_recent_application(user, application) -> UserData:
    """
    Move *application* and its workspace to the front of the user's
    recency lists.

    Git branch rows are recorded under their default application id, the
    same id the homepage sorts by.

    Both lists are capped at ``settings.RECENTLY_USED_LIMIT``.
    """
    limit = settings.RECENTLY_USED_LIMIT
    app_id = application_id_for_response(application.pk, application.git_metadata)
    with transaction.atomic():
        user_data = _lock_for_user(user)
        user_data.recently_used_app_ids = touch_recent(
            user_data.recently_used_app_ids, app_id, limit
        )
        user_data.recently_used_workspace_ids = touch_recent(
            user_data.recently_used_workspace_ids, application.workspace_id, limit
        )
        user_data.save(
            update_fields=[
                "recently_used_app_ids",
                "recently_used_workspace_ids",
                "updated_at",
            ]
        )

    logger.info(
        "recent_application_recorded",
        user_id=user.pk,
        application_id=app_id,
        workspace_id=application.workspace_id,
    )
    return user_data


def ensure_viewed_current_version_release_notes(user) -> UserData:
    """
    Mark the current platform version as seen if the user has never seen
    any release notes.

    A user who already has a viewed version keeps it, so the homepage keeps
    showing the count of releases since then.
    """
    with transaction.atomic():
        user_data = _lock_for_user(user)
        if user_data.release_notes_viewed_version is not None:
            return user_data
        user_data.release_notes_viewed_version = settings.APP_VERSION
        user_data.save(update_fields=["release_notes_viewed_version", "updated_at"])

    logger.info(
        "release_notes_version_initialised",
        user_id=user.pk,
        version=settings.APP_VERSION,
    )
    return user_data
