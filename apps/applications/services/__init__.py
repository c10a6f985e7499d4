"""
apps.applications.services package.
"""
from .application_service import (  # noqa: F401
    find_pages_by_application_ids,
    get_application_for_member,
    list_homepage_applications,
)
