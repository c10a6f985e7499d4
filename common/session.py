"""
common.session
~~~~~~~~~~~~~~
Current-user lookup shared by the API views.
"""
from common.exceptions import NotSignedInError


def require_signed_in(user):
    """Return *user*, or raise :class:`NotSignedInError` for ``None`` / anonymous users."""
    if user is None or user.is_anonymous:
        raise NotSignedInError()
    return user


def get_current_user(request):
    """Return the authenticated user behind a DRF *request*."""
    return require_signed_in(getattr(request, "user", None))
