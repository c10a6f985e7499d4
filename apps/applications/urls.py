"""
apps.applications.urls
"""
from django.urls import path

from .views import ApplicationRecentView

urlpatterns = [
    # POST /api/v1/applications/<application_id>/recent/
    path(
        "applications/<str:application_id>/recent/",
        ApplicationRecentView.as_view(),
        name="application-recent",
    ),
]
