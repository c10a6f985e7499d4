"""
apps.workspaces.urls
~~~~~~~~~~~~~~~~~~~~
URL routing for workspaces.  Mounted at /api/v1/ by the root URLconf.
"""
from django.urls import path

from .views import WorkspaceCreateView, WorkspaceDetailView

urlpatterns = [
    # POST /api/v1/workspaces/
    path("workspaces/", WorkspaceCreateView.as_view(), name="workspace-create"),
    # GET /api/v1/workspaces/<workspace_id>/
    path(
        "workspaces/<str:workspace_id>/",
        WorkspaceDetailView.as_view(),
        name="workspace-detail",
    ),
]
