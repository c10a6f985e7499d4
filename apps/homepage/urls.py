"""
apps.homepage.urls
"""
from django.urls import path

from .views import UserHomepageView

urlpatterns = [
    # GET /api/v1/applications/home/
    path("applications/home/", UserHomepageView.as_view(), name="user-homepage"),
]
