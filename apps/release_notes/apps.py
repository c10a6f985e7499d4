"""
apps.release_notes.apps
"""
from django.apps import AppConfig


class ReleaseNotesConfig(AppConfig):
    name = "apps.release_notes"
    label = "release_notes"
    verbose_name = "Release Notes"
