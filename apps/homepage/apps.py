"""
apps.homepage.apps
"""
from django.apps import AppConfig


class HomepageConfig(AppConfig):
    name = "apps.homepage"
    label = "homepage"
    verbose_name = "Homepage"
