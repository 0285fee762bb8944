"""Django app configuration for the deploy app."""

from django.apps import AppConfig


class DeployAppConfig(AppConfig):
    """Configuration for the Push-to-Deploy app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.deploy"
    verbose_name = "Push-to-Deploy"
