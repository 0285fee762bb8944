"""
URL configuration for the deploy app.

The webhook lives at the "root" path from the deploy config, so the config
is loaded when this module is imported. A broken config aborts startup.
A root ending in "/" also serves every path below it.
"""

from django.urls import re_path

from apps.deploy.conf import get_config
from apps.deploy.pipeline import DeploymentPipeline
from apps.deploy.views import WebhookView

app_name = "deploy"

deploy_config = get_config()

urlpatterns = [
    re_path(
        deploy_config.url_pattern,
        WebhookView.as_view(
            config=deploy_config,
            pipeline=DeploymentPipeline.from_config(deploy_config),
        ),
        name="webhook",
    ),
]
