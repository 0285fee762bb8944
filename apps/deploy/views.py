"""
Webhook view for repository push notifications.

The push service posts a form with a single "payload" field holding JSON:

    {"repository": {"name": "demo"}, "pusher": {"name": "alice"}}

Responses:
- 200 "OK" when at least one stage succeeded
- 400 "Failed to <stage>" when a stage failed (takes precedence)
- 200 with an empty body otherwise, including unknown repositories and
  payloads that cannot be parsed
"""

import json
import logging
from typing import Any

from django.http import HttpResponse, HttpResponseBadRequest
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from apps.deploy.conf import DeployConfig
from apps.deploy.dtos import PipelineResult
from apps.deploy.pipeline import DeploymentPipeline

logger = logging.getLogger(__name__)


def parse_repository_name(raw_payload: str | None) -> str | None:
    """Pull repository.name out of the payload JSON, or None if it is unusable."""
    if not raw_payload:
        return None
    try:
        payload: Any = json.loads(raw_payload)
    except (json.JSONDecodeError, RecursionError) as e:
        logger.info(f"Ignoring webhook with unparseable JSON payload: {e}")
        return None

    repository = payload.get("repository") if isinstance(payload, dict) else None
    name = repository.get("name") if isinstance(repository, dict) else None
    if not isinstance(name, str):
        logger.info("Ignoring webhook without repository.name")
        return None
    return name


def build_response(result: PipelineResult) -> HttpResponse:
    """Turn a pipeline result into the webhook response."""
    if result.failed_stage:
        return HttpResponseBadRequest(
            f"Failed to {result.failed_stage}", content_type="text/plain"
        )
    if result.succeeded_any:
        return HttpResponse("OK", content_type="text/plain")
    return HttpResponse(content_type="text/plain")


@method_decorator(csrf_exempt, name="dispatch")
class WebhookView(View):
    """
    Push webhook endpoint.

    POST <root>
    GET  <root>?payload=...

    The config and pipeline are injected through as_view(); form values in
    the request body win over the query string.
    """

    config: DeployConfig | None = None
    pipeline: DeploymentPipeline | None = None

    def post(self, request, *args, **kwargs):
        return self.handle_push(request)

    def get(self, request, *args, **kwargs):
        return self.handle_push(request)

    def handle_push(self, request) -> HttpResponse:
        if self.config is None:
            raise RuntimeError("WebhookView requires a DeployConfig (as_view(config=...))")

        raw_payload = request.POST.get("payload")
        if raw_payload is None:
            raw_payload = request.GET.get("payload")

        repository_name = parse_repository_name(raw_payload)
        if repository_name is None:
            return HttpResponse(content_type="text/plain")

        app = self.config.registry.lookup(repository_name)
        if app is None:
            logger.info(f"Ignoring push for unconfigured repository: {repository_name}")
            return HttpResponse(content_type="text/plain")

        pipeline = self.pipeline or DeploymentPipeline.from_config(self.config)
        result = pipeline.run(app)
        return build_response(result)
