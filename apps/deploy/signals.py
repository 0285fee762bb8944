"""
Monitoring signals for deployment runs.

Emits a structured signal at every run and stage boundary so a log
pipeline can follow a deployment end to end:
- deploy.run.started / deploy.run.completed
- deploy.stage.started / deploy.stage.succeeded / deploy.stage.failed
- deploy.process.<action> (supervisor bracket calls)

Every signal carries run_id, application and stage tags.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger("apps.deploy.signals")


@dataclass
class SignalTags:
    """Required tags for all deployment signals."""

    run_id: str
    application: str
    stage: str = "pipeline"  # pipeline, update, build, test, release, process
    process_name: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        base = {
            "run_id": self.run_id,
            "application": self.application,
            "stage": str(self.stage),
            "process_name": self.process_name,
        }
        base.update(self.extra)
        return base


class MonitoringBackend:
    """
    Abstract monitoring backend.

    Override emit() to send signals somewhere other than the log.
    """

    def emit(
        self,
        signal_name: str,
        tags: SignalTags,
        value: float | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        raise NotImplementedError


class LoggingBackend(MonitoringBackend):
    """Default backend: structured logging."""

    def emit(
        self,
        signal_name: str,
        tags: SignalTags,
        value: float | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        data = {
            "signal": signal_name,
            "value": value,
            **tags.to_dict(),
            **(extra or {}),
        }
        logger.info(f"[SIGNAL] {signal_name}", extra={"signal_data": data})


_backend: MonitoringBackend | None = None


def _get_backend() -> MonitoringBackend:
    global _backend
    if _backend is None:
        _backend = LoggingBackend()
    return _backend


def set_monitoring_backend(backend: MonitoringBackend | None) -> None:
    """Swap the backend (None restores the logging default)."""
    global _backend
    _backend = backend


def emit_run_started(tags: SignalTags) -> None:
    _get_backend().emit("deploy.run.started", tags)


def emit_run_completed(tags: SignalTags, duration_ms: float, status: str) -> None:
    _get_backend().emit(
        "deploy.run.completed",
        tags,
        value=duration_ms,
        extra={"final_status": str(status)},
    )


def emit_stage_started(tags: SignalTags, command: str) -> None:
    _get_backend().emit("deploy.stage.started", tags, extra={"command": command})


def emit_stage_succeeded(tags: SignalTags, duration_ms: float) -> None:
    _get_backend().emit("deploy.stage.succeeded", tags, value=duration_ms)


def emit_stage_failed(tags: SignalTags, error: str, duration_ms: float) -> None:
    _get_backend().emit(
        "deploy.stage.failed",
        tags,
        value=duration_ms,
        extra={"error_message": error},
    )


def emit_process_control(tags: SignalTags, action: str, success: bool, error: str | None) -> None:
    _get_backend().emit(
        f"deploy.process.{action}",
        tags,
        extra={"success": success, "error_message": error or ""},
    )
