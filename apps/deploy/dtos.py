"""
Data Transfer Objects (DTOs) for the deployment pipeline.

The runner and the process controller never raise into the pipeline; they
return these result objects instead, and the pipeline folds them into a
single PipelineResult that the view and the CLI read from.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from apps.deploy.models import RunStatus


@dataclass
class CommandResult:
    """Outcome of running one stage command."""

    command: str
    success: bool
    returncode: int | None = None
    skipped: bool = False
    error: str | None = None
    duration_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ControlResult:
    """
    Outcome of one call to the process supervisor.

    Attributes:
        action: start, stop or restart.
        process_name: Supervisor name of the process.
        success: True if the supervisor acknowledged the call.
        response: Opaque acknowledgement returned by the supervisor.
        error: Connection, protocol or fault description when success is False.
    """

    action: str
    process_name: str
    success: bool
    response: str = ""
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class StageResult:
    """A stage that was attempted during a run."""

    stage: str
    result: CommandResult

    @property
    def succeeded(self) -> bool:
        return self.result.success

    def to_dict(self) -> dict[str, Any]:
        return {"stage": self.stage, **self.result.to_dict()}


@dataclass
class PipelineResult:
    """
    Final result of one deployment run.

    `succeeded_any` decides the "OK" body; `failed_stage` decides the
    "Failed to <stage>" client error, which takes precedence.
    """

    run_id: str
    application: str
    stop_result: ControlResult | None = None
    start_result: ControlResult | None = None
    stage_results: list[StageResult] = field(default_factory=list)
    succeeded_any: bool = False
    failed_stage: str | None = None
    total_duration_ms: float = 0.0

    @property
    def stages_attempted(self) -> list[str]:
        return [s.stage for s in self.stage_results]

    @property
    def stop_failed(self) -> bool:
        return self.stop_result is not None and not self.stop_result.success

    @property
    def status(self) -> str:
        if self.stop_failed:
            return RunStatus.ABORTED
        if self.failed_stage:
            return RunStatus.FAILED
        if self.succeeded_any:
            return RunStatus.SUCCEEDED
        return RunStatus.NOOP

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "run_id": self.run_id,
            "application": self.application,
            "status": str(self.status),
            "succeeded_any": self.succeeded_any,
            "failed_stage": self.failed_stage,
            "stages_attempted": self.stages_attempted,
            "stages": [s.to_dict() for s in self.stage_results],
            "total_duration_ms": self.total_duration_ms,
        }
        if self.stop_result:
            result["stop"] = self.stop_result.to_dict()
        if self.start_result:
            result["start"] = self.start_result.to_dict()
        return result
