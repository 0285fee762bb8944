"""
Deployment pipeline.

Runs one application's deployment through a fixed state machine:
Idle → Stopping → Running(update → build → test → release) → Starting → Done

Failure policy:
1. Stop fails: the run ends immediately. No stage runs and start is not
   attempted, so the process is left stopped.
2. A stage fails: remaining stages are skipped (fail-fast), start still runs.
3. Start fails: logged only, the outcome of the stages stands.

No retries anywhere. The runner and the controller return result objects,
so nothing here raises into the caller.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections.abc import Sequence

from django.conf import settings

from apps.deploy.conf import DeployConfig
from apps.deploy.dtos import ControlResult, PipelineResult, StageResult
from apps.deploy.models import ProcessAction
from apps.deploy.process_control import BaseProcessController, get_process_controller
from apps.deploy.registry import ApplicationDefinition
from apps.deploy.runner import CommandRunner
from apps.deploy.signals import (
    SignalTags,
    emit_process_control,
    emit_run_completed,
    emit_run_started,
    emit_stage_failed,
    emit_stage_started,
    emit_stage_succeeded,
)

logger = logging.getLogger(__name__)


class DeploymentPipeline:
    """
    Orchestrates stop → stages → start for one application per run.

    Usage:
        pipeline = DeploymentPipeline.from_config(config)
        result = pipeline.run(config.registry.lookup("demo"))
    """

    controller: BaseProcessController | None
    runner: CommandRunner
    serialize_runs: bool

    def __init__(
        self,
        controller: BaseProcessController | None = None,
        runner: CommandRunner | None = None,
        serialize_runs: bool | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            controller: Process supervisor client; None disables bracketing.
            runner: Stage command runner (default: CommandRunner()).
            serialize_runs: Run one deployment at a time per application
                (default from settings.DEPLOY_SERIALIZE_RUNS).
        """
        self.controller = controller
        self.runner = runner or CommandRunner()
        self.serialize_runs = (
            serialize_runs
            if serialize_runs is not None
            else bool(getattr(settings, "DEPLOY_SERIALIZE_RUNS", True))
        )
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @classmethod
    def from_config(cls, config: DeployConfig) -> "DeploymentPipeline":
        """Build a pipeline wired to the config's supervisor address."""
        return cls(
            controller=get_process_controller(config.rpc),
            runner=CommandRunner(timeout=getattr(settings, "DEPLOY_COMMAND_TIMEOUT", None)),
        )

    def run(
        self,
        app: ApplicationDefinition,
        stages: Sequence[tuple[str, str]] | None = None,
    ) -> PipelineResult:
        """
        Deploy one application.

        Args:
            app: The resolved application definition.
            stages: (stage, command) pairs to run instead of app.stages().

        Returns:
            PipelineResult describing the bracket calls and stages.
        """
        if stages is None:
            stages = app.stages()

        if not self.serialize_runs:
            return self._execute(app, stages)

        lock = self._lock_for(app.name)
        if lock.locked():
            logger.info(f"{app.name}: waiting for the previous deployment to finish")
        with lock:
            return self._execute(app, stages)

    def run_stages(
        self,
        result: PipelineResult,
        working_directory: str,
        stages: Sequence[tuple[str, str]],
    ) -> PipelineResult:
        """
        Run stages in order, stopping at the first failure.

        Stages with an empty command are skipped and not recorded.
        """
        for stage, command in stages:
            if not command:
                continue

            tags = SignalTags(run_id=result.run_id, application=result.application, stage=stage)
            logger.info(f"{result.application}: {command}")
            emit_stage_started(tags, command)

            command_result = self.runner.run(working_directory, command)
            result.stage_results.append(StageResult(stage=stage, result=command_result))

            if not command_result.success:
                logger.error(f"{result.application}: {stage} ({command_result.error})")
                emit_stage_failed(tags, command_result.error or "", command_result.duration_ms)
                result.failed_stage = stage
                break

            result.succeeded_any = True
            emit_stage_succeeded(tags, command_result.duration_ms)

        return result

    def _execute(
        self,
        app: ApplicationDefinition,
        stages: Sequence[tuple[str, str]],
    ) -> PipelineResult:
        start_time = time.perf_counter()
        result = PipelineResult(run_id=str(uuid.uuid4()), application=app.name)
        tags = SignalTags(run_id=result.run_id, application=app.name)

        emit_run_started(tags)

        bracketed = self.controller is not None and bool(app.process_name)

        if bracketed:
            result.stop_result = self._control(result, app.process_name, ProcessAction.STOP)
            if not result.stop_result.success:
                logger.error(f"{app.name}: {result.stop_result.error}")
                return self._finish(result, tags, start_time)

        self.run_stages(result, app.working_directory, stages)

        if bracketed:
            result.start_result = self._control(result, app.process_name, ProcessAction.START)
            if not result.start_result.success:
                logger.error(f"{app.name}: {result.start_result.error}")

        return self._finish(result, tags, start_time)

    def _control(self, result: PipelineResult, process_name: str, action: str) -> ControlResult:
        control_result = self.controller.control(process_name, action)
        tags = SignalTags(
            run_id=result.run_id,
            application=result.application,
            stage="process",
            process_name=process_name,
        )
        emit_process_control(tags, action, control_result.success, control_result.error)
        return control_result

    def _finish(self, result: PipelineResult, tags: SignalTags, start_time: float) -> PipelineResult:
        result.total_duration_ms = (time.perf_counter() - start_time) * 1000
        emit_run_completed(tags, result.total_duration_ms, result.status)
        logger.info(
            f"{result.application}: deployment {result.status} "
            f"(stages={result.stages_attempted}, run_id={result.run_id})"
        )
        return result

    def _lock_for(self, name: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = self._locks[name] = threading.Lock()
            return lock
