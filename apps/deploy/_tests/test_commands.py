"""Tests for the deploy management commands."""

import json
from io import StringIO
from unittest.mock import patch

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import override_settings

from apps.deploy.dtos import CommandResult, ControlResult, PipelineResult, StageResult
from apps.deploy._tests.fakes import FakeController


def _result(**kwargs):
    return PipelineResult(run_id="run-1", application="demo", **kwargs)


class TestDeployCommand:
    def test_dry_run_lists_steps_without_running(self, deploy_config_file):
        out = StringIO()
        with patch("apps.deploy.management.commands.deploy.DeploymentPipeline") as mock_pipeline:
            call_command("deploy", "web-app", "--config", str(deploy_config_file), "--dry-run", stdout=out)

        mock_pipeline.from_config.assert_not_called()
        output = out.getvalue()
        assert "DRY RUN" in output
        assert "stop web" in output
        assert "update: git pull origin main" in output
        assert "test: (skipped)" in output
        assert "start web" in output

    def test_unknown_repository(self, deploy_config_file):
        with pytest.raises(CommandError, match="Unknown repository: missing"):
            call_command("deploy", "missing", "--config", str(deploy_config_file))

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(CommandError, match="not found"):
            call_command("deploy", "demo", "--config", str(tmp_path / "nope.json"))

    def test_successful_run(self, deploy_config_file):
        result = _result(
            stage_results=[
                StageResult(stage="update", result=CommandResult(command="git pull", success=True))
            ],
            succeeded_any=True,
        )
        out = StringIO()
        with patch("apps.deploy.management.commands.deploy.DeploymentPipeline") as mock_pipeline:
            mock_pipeline.from_config.return_value.run.return_value = result
            call_command("deploy", "demo", "--config", str(deploy_config_file), stdout=out)

        app = mock_pipeline.from_config.return_value.run.call_args.args[0]
        assert app.name == "demo"
        output = out.getvalue()
        assert "DEPLOY RESULT" in output
        assert "Status: succeeded" in output

    def test_json_output(self, deploy_config_file):
        out = StringIO()
        with patch("apps.deploy.management.commands.deploy.DeploymentPipeline") as mock_pipeline:
            mock_pipeline.from_config.return_value.run.return_value = _result(succeeded_any=True)
            call_command("deploy", "demo", "--config", str(deploy_config_file), "--json", stdout=out)

        data = json.loads(out.getvalue())
        assert data["status"] == "succeeded"
        assert data["run_id"] == "run-1"

    def test_failed_stage_raises(self, deploy_config_file):
        result = _result(
            stage_results=[
                StageResult(
                    stage="build",
                    result=CommandResult(command="make", success=False, error="exit status 2"),
                )
            ],
            failed_stage="build",
        )
        with patch("apps.deploy.management.commands.deploy.DeploymentPipeline") as mock_pipeline:
            mock_pipeline.from_config.return_value.run.return_value = result
            with pytest.raises(CommandError, match="failed"):
                call_command("deploy", "demo", "--config", str(deploy_config_file), stdout=StringIO())

    def test_aborted_run_raises(self, deploy_config_file):
        stop = ControlResult(action="stop", process_name="web", success=False, error="refused")
        with patch("apps.deploy.management.commands.deploy.DeploymentPipeline") as mock_pipeline:
            mock_pipeline.from_config.return_value.run.return_value = _result(stop_result=stop)
            with pytest.raises(CommandError, match="aborted"):
                call_command("deploy", "web-app", "--config", str(deploy_config_file), stdout=StringIO())


class TestControlProcessCommand:
    def test_sends_action_to_controller(self):
        controller = FakeController()
        out = StringIO()
        with patch(
            "apps.deploy.management.commands.control_process.get_process_controller",
            return_value=controller,
        ) as mock_get:
            call_command("control_process", "web", "restart", "--rpc", "127.0.0.1:9001", stdout=out)

        mock_get.assert_called_once_with("127.0.0.1:9001")
        assert controller.calls == [("restart", "web")]
        assert "restart web: True" in out.getvalue()

    def test_address_from_config(self, deploy_config_file):
        with override_settings(DEPLOY_CONFIG_FILE=str(deploy_config_file)):
            with patch(
                "apps.deploy.management.commands.control_process.get_process_controller",
                return_value=FakeController(),
            ) as mock_get:
                call_command("control_process", "web", "stop", stdout=StringIO())

        mock_get.assert_called_once_with("127.0.0.1:9001")

    def test_failure_raises(self):
        with patch(
            "apps.deploy.management.commands.control_process.get_process_controller",
            return_value=FakeController(fail_on=["start"]),
        ):
            with pytest.raises(CommandError, match="start web failed: connection refused"):
                call_command("control_process", "web", "start", "--rpc", "127.0.0.1:9001")

    def test_no_supervisor_configured(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"apps": {}}))
        with override_settings(DEPLOY_CONFIG_FILE=str(path)):
            with pytest.raises(CommandError, match="No supervisor address"):
                call_command("control_process", "web", "start")

    def test_invalid_action_rejected(self):
        with pytest.raises(CommandError):
            call_command("control_process", "web", "reload", "--rpc", "127.0.0.1:9001")


class TestListAppsCommand:
    def test_lists_apps(self, deploy_config_file):
        out = StringIO()
        call_command("list_apps", "--config", str(deploy_config_file), stdout=out)

        output = out.getvalue()
        assert "Configured Applications" in output
        assert "Webhook path: /deploy" in output
        assert "demo" in output
        assert "process: web" in output
        assert "build: make" not in output

    def test_verbose_shows_stages(self, deploy_config_file):
        out = StringIO()
        call_command("list_apps", "--config", str(deploy_config_file), "--verbose", stdout=out)

        output = out.getvalue()
        assert "build: make" in output
        assert "test: (skipped)" in output
        assert "update: git pull origin master" in output

    def test_empty_config(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{}")
        out = StringIO()
        call_command("list_apps", "--config", str(path), stdout=out)

        assert "No applications configured." in out.getvalue()


class TestServeWebhooksCommand:
    def test_uses_config_addr(self, deploy_config_file):
        with override_settings(DEPLOY_CONFIG_FILE=str(deploy_config_file)):
            with patch("apps.deploy.management.commands.serve_webhooks.call_command") as mock_call:
                call_command("serve_webhooks", stdout=StringIO())

        mock_call.assert_called_once_with("runserver", "0.0.0.0:8080", use_reloader=False)

    def test_explicit_addrport(self, deploy_config_file):
        with override_settings(DEPLOY_CONFIG_FILE=str(deploy_config_file)):
            with patch("apps.deploy.management.commands.serve_webhooks.call_command") as mock_call:
                call_command("serve_webhooks", "127.0.0.1:9000", stdout=StringIO())

        mock_call.assert_called_once_with("runserver", "127.0.0.1:9000", use_reloader=False)
