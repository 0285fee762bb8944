"""
Management command to deploy an application without waiting for a push.

Usage:
    # Deploy the app configured for repository "demo"
    python manage.py deploy demo

    # Use another config file
    python manage.py deploy demo --config /etc/push-deploy/config.json

    # Show the stages that would run
    python manage.py deploy demo --dry-run

    # Output result as JSON
    python manage.py deploy demo --json
"""

import json

from django.core.management.base import BaseCommand, CommandError

from apps.deploy.conf import DeployConfigError, get_config, load_config
from apps.deploy.models import RunStatus
from apps.deploy.pipeline import DeploymentPipeline


class Command(BaseCommand):
    help = "Run the deploy pipeline for a repository: stop → update → build → test → release → start"

    def add_arguments(self, parser):
        parser.add_argument(
            "repository",
            type=str,
            help="Repository name as configured under 'apps'",
        )
        parser.add_argument(
            "--config",
            type=str,
            help="Path to the deploy config file (default: settings.DEPLOY_CONFIG_FILE)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would happen without executing",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Output result as JSON",
        )

    def handle(self, *args, **options):
        try:
            config = load_config(options["config"]) if options["config"] else get_config()
        except DeployConfigError as e:
            raise CommandError(str(e))

        app = config.registry.lookup(options["repository"])
        if app is None:
            raise CommandError(
                f"Unknown repository: {options['repository']}. "
                f"Configured: {config.registry.names()}"
            )

        if options["dry_run"]:
            self._show_dry_run(app, config)
            return

        pipeline = DeploymentPipeline.from_config(config)
        result = pipeline.run(app)

        if options["json"]:
            self.stdout.write(json.dumps(result.to_dict(), indent=2, default=str))
        else:
            self._display_result(result)

        if result.status in (RunStatus.FAILED, RunStatus.ABORTED):
            raise CommandError(f"Deployment of {app.name} {result.status}")

    def _show_dry_run(self, app, config):
        """Display what would happen in a dry run."""
        bracketed = bool(config.rpc and app.process_name)

        self.stdout.write(self.style.WARNING("=== DRY RUN ==="))
        self.stdout.write("")
        self.stdout.write(f"Application: {app.name}")
        self.stdout.write(f"  Working directory: {app.working_directory or '.'}")
        self.stdout.write(f"  Process: {app.process_name or '(none)'}")
        self.stdout.write(f"  Supervisor: {config.rpc or '(disabled)'}")
        self.stdout.write("")
        self.stdout.write("Steps:")
        if bracketed:
            self.stdout.write(f"  - stop {app.process_name}")
        for stage, command in app.stages():
            if command:
                self.stdout.write(f"  - {stage}: {command}")
            else:
                self.stdout.write(f"  - {stage}: (skipped)")
        if bracketed:
            self.stdout.write(f"  - start {app.process_name}")
        self.stdout.write("")
        self.stdout.write(self.style.SUCCESS("Use without --dry-run to execute"))

    def _display_result(self, result):
        """Display the run in human-readable format."""
        self.stdout.write("")
        self.stdout.write("=" * 60)
        self.stdout.write(self.style.HTTP_INFO("DEPLOY RESULT"))
        self.stdout.write("=" * 60)
        self.stdout.write("")

        if result.status == RunStatus.SUCCEEDED:
            self.stdout.write(self.style.SUCCESS(f"Status: {result.status}"))
        elif result.status == RunStatus.NOOP:
            self.stdout.write(self.style.WARNING(f"Status: {result.status}"))
        else:
            self.stdout.write(self.style.ERROR(f"Status: {result.status}"))
        self.stdout.write(f"Application: {result.application}")
        self.stdout.write(f"Run ID: {result.run_id}")
        self.stdout.write(f"Duration: {result.total_duration_ms:.2f}ms")
        self.stdout.write("")

        if result.stop_result:
            self._display_control(result.stop_result)

        for stage_result in result.stage_results:
            line = f"  {stage_result.stage}: {stage_result.result.command}"
            if stage_result.succeeded:
                self.stdout.write(self.style.SUCCESS(f"✓{line}"))
            else:
                self.stdout.write(self.style.ERROR(f"✗{line} ({stage_result.result.error})"))

        if result.start_result:
            self._display_control(result.start_result)

        if result.stop_failed:
            self.stdout.write("")
            self.stdout.write(
                self.style.WARNING("Process could not be stopped; no stage ran and start was not attempted")
            )

    def _display_control(self, control):
        line = f"  {control.action} {control.process_name}"
        if control.success:
            self.stdout.write(self.style.SUCCESS(f"✓{line}"))
        else:
            self.stdout.write(self.style.ERROR(f"✗{line} ({control.error})"))
