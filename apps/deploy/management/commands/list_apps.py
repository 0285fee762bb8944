"""
Management command to list the applications in the deploy config.

Usage:
    python manage.py list_apps
    python manage.py list_apps --verbose
"""

from django.core.management.base import BaseCommand, CommandError

from apps.deploy.conf import DeployConfigError, get_config, load_config


class Command(BaseCommand):
    help = "List configured applications and their deploy stages"

    def add_arguments(self, parser):
        parser.add_argument(
            "--config",
            type=str,
            help="Path to the deploy config file (default: settings.DEPLOY_CONFIG_FILE)",
        )
        parser.add_argument(
            "--verbose",
            action="store_true",
            help="Show every stage command",
        )

    def handle(self, *args, **options):
        try:
            config = load_config(options["config"]) if options["config"] else get_config()
        except DeployConfigError as e:
            raise CommandError(str(e))

        self.stdout.write(self.style.SUCCESS("Configured Applications"))
        self.stdout.write("-" * 60)
        self.stdout.write(f"Webhook path: {config.root}")
        self.stdout.write(f"Supervisor: {config.rpc or '(disabled)'}")

        if not len(config.registry):
            self.stdout.write("\nNo applications configured.")
            return

        for app in config.registry:
            self.stdout.write(f"\n{self.style.WARNING(app.name)}")
            self.stdout.write(f"  path: {app.working_directory or '.'}")
            if app.process_name:
                self.stdout.write(f"  process: {app.process_name}")

            if options["verbose"]:
                for stage, command in app.stages():
                    self.stdout.write(f"  {stage}: {command or '(skipped)'}")

        self.stdout.write("\n" + "-" * 60)
