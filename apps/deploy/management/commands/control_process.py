"""
Management command to send one action to the process supervisor.

Usage:
    python manage.py control_process web restart
    python manage.py control_process web stop --rpc 127.0.0.1:9001
"""

from django.core.management.base import BaseCommand, CommandError

from apps.deploy.conf import DeployConfigError, get_config
from apps.deploy.models import ProcessAction
from apps.deploy.process_control import get_process_controller


class Command(BaseCommand):
    help = "Start, stop or restart a process through the configured supervisor"

    def add_arguments(self, parser):
        parser.add_argument("process", type=str, help="Supervisor process name")
        parser.add_argument("action", choices=ProcessAction.values, help="Action to send")
        parser.add_argument(
            "--rpc",
            type=str,
            help="Supervisor address (default: 'rpc' from the deploy config)",
        )

    def handle(self, *args, **options):
        address = options["rpc"]
        if not address:
            try:
                address = get_config().rpc
            except DeployConfigError as e:
                raise CommandError(str(e))

        controller = get_process_controller(address)
        if controller is None:
            raise CommandError("No supervisor address configured (set 'rpc' or pass --rpc)")

        result = controller.control(options["process"], options["action"])
        if not result.success:
            raise CommandError(f"{options['action']} {options['process']} failed: {result.error}")

        self.stdout.write(
            self.style.SUCCESS(f"{options['action']} {options['process']}: {result.response}")
        )
