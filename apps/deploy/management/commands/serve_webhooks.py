"""
Management command to serve the webhook on the configured listen address.

Usage:
    python manage.py serve_webhooks
    python manage.py serve_webhooks 0.0.0.0:9000
"""

from django.core.management import call_command
from django.core.management.base import BaseCommand, CommandError

from apps.deploy.conf import DeployConfigError, get_config


class Command(BaseCommand):
    help = "Load the deploy config and serve the webhook (development server)"

    def add_arguments(self, parser):
        parser.add_argument(
            "addrport",
            nargs="?",
            help="Listen address (default: 'addr' from the deploy config)",
        )

    def handle(self, *args, **options):
        try:
            config = get_config()
        except DeployConfigError as e:
            raise CommandError(str(e))

        addrport = options["addrport"] or config.addr
        # ":8000" means all interfaces
        if addrport.startswith(":"):
            addrport = "0.0.0.0" + addrport

        self.stdout.write(f"Serving {config.root} on {addrport} ({len(config.registry)} app(s))")
        call_command("runserver", addrport, use_reloader=False)
