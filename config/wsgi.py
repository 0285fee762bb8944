"""WSGI entry point.

The deploy config is loaded before the first request so a broken config
file stops the worker at startup instead of on the first push.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()

from apps.deploy.conf import get_config  # noqa: E402

get_config()
