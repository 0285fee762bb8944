"""
Django settings for the push-deploy project.

Everything deploy-specific (listen address, webhook path, supervisor
address, applications) lives in the JSON file named by DEPLOY_CONFIG_FILE;
this module only holds process-level settings read from the environment.
"""

import os
from pathlib import Path

from config.env import env_bool, env_float, load_env

BASE_DIR = Path(__file__).resolve().parent.parent

load_env(BASE_DIR)

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "push-deploy-insecure-dev-key")

DEBUG = env_bool("DJANGO_DEBUG", False)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get("DJANGO_ALLOWED_HOSTS", "*").split(",")
    if host.strip()
]

INSTALLED_APPS = [
    "apps.deploy",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "config.urls"

WSGI_APPLICATION = "config.wsgi.application"

# Deployment history is not persisted.
DATABASES: dict = {}

USE_TZ = True
TIME_ZONE = "UTC"

# --- Deploy ---

DEPLOY_CONFIG_FILE = os.environ.get("DEPLOY_CONFIG_FILE", str(BASE_DIR / "config.json"))

# One run at a time per application; runs for different apps stay concurrent.
DEPLOY_SERIALIZE_RUNS = env_bool("DEPLOY_SERIALIZE_RUNS", True)

# Seconds before a stage command is killed; unset waits forever.
DEPLOY_COMMAND_TIMEOUT = env_float("DEPLOY_COMMAND_TIMEOUT")

DEPLOY_LOG_LEVEL = os.environ.get("DEPLOY_LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        "apps.deploy": {
            "handlers": ["console"],
            "level": DEPLOY_LOG_LEVEL,
            "propagate": False,
        },
        "django": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    },
}
