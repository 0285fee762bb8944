"""
Choice types for push-to-deploy.

Deployment history is not persisted, so this module defines no tables;
it only holds the enumerations shared by the pipeline, views and commands.
"""

from django.db import models


class DeployStage(models.TextChoices):
    """Deployment stages in execution order."""

    UPDATE = "update", "Update"
    BUILD = "build", "Build"
    TEST = "test", "Test"
    RELEASE = "release", "Release"


class ProcessAction(models.TextChoices):
    """Actions understood by the remote process supervisor."""

    START = "start", "Start"
    STOP = "stop", "Stop"
    RESTART = "restart", "Restart"


class RunStatus(models.TextChoices):
    """Final status of a pipeline run."""

    SUCCEEDED = "succeeded", "Succeeded"
    FAILED = "failed", "Failed"
    ABORTED = "aborted", "Aborted"
    NOOP = "noop", "No-op"
