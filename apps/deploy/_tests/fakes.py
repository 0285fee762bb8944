"""Fake runner and process controller used across deploy tests."""

from apps.deploy.dtos import CommandResult, ControlResult
from apps.deploy.process_control import BaseProcessController


class FakeController(BaseProcessController):
    """Records every call; actions listed in fail_on come back as failures."""

    name = "fake"

    def __init__(self, fail_on=(), calls=None):
        self.fail_on = {str(a) for a in fail_on}
        self.calls = calls if calls is not None else []

    def control(self, process_name, action):
        self.calls.append((str(action), process_name))
        if str(action) in self.fail_on:
            return ControlResult(
                action=action,
                process_name=process_name,
                success=False,
                error="connection refused",
            )
        return ControlResult(action=action, process_name=process_name, success=True, response="True")


class FakeRunner:
    """Records non-empty commands; commands listed in fail_commands exit 1."""

    def __init__(self, fail_commands=(), calls=None):
        self.fail_commands = set(fail_commands)
        self.calls = calls if calls is not None else []
        self.directories = []

    def run(self, working_directory, command):
        if not command:
            return CommandResult(command=command, success=True, skipped=True)
        self.calls.append(("run", command))
        self.directories.append(working_directory)
        if command in self.fail_commands:
            return CommandResult(command=command, success=False, returncode=1, error="exit status 1")
        return CommandResult(command=command, success=True, returncode=0)
