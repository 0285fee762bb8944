"""
Shell command runner for deployment stages.
"""

import logging
import subprocess
import sys
import time

from apps.deploy.dtos import CommandResult

logger = logging.getLogger(__name__)


class CommandRunner:
    """
    Run a stage command through the platform shell.

    The command string is handed to the shell as a single argument
    (/bin/bash -c on POSIX, cmd /c on Windows). Output is not captured:
    the child inherits this process's stdout/stderr.
    """

    def __init__(self, timeout: float | None = None) -> None:
        """
        Args:
            timeout: Seconds to wait for each command (None waits forever).
        """
        self.timeout = timeout

    @staticmethod
    def shell_args(command: str) -> list[str]:
        if sys.platform == "win32":
            return ["cmd", "/c", command]
        return ["/bin/bash", "-c", command]

    def run(self, working_directory: str, command: str) -> CommandResult:
        """
        Run `command` in `working_directory` and wait for it.

        An empty command is skipped and counts as success.
        """
        if not command:
            return CommandResult(command=command, success=True, skipped=True)

        start_time = time.perf_counter()
        result = CommandResult(command=command, success=False)

        try:
            completed = subprocess.run(
                self.shell_args(command),
                cwd=working_directory or None,
                timeout=self.timeout,
            )
            result.returncode = completed.returncode
            result.success = completed.returncode == 0
            if not result.success:
                result.error = f"exit status {completed.returncode}"
        except subprocess.TimeoutExpired:
            result.error = f"timed out after {self.timeout}s"
        except OSError as e:
            # missing working directory or shell
            result.error = str(e)

        result.duration_ms = (time.perf_counter() - start_time) * 1000
        return result
