"""
Process controller clients.

A controller asks a remote process supervisor to start, stop or restart a
named process. Each call opens its own connection and closes it before
returning. Controllers never raise: every failure comes back as a
ControlResult with success=False, and the pipeline decides what to do.

Public API:
- BaseProcessController
- SupervisorProcessController
- get_process_controller
"""

from __future__ import annotations

import logging
import xmlrpc.client
from abc import ABC, abstractmethod

from apps.deploy.dtos import ControlResult
from apps.deploy.models import ProcessAction

logger = logging.getLogger(__name__)

# supervisord fault raised by stopProcess when the process is already down
SUPERVISOR_NOT_RUNNING = 70


class BaseProcessController(ABC):
    """Abstract base class for process supervisor clients."""

    name: str = "base"

    @abstractmethod
    def control(self, process_name: str, action: str) -> ControlResult:
        """
        Send one action for one process to the supervisor.

        Args:
            process_name: Supervisor name of the process.
            action: One of ProcessAction (start, stop, restart).

        Returns:
            ControlResult; unknown actions and transport errors are failures.
        """

    def start(self, process_name: str) -> ControlResult:
        return self.control(process_name, ProcessAction.START)

    def stop(self, process_name: str) -> ControlResult:
        return self.control(process_name, ProcessAction.STOP)

    def restart(self, process_name: str) -> ControlResult:
        return self.control(process_name, ProcessAction.RESTART)


class SupervisorProcessController(BaseProcessController):
    """
    Controller for a supervisord-compatible XML-RPC endpoint.

    The address may be a bare "host:port" (the /RPC2 endpoint is assumed)
    or a full http(s) URL. Restart is a stop followed by a start. Stopping a
    process that is already down (NOT_RUNNING) counts as success, for stop
    and for restart.
    """

    name = "supervisor"

    def __init__(self, address: str):
        self.address = address
        self.url = self.server_url(address)

    @staticmethod
    def server_url(address: str) -> str:
        if "://" in address:
            return address
        return f"http://{address}/RPC2"

    def control(self, process_name: str, action: str) -> ControlResult:
        try:
            action = ProcessAction(action)
        except ValueError:
            return ControlResult(
                action=str(action),
                process_name=process_name,
                success=False,
                error=f"Unknown command: {action}",
            )

        logger.debug(f"Supervisor {self.url}: {action} {process_name}")

        try:
            with xmlrpc.client.ServerProxy(self.url, allow_none=True) as proxy:
                if action == ProcessAction.START:
                    ack = proxy.supervisor.startProcess(process_name)
                elif action == ProcessAction.STOP:
                    try:
                        ack = proxy.supervisor.stopProcess(process_name)
                    except xmlrpc.client.Fault as e:
                        if e.faultCode != SUPERVISOR_NOT_RUNNING:
                            raise
                        ack = "NOT_RUNNING"
                else:
                    try:
                        proxy.supervisor.stopProcess(process_name)
                    except xmlrpc.client.Fault as e:
                        if e.faultCode != SUPERVISOR_NOT_RUNNING:
                            raise
                    ack = proxy.supervisor.startProcess(process_name)
        except xmlrpc.client.Fault as e:
            error = f"Supervisor fault {e.faultCode}: {e.faultString}"
        except xmlrpc.client.ProtocolError as e:
            error = f"Supervisor protocol error: {e.errcode} {e.errmsg}"
        except OSError as e:
            error = f"Cannot reach supervisor at {self.address}: {e}"
        except Exception as e:
            error = f"Supervisor call failed: {e}"
        else:
            return ControlResult(
                action=action,
                process_name=process_name,
                success=True,
                response=str(ack),
            )

        return ControlResult(
            action=action,
            process_name=process_name,
            success=False,
            error=error,
        )


def get_process_controller(address: str) -> BaseProcessController | None:
    """Return a controller for the configured address, or None when disabled."""
    if not address:
        return None
    return SupervisorProcessController(address)
