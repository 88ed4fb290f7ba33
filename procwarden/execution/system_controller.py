"""Process control through systemctl, pkill and subprocess spawning."""

import logging
import subprocess

from procwarden.errors import RestartError

from .controller import ProcessController

logger = logging.getLogger(__name__)

# pkill exit status when no process matched
PKILL_NO_MATCH = 1


class SystemProcessController(ProcessController):
    """Acts on the local host. Every blocking call is bounded by a timeout."""

    def __init__(self, timeout_seconds: float = 30.0) -> None:
        """
        Initialize system controller.

        Args:
            timeout_seconds: Maximum time for each systemctl/pkill call
        """
        self.timeout_seconds = timeout_seconds
        self._children: list[subprocess.Popen[bytes]] = []

    def restart_service(self, process_name: str) -> None:
        """Run ``systemctl restart -- <name>``."""
        result = self._run("service_restart", process_name, ["systemctl", "restart", "--", process_name])
        if result.returncode != 0:
            raise RestartError(
                process_name,
                "service_restart",
                _describe_failure(result, "systemctl restart"),
            )

    def terminate(self, process_name: str) -> None:
        """Run ``pkill -x -- <name>`` (exact process-name match)."""
        result = self._run("terminate", process_name, ["pkill", "-x", "--", process_name])
        if result.returncode == PKILL_NO_MATCH:
            raise RestartError(process_name, "terminate", "no matching process")
        if result.returncode != 0:
            raise RestartError(process_name, "terminate", _describe_failure(result, "pkill"))

    def launch(self, process_name: str) -> int | None:
        """Spawn ``process_name`` detached, with its output discarded."""
        self._reap_children()
        try:
            child = subprocess.Popen(
                [process_name],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except (OSError, ValueError) as e:
            raise RestartError(process_name, "launch", str(e)) from e

        self._children.append(child)
        return child.pid

    def _run(
        self, stage: str, process_name: str, cmd: list[str]
    ) -> subprocess.CompletedProcess[str]:
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise RestartError(
                process_name, stage, f"{cmd[0]} timed out after {self.timeout_seconds}s"
            ) from e
        except OSError as e:
            raise RestartError(process_name, stage, f"{cmd[0]} could not be run: {e}") from e

    def _reap_children(self) -> None:
        """Collect exit statuses of previously launched processes."""
        self._children = [child for child in self._children if child.poll() is None]


def _describe_failure(result: subprocess.CompletedProcess[str], what: str) -> str:
    detail = (result.stderr or "").strip()
    if detail:
        return f"{what} exited {result.returncode}: {detail}"
    return f"{what} exited {result.returncode}"
