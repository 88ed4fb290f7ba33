"""Restart procedure with service-manager first, kill and relaunch second."""

import logging
import time
from dataclasses import dataclass
from typing import Callable

from procwarden.errors import RestartError

from .controller import ProcessController

logger = logging.getLogger(__name__)

STRATEGY_SERVICE = "service"
STRATEGY_PROCESS = "process"


@dataclass(frozen=True)
class RestartResult:
    """Outcome of one restart attempt. Truthy when the restart succeeded."""

    process_name: str
    success: bool
    strategy: str | None = None  # strategy that succeeded
    failed_stage: str | None = None  # stage that ended a failed attempt
    detail: str = ""

    def __bool__(self) -> bool:
        return self.success


class RestartExecutor:
    """Remediates one process per call.

    Steps run strictly in order and a failed step ends the attempt. Nothing
    is retried here; the next poll cycle, gated by the circuit breaker, is
    the retry.
    """

    def __init__(
        self,
        controller: ProcessController,
        grace_seconds: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize restart executor.

        Args:
            controller: Process-control backend
            grace_seconds: Wait between termination and relaunch
            sleep: Sleep function (injectable for tests)
        """
        self.controller = controller
        self.grace_seconds = grace_seconds
        self._sleep = sleep

    def restart(self, process_name: str) -> RestartResult:
        """
        Restart a process.

        1. Restart as a managed service; success ends the attempt.
        2. Otherwise terminate running instances by name.
        3. Wait the grace period.
        4. Launch a new instance in the background.

        Args:
            process_name: Process/service name

        Returns:
            RestartResult describing the outcome
        """
        logger.info(f"RESTART LOG: Beginning restart procedure for {process_name}")

        try:
            self.controller.restart_service(process_name)
        except RestartError as e:
            logger.warning(
                f"RESTART LOG: Failed to restart as service: {process_name} ({e.reason})"
            )
            logger.warning("RESTART LOG: Trying as process instead")
        else:
            logger.info(f"RESTART LOG: Successfully restarted service: {process_name}")
            return RestartResult(process_name, True, strategy=STRATEGY_SERVICE)

        try:
            self.controller.terminate(process_name)
        except RestartError as e:
            logger.error(f"RESTART LOG: Failed to kill process: {process_name} ({e.reason})")
            return RestartResult(process_name, False, failed_stage=e.stage, detail=e.reason)
        logger.info(f"RESTART LOG: Successfully killed process: {process_name}")

        if self.grace_seconds > 0:
            self._sleep(self.grace_seconds)

        try:
            pid = self.controller.launch(process_name)
        except RestartError as e:
            logger.error(f"RESTART LOG: Failed to start process: {process_name} ({e.reason})")
            return RestartResult(process_name, False, failed_stage=e.stage, detail=e.reason)

        pid_note = f" (pid {pid})" if pid is not None else ""
        logger.info(f"RESTART LOG: Successfully started process: {process_name}{pid_note}")
        return RestartResult(process_name, True, strategy=STRATEGY_PROCESS)
