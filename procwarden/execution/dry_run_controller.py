"""Dry-run process controller that records actions instead of taking them."""

import logging

from .controller import ProcessController

logger = logging.getLogger(__name__)


class DryRunProcessController(ProcessController):
    """Logs the commands it would run and always succeeds."""

    def __init__(self) -> None:
        """Initialize dry-run controller."""
        self.actions: list[tuple[str, str]] = []

    def restart_service(self, process_name: str) -> None:
        """Simulate ``systemctl restart``."""
        self.actions.append(("service_restart", process_name))
        logger.info(f"[dry-run] would run: systemctl restart -- {process_name}")

    def terminate(self, process_name: str) -> None:
        """Simulate ``pkill -x``."""
        self.actions.append(("terminate", process_name))
        logger.info(f"[dry-run] would run: pkill -x -- {process_name}")

    def launch(self, process_name: str) -> int | None:
        """Simulate spawning the executable."""
        self.actions.append(("launch", process_name))
        logger.info(f"[dry-run] would launch: {process_name}")
        return None
