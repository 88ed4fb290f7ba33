"""Process control backends and the restart procedure."""

from .controller import ProcessController
from .dry_run_controller import DryRunProcessController
from .restart_executor import RestartExecutor, RestartResult
from .system_controller import SystemProcessController

__all__ = [
    "DryRunProcessController",
    "ProcessController",
    "RestartExecutor",
    "RestartResult",
    "SystemProcessController",
]
