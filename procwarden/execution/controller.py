"""Abstract process-control interface."""

from abc import ABC, abstractmethod


class ProcessController(ABC):
    """Abstract interface for acting on host processes by name.

    Every method returns normally on success and raises
    :class:`procwarden.errors.RestartError` on failure.
    """

    @abstractmethod
    def restart_service(self, process_name: str) -> None:
        """
        Restart a managed service through the service manager.

        Args:
            process_name: Service name
        """
        ...

    @abstractmethod
    def terminate(self, process_name: str) -> None:
        """
        Signal every running process whose name matches exactly.

        Args:
            process_name: Process name
        """
        ...

    @abstractmethod
    def launch(self, process_name: str) -> int | None:
        """
        Start the executable named ``process_name`` in the background.

        Only spawn errors are reported; the new process's exit status is not
        monitored.

        Args:
            process_name: Executable name, resolved through PATH

        Returns:
            PID of the new process, if known
        """
        ...
