"""Error taxonomy for the monitor daemon."""


class ProcwardenError(Exception):
    """Base class for all monitor errors."""


class ConfigError(ProcwardenError):
    """Settings are missing, malformed, or out of range. Fatal at startup."""


class QueryError(ProcwardenError):
    """The alarm query failed. The cycle is treated as an empty batch."""


class RestartError(ProcwardenError):
    """A process-control step failed during remediation."""

    def __init__(self, process_name: str, stage: str, reason: str):
        """
        Initialize restart error.

        Args:
            process_name: Process being remediated
            stage: Step that failed ("service_restart", "terminate", "launch")
            reason: Human-readable failure detail
        """
        super().__init__(f"{stage} failed for {process_name}: {reason}")
        self.process_name = process_name
        self.stage = stage
        self.reason = reason


class AcknowledgeError(ProcwardenError):
    """Clearing an alarm flag after a successful restart failed."""
