"""Per-process circuit breaker gating restart attempts."""

import logging
from datetime import datetime, timedelta, timezone

from procwarden.breakers.models import CircuitState, CircuitStatus

logger = logging.getLogger(__name__)


class CircuitBreaker:
    """Tracks consecutive restart failures per process name.

    The state table lives in memory for the lifetime of the daemon and is
    owned by whoever holds this object (the monitor loop). Nothing here is
    persisted, so failure history is lost when the monitor restarts.
    """

    def __init__(self, failure_threshold: int, reset_duration: timedelta):
        """
        Initialize circuit breaker.

        Args:
            failure_threshold: Consecutive failures that open a breaker
            reset_duration: Time after the last failure before an open breaker closes
        """
        if failure_threshold < 1:
            raise ValueError(f"failure_threshold must be >= 1, got {failure_threshold}")
        self.failure_threshold = failure_threshold
        self.reset_duration = reset_duration
        self._states: dict[str, CircuitState] = {}

    def may_attempt(self, process_name: str, now: datetime | None = None) -> bool:
        """
        Check whether a restart attempt may proceed for a process.

        An open breaker whose reset duration has elapsed is closed here, before
        the attempt is made, with the failure count cleared. It re-opens once
        failure_threshold new failures accumulate.

        Args:
            process_name: Process name (breaker key)
            now: Current time (defaults to wall-clock UTC)

        Returns:
            True if a restart may be attempted
        """
        now = now or datetime.now(timezone.utc)
        state = self._state_for(process_name)

        if state.status == CircuitStatus.CLOSED:
            return True

        if (
            state.last_failure_at is not None
            and now - state.last_failure_at < self.reset_duration
        ):
            logger.warning(f"Circuit breaker open for {process_name}. Skipping restart.")
            return False

        state.status = CircuitStatus.CLOSED
        state.consecutive_failures = 0
        logger.info(f"Circuit breaker reset for {process_name}")
        return True

    def record_outcome(
        self, process_name: str, success: bool, now: datetime | None = None
    ) -> bool:
        """
        Record the outcome of a restart attempt.

        Args:
            process_name: Process name (breaker key)
            success: Whether the restart succeeded
            now: Current time (defaults to wall-clock UTC)

        Returns:
            True if this outcome opened the breaker
        """
        state = self._state_for(process_name)

        if success:
            state.consecutive_failures = 0
            state.status = CircuitStatus.CLOSED
            return False

        state.consecutive_failures += 1
        state.last_failure_at = now or datetime.now(timezone.utc)

        if (
            state.status == CircuitStatus.CLOSED
            and state.consecutive_failures >= self.failure_threshold
        ):
            state.status = CircuitStatus.OPEN
            logger.warning(
                f"Circuit breaker opened for {process_name} "
                f"after {state.consecutive_failures} failures"
            )
            return True

        return False

    def get_state(self, process_name: str) -> CircuitState | None:
        """Return the breaker state for a process, or None if never seen."""
        return self._states.get(process_name)

    def is_open(self, process_name: str) -> bool:
        """Check if the breaker for a process is currently open."""
        state = self._states.get(process_name)
        return state is not None and state.status == CircuitStatus.OPEN

    def _state_for(self, process_name: str) -> CircuitState:
        state = self._states.get(process_name)
        if state is None:
            state = CircuitState()
            self._states[process_name] = state
        return state
