"""Data models for the per-process circuit breaker."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class CircuitStatus(str, Enum):
    """Breaker states."""

    CLOSED = "closed"  # Restarts permitted
    OPEN = "open"  # Restarts blocked until the reset time has elapsed


@dataclass
class CircuitState:
    """Failure accounting for one process name."""

    status: CircuitStatus = CircuitStatus.CLOSED
    consecutive_failures: int = 0
    last_failure_at: datetime | None = None
