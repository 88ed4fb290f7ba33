"""Per-process circuit breaker suppressing flapping restarts."""

from procwarden.breakers.breaker import CircuitBreaker
from procwarden.breakers.models import CircuitState, CircuitStatus

__all__ = [
    "CircuitBreaker",
    "CircuitState",
    "CircuitStatus",
]
