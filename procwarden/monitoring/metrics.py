"""Prometheus metrics for the monitor daemon.

Example:
    >>> from procwarden.monitoring.metrics import MetricsService, MetricsConfig
    >>>
    >>> metrics = MetricsService(MetricsConfig(port=9108))
    >>> metrics.start_server()
    >>>
    >>> metrics.record_restart("nginx", "service", success=True)
    >>> metrics.record_breaker_open("worker-3")
"""

import logging
import threading
from dataclasses import dataclass

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, start_http_server

logger = logging.getLogger(__name__)

# Module-level singleton
_metrics: "MetricsService | None" = None


@dataclass(frozen=True)
class MetricsConfig:
    """Configuration for metrics service.

    Attributes:
        enabled: Whether metrics collection is enabled
        port: HTTP server port for Prometheus scraping
        prefix: Metric name prefix
    """

    enabled: bool = True
    port: int = 9108
    prefix: str = "procwarden"


class MetricsService:
    """Prometheus metrics for poll cycles, restarts and breakers.

    Exposes:
    - Poll cycle count and alarms seen in the latest cycle
    - Restart attempts by process/strategy/result
    - Breaker skips and breaker opens per process
    - Query and acknowledgment failures
    """

    def __init__(
        self,
        config: MetricsConfig | None = None,
        registry: CollectorRegistry | None = None,
    ) -> None:
        """Initialize metrics service.

        Args:
            config: Metrics configuration (uses defaults if not provided)
            registry: Collector registry (defaults to the global registry)
        """
        self.config = config or MetricsConfig()
        self._registry = registry if registry is not None else REGISTRY
        self._server_started = False
        self._lock = threading.Lock()

        self._poll_cycles: Counter | None = None
        self._alarms_fetched: Gauge | None = None
        self._restarts: Counter | None = None
        self._breaker_skips: Counter | None = None
        self._breaker_opens: Counter | None = None
        self._query_failures: Counter | None = None
        self._ack_failures: Counter | None = None

        if self.config.enabled:
            self._initialize_metrics()

    def _initialize_metrics(self) -> None:
        """Initialize Prometheus metrics objects."""
        prefix = self.config.prefix
        registry = self._registry

        self._poll_cycles = Counter(
            f"{prefix}_poll_cycles_total",
            "Number of completed poll cycles",
            registry=registry,
        )

        self._alarms_fetched = Gauge(
            f"{prefix}_alarms_fetched",
            "Unacknowledged alarms returned by the latest poll",
            registry=registry,
        )

        self._restarts = Counter(
            f"{prefix}_restarts_total",
            "Restart attempts",
            ["process", "strategy", "result"],
            registry=registry,
        )

        self._breaker_skips = Counter(
            f"{prefix}_breaker_skips_total",
            "Restart attempts suppressed by an open circuit breaker",
            ["process"],
            registry=registry,
        )

        self._breaker_opens = Counter(
            f"{prefix}_breaker_opens_total",
            "Number of times a process's circuit breaker opened",
            ["process"],
            registry=registry,
        )

        self._query_failures = Counter(
            f"{prefix}_query_failures_total",
            "Alarm queries that failed",
            registry=registry,
        )

        self._ack_failures = Counter(
            f"{prefix}_ack_failures_total",
            "Alarm acknowledgments that failed after a successful restart",
            ["process"],
            registry=registry,
        )

        logger.info("Prometheus metrics initialized")

    def start_server(self) -> bool:
        """Start the Prometheus HTTP server.

        Returns:
            True if server started successfully, False otherwise
        """
        if not self.config.enabled:
            logger.info("Metrics disabled, server not started")
            return False

        with self._lock:
            if self._server_started:
                logger.warning("Metrics server already started")
                return True

            try:
                start_http_server(self.config.port, registry=self._registry)
            except OSError as e:
                logger.error(f"Failed to start metrics server: {e}")
                return False
            self._server_started = True
            logger.info(f"Prometheus metrics server started on port {self.config.port}")
            return True

    @property
    def is_enabled(self) -> bool:
        """Check if metrics collection is enabled."""
        return self.config.enabled

    def record_poll_cycle(self, alarms_fetched: int) -> None:
        """Record a completed poll cycle and the size of its batch."""
        if not self.config.enabled or self._poll_cycles is None or self._alarms_fetched is None:
            return
        self._poll_cycles.inc()
        self._alarms_fetched.set(alarms_fetched)

    def record_restart(self, process: str, strategy: str | None, success: bool) -> None:
        """Record a restart attempt.

        Args:
            process: Process name
            strategy: Strategy that succeeded ("service" or "process"), None on failure
            success: Whether the restart succeeded
        """
        if not self.config.enabled or self._restarts is None:
            return
        self._restarts.labels(
            process=process,
            strategy=strategy or "none",
            result="success" if success else "failure",
        ).inc()

    def record_breaker_skip(self, process: str) -> None:
        """Record a restart suppressed by an open breaker."""
        if not self.config.enabled or self._breaker_skips is None:
            return
        self._breaker_skips.labels(process=process).inc()

    def record_breaker_open(self, process: str) -> None:
        """Record a breaker transitioning to open."""
        if not self.config.enabled or self._breaker_opens is None:
            return
        self._breaker_opens.labels(process=process).inc()

    def record_query_failure(self) -> None:
        """Record a failed alarm query."""
        if not self.config.enabled or self._query_failures is None:
            return
        self._query_failures.inc()

    def record_ack_failure(self, process: str) -> None:
        """Record a failed acknowledgment."""
        if not self.config.enabled or self._ack_failures is None:
            return
        self._ack_failures.labels(process=process).inc()


def init_metrics(config: MetricsConfig | None = None) -> MetricsService:
    """Initialize the global metrics service.

    Args:
        config: Metrics configuration

    Returns:
        Initialized MetricsService
    """
    global _metrics
    _metrics = MetricsService(config)
    return _metrics


def get_metrics() -> MetricsService | None:
    """Get the global metrics service instance.

    Returns:
        MetricsService if initialized, None otherwise
    """
    return _metrics
