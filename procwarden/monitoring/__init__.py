"""Monitoring services for the monitor daemon.

Provides observability capabilities:
- SentryService: Error tracking
- MetricsService: Prometheus metrics for poll cycles, restarts and breakers
"""

from procwarden.monitoring.metrics import (
    MetricsConfig,
    MetricsService,
    get_metrics,
    init_metrics,
)
from procwarden.monitoring.sentry_service import (
    SentryConfig,
    SentryService,
    get_sentry,
    init_sentry,
)

__all__ = [
    # Metrics
    "MetricsConfig",
    "MetricsService",
    "get_metrics",
    "init_metrics",
    # Sentry
    "SentryConfig",
    "SentryService",
    "get_sentry",
    "init_sentry",
]
