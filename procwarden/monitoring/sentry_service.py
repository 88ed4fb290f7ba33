"""Sentry error tracking for the monitor daemon.

Reports startup failures, unexpected errors while remediating a process, and
breakers opening. Restart outcomes are kept as breadcrumbs so an event shows
the remediation history that led up to it. Database credentials are removed
from every event before it leaves the host.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from procwarden import __version__

REDACTED = "[REDACTED]"

# Keys whose values are never sent
SENSITIVE_KEYS = ("password", "passwd", "secret", "token", "authorization", "auth", "dsn")

# user:password@ inside connection URLs, e.g. in SQLAlchemy error messages
_URL_CREDENTIALS = re.compile(r"(\b[a-z][a-z0-9+.-]*://[^:/@\s]+:)[^@\s]+@", re.IGNORECASE)


@dataclass
class SentryConfig:
    """Sentry configuration."""
    dsn: str
    environment: str = "development"
    release: str = ""
    traces_sample_rate: float = 0.0
    enabled: bool = True
    ignore_errors: list[str] = field(default_factory=lambda: ["KeyboardInterrupt"])


def scrub(value: Any) -> Any:
    """Return a copy of event data with secrets redacted."""
    if isinstance(value, dict):
        return {
            key: REDACTED if any(s in str(key).lower() for s in SENSITIVE_KEYS) else scrub(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [scrub(item) for item in value]
    if isinstance(value, str):
        return _URL_CREDENTIALS.sub(rf"\1{REDACTED}@", value)
    return value


class SentryService:
    """Sentry reporting for remediation events.

    Every method is a no-op until initialize() succeeds, so callers never
    need to check whether Sentry is configured.
    """

    def __init__(self, config: SentryConfig):
        self.config = config
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> bool:
        """Initialize the Sentry SDK.

        Returns:
            True if events will be sent
        """
        if not self.config.enabled or not self.config.dsn:
            return False

        try:
            sentry_sdk.init(
                dsn=self.config.dsn,
                environment=self.config.environment,
                release=self.config.release or self._get_release(),
                traces_sample_rate=self.config.traces_sample_rate,
                # Log records stay local; remediation events are reported explicitly
                integrations=[LoggingIntegration(level=None, event_level=None)],
                before_send=self._before_send,
            )
        except Exception:
            return False
        sentry_sdk.set_tag("service", "procwarden")
        self._initialized = True
        return True

    def _get_release(self) -> str:
        return os.environ.get("SENTRY_RELEASE") or f"procwarden@{__version__}"

    def _before_send(self, event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
        exc_info = hint.get("exc_info")
        if exc_info and exc_info[0].__name__ in self.config.ignore_errors:
            return None
        return scrub(event)

    def capture_error(
        self,
        error: BaseException,
        stage: str,
        process_name: str | None = None,
        process_id: int | None = None,
    ) -> str | None:
        """Report an exception raised at a given stage.

        Args:
            error: The exception
            stage: Where it happened ("config_load", "fetch_alarms", "restart", ...)
            process_name: Process being remediated, if any
            process_id: Alarm record id, if any

        Returns:
            Event ID if sent
        """
        if not self._initialized:
            return None

        sentry_sdk.set_tag("stage", stage)
        if process_name is not None:
            sentry_sdk.set_context(
                "remediation", {"process_name": process_name, "process_id": process_id}
            )
        return sentry_sdk.capture_exception(error)

    def capture_breaker_open(
        self, process_name: str, process_id: int, failures: int
    ) -> str | None:
        """Report a circuit breaker opening for a process."""
        if not self._initialized:
            return None

        sentry_sdk.set_context(
            "remediation",
            {"process_name": process_name, "process_id": process_id, "failures": failures},
        )
        return sentry_sdk.capture_message(
            f"Circuit breaker opened for {process_name}", level="warning"
        )

    def record_restart(
        self,
        process_name: str,
        success: bool,
        strategy: str | None = None,
        failed_stage: str | None = None,
    ) -> None:
        """Add a breadcrumb for one restart attempt."""
        if not self._initialized:
            return

        outcome = "succeeded" if success else "failed"
        sentry_sdk.add_breadcrumb(
            category="restart",
            message=f"Restart {outcome} for {process_name}",
            data={"strategy": strategy, "failed_stage": failed_stage},
            level="info" if success else "warning",
        )

    def flush(self, timeout: float = 2.0) -> None:
        """Send pending events, waiting at most ``timeout`` seconds."""
        if self._initialized:
            sentry_sdk.flush(timeout=timeout)


_service: SentryService | None = None


def init_sentry(config: SentryConfig) -> SentryService:
    """Create and initialize the global Sentry service."""
    global _service
    _service = SentryService(config)
    _service.initialize()
    return _service


def get_sentry() -> SentryService | None:
    """Return the global Sentry service, or None if init_sentry was never called."""
    return _service
