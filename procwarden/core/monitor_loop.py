"""Poll loop tying alarm discovery to remediation and acknowledgment."""

import logging
import signal
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from procwarden.breakers.breaker import CircuitBreaker
from procwarden.config.models import Settings
from procwarden.errors import QueryError
from procwarden.execution.restart_executor import RestartExecutor, RestartResult
from procwarden.monitoring.metrics import MetricsService
from procwarden.monitoring.sentry_service import SentryService
from procwarden.persistence.alarm_source import AlarmSource
from procwarden.persistence.models import AlarmRecord
from procwarden.persistence.status_writer import StatusWriter

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CycleReport:
    """Counts for one poll cycle."""

    fetched: int = 0
    skipped: int = 0
    restarted: int = 0
    failed: int = 0
    acknowledged: int = 0
    errors: int = 0
    query_failed: bool = False


class MonitorLoop:
    """Single-threaded poll loop.

    Each cycle handles its batch to completion, one record at a time, before
    sleeping. Restart attempts for the same process name therefore never
    overlap and breaker state is never stale within a cycle.
    """

    def __init__(
        self,
        settings: Settings,
        alarm_source: AlarmSource,
        status_writer: StatusWriter,
        breaker: CircuitBreaker,
        executor: RestartExecutor,
        metrics: MetricsService | None = None,
        sentry: SentryService | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize monitor loop.

        Args:
            settings: Validated settings
            alarm_source: Reads unacknowledged alarms
            status_writer: Acknowledges remediated alarms
            breaker: Per-process circuit breaker (owned by this loop)
            executor: Restart procedure
            metrics: Optional Prometheus metrics
            sentry: Optional Sentry service
            clock: Time source (injectable for tests)
        """
        self.settings = settings
        self.alarm_source = alarm_source
        self.status_writer = status_writer
        self.breaker = breaker
        self.executor = executor
        self.metrics = metrics
        self.sentry = sentry
        self._clock = clock

        self._stop_event = threading.Event()

    def poll_once(self) -> CycleReport:
        """Run one poll cycle: fetch alarms, remediate each, acknowledge successes."""
        report = CycleReport()

        try:
            alarms = self.alarm_source.fetch_alarms()
        except QueryError as e:
            logger.error(f"Failed to fetch alarms, skipping this cycle: {e}")
            report.query_failed = True
            if self.metrics:
                self.metrics.record_query_failure()
            if self.sentry:
                self.sentry.capture_error(e, stage="fetch_alarms")
            alarms = []

        report.fetched = len(alarms)
        if alarms:
            logger.info(f"Poll found {len(alarms)} process(es) in alarm")
        else:
            logger.debug("Poll found no processes in alarm")

        for alarm in alarms:
            try:
                self._handle_alarm(alarm, report)
            except Exception as e:
                report.errors += 1
                logger.exception(
                    f"Unexpected error handling alarm for {alarm.process_name} "
                    f"(ID: {alarm.process_id})"
                )
                if self.sentry:
                    self.sentry.capture_error(
                        e,
                        stage="handle_alarm",
                        process_name=alarm.process_name,
                        process_id=alarm.process_id,
                    )

        if self.metrics:
            self.metrics.record_poll_cycle(report.fetched)
        return report

    def _handle_alarm(self, alarm: AlarmRecord, report: CycleReport) -> None:
        name = alarm.process_name
        logger.info(f"Found process in alarm: {name} (ID: {alarm.process_id})")

        if not self.breaker.may_attempt(name, self._clock()):
            report.skipped += 1
            if self.metrics:
                self.metrics.record_breaker_skip(name)
            return

        try:
            result = self.executor.restart(name)
        except Exception as e:
            logger.exception(f"RESTART LOG: Unexpected error restarting {name}")
            if self.sentry:
                self.sentry.capture_error(
                    e, stage="restart", process_name=name, process_id=alarm.process_id
                )
            result = RestartResult(name, False, failed_stage="unexpected", detail=str(e))

        self._record_outcome(alarm, result)

        if not result:
            report.failed += 1
            logger.error(f"Failed to handle alarm for {name} (stage: {result.failed_stage})")
            return

        report.restarted += 1
        if self.status_writer.acknowledge(alarm.process_id, self._clock()):
            report.acknowledged += 1
            logger.info(f"Successfully handled alarm for {name}")
        else:
            logger.error(
                f"Restarted {name} but could not acknowledge alarm {alarm.process_id}; "
                f"it will be selected again next cycle"
            )
            if self.metrics:
                self.metrics.record_ack_failure(name)

    def _record_outcome(self, alarm: AlarmRecord, result: RestartResult) -> None:
        name = alarm.process_name
        opened = self.breaker.record_outcome(name, result.success, self._clock())

        if self.metrics:
            self.metrics.record_restart(name, result.strategy, result.success)
            if opened:
                self.metrics.record_breaker_open(name)

        if self.sentry:
            self.sentry.record_restart(
                name, result.success, result.strategy, result.failed_stage
            )
            state = self.breaker.get_state(name)
            if opened and state is not None:
                self.sentry.capture_breaker_open(
                    name, alarm.process_id, state.consecutive_failures
                )

    def run(self, max_cycles: int | None = None) -> int:
        """
        Poll until stopped or for a fixed number of cycles.

        SIGINT/SIGTERM end the loop at the next sleep boundary; a cycle in
        progress is never interrupted.

        Args:
            max_cycles: Maximum number of cycles to run (None = forever)

        Returns:
            Number of cycles executed
        """
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        interval = self.settings.monitor.check_interval
        cycles = 0
        while not self._stop_event.is_set():
            self.poll_once()
            cycles += 1

            if max_cycles is not None and cycles >= max_cycles:
                break

            self._stop_event.wait(interval)

        logger.info(f"Monitor loop stopped after {cycles} cycle(s)")
        return cycles

    def stop(self) -> None:
        """Request the loop to stop at the next sleep boundary."""
        self._stop_event.set()

    def _signal_handler(self, signum: int, frame: Any) -> None:
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, stopping after current cycle")
        self.stop()
