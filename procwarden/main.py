"""Main entry point for the monitor daemon."""

import argparse
import logging
import os
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError

from procwarden.breakers.breaker import CircuitBreaker
from procwarden.config.loader import load_config
from procwarden.core.monitor_loop import MonitorLoop
from procwarden.errors import ConfigError
from procwarden.execution.controller import ProcessController
from procwarden.execution.dry_run_controller import DryRunProcessController
from procwarden.execution.restart_executor import RestartExecutor
from procwarden.execution.system_controller import SystemProcessController
from procwarden.monitoring.metrics import MetricsConfig, init_metrics
from procwarden.monitoring.sentry_service import SentryConfig, get_sentry, init_sentry
from procwarden.persistence import AlarmSource, StatusWriter, create_session_factory

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="procwarden",
        description="Restart processes flagged as alarmed in the status database.",
    )
    parser.add_argument("-c", "--config", help="Path to JSON or INI config file")
    parser.add_argument(
        "--max-cycles",
        type=int,
        default=None,
        help="Stop after this many poll cycles (default: run until signalled)",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing alarm tables on startup (local/test databases)",
    )
    return parser.parse_args(argv)


def _add_file_logging() -> None:
    """Also log to PROCWARDEN_LOG_FILE when set."""
    log_file = os.environ.get("PROCWARDEN_LOG_FILE")
    if not log_file:
        return
    try:
        handler = logging.FileHandler(log_file)
    except OSError as e:
        logger.warning(f"Cannot open log file {log_file}: {e}")
        return
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(handler)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the monitor daemon."""
    args = _parse_args(argv)
    _add_file_logging()
    logger.info("Starting Process Monitor Service")

    # Initialize Sentry (if SENTRY_DSN is configured)
    sentry_dsn = os.environ.get("SENTRY_DSN", "")
    if sentry_dsn:
        sentry_env = os.environ.get("SENTRY_ENVIRONMENT", "development")
        init_sentry(SentryConfig(dsn=sentry_dsn, environment=sentry_env))
        logger.info(f"Sentry initialized (env={sentry_env})")
    else:
        logger.info("Sentry not configured (set SENTRY_DSN to enable)")
    sentry = get_sentry()

    # Load and validate configuration
    try:
        settings = load_config(args.config)
    except ConfigError as e:
        logger.error(f"Failed to read configuration: {e}")
        logger.error("Configuration validation failed. Exiting.")
        if sentry:
            sentry.capture_error(e, stage="config_load")
            sentry.flush()
        return 1

    # Create database session
    try:
        session_factory = create_session_factory(
            settings.database, create_tables=args.create_tables
        )
        session = session_factory()
    except SQLAlchemyError as e:
        logger.error(f"Database setup failed: {e}")
        if sentry:
            sentry.capture_error(e, stage="db_connect")
            sentry.flush()
        return 1
    logger.info(f"Alarm store: {settings.database.sqlalchemy_url().render_as_string(hide_password=True)}")

    metrics = None
    if settings.metrics.enabled:
        metrics = init_metrics(MetricsConfig(port=settings.metrics.port))
        metrics.start_server()

    controller: ProcessController
    if settings.monitor.mode == "dry-run":
        controller = DryRunProcessController()
        logger.info("Dry-run mode: process actions are logged, not executed")
    else:
        controller = SystemProcessController(
            timeout_seconds=settings.monitor.command_timeout_seconds
        )

    breaker = CircuitBreaker(
        failure_threshold=settings.monitor.max_restart_failures,
        reset_duration=timedelta(seconds=settings.monitor.circuit_reset_time),
    )
    loop = MonitorLoop(
        settings=settings,
        alarm_source=AlarmSource(session),
        status_writer=StatusWriter(session),
        breaker=breaker,
        executor=RestartExecutor(
            controller, grace_seconds=settings.monitor.restart_grace_seconds
        ),
        metrics=metrics,
        sentry=sentry,
    )

    logger.info(
        f"Polling every {settings.monitor.check_interval}s "
        f"(max_restart_failures={settings.monitor.max_restart_failures}, "
        f"circuit_reset_time={settings.monitor.circuit_reset_time}s)"
    )
    try:
        loop.run(max_cycles=args.max_cycles)
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")
    except Exception as e:
        logger.error(f"Monitor loop error: {e}", exc_info=True)
        if sentry:
            sentry.capture_error(e, stage="monitor_loop")
        return 1
    finally:
        if sentry:
            sentry.flush()
        session.close()
        logger.info("Process Monitor Service stopped")

    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
