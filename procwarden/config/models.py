"""Pydantic settings models with type safety and range validation."""

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.engine import URL, make_url

# Validation bounds for the monitor section
MIN_CHECK_INTERVAL = 5
MAX_CHECK_INTERVAL = 3600
MIN_RESTART_FAILURES = 1
MAX_RESTART_FAILURES = 10
MIN_CIRCUIT_RESET_TIME = 30
MAX_CIRCUIT_RESET_TIME = 86400

# Whole numbers only, as written in the config file or environment
INTEGER_PATTERN = re.compile(r"^[0-9]+$")


class DatabaseConfig(BaseModel):
    """Connection parameters for the alarm store."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(
        min_length=1,
        pattern=r"^[a-zA-Z0-9.-]+$",
        description="Database host name or address",
    )
    user: str = Field(min_length=1, description="Database user")
    password: str = Field(min_length=1, description="Database password")
    database: str = Field(
        min_length=1,
        pattern=r"^[a-zA-Z0-9_-]+$",
        description="Database (schema) name",
    )
    port: int = Field(default=3306, ge=1, le=65535, description="Database port")
    driver: str = Field(
        default="mysql+pymysql",
        min_length=1,
        description="SQLAlchemy drivername used to build the connection URL",
    )
    url: str | None = Field(
        default=None,
        description="Full SQLAlchemy URL; overrides the individual fields when set",
    )

    def sqlalchemy_url(self) -> URL:
        """Build the SQLAlchemy connection URL."""
        if self.url:
            return make_url(self.url)
        return URL.create(
            drivername=self.driver,
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
        )


class MonitorConfig(BaseModel):
    """Polling cadence, circuit breaker and remediation parameters."""

    model_config = ConfigDict(frozen=True)

    check_interval: int = Field(
        ge=MIN_CHECK_INTERVAL,
        le=MAX_CHECK_INTERVAL,
        description="Seconds to sleep between poll cycles",
    )
    max_restart_failures: int = Field(
        ge=MIN_RESTART_FAILURES,
        le=MAX_RESTART_FAILURES,
        description="Consecutive restart failures that open a process's breaker",
    )
    circuit_reset_time: int = Field(
        ge=MIN_CIRCUIT_RESET_TIME,
        le=MAX_CIRCUIT_RESET_TIME,
        description="Seconds after the last failure before an open breaker closes again",
    )
    restart_grace_seconds: float = Field(
        default=2.0,
        ge=0.0,
        le=60.0,
        description="Pause between terminating a process and relaunching it",
    )
    command_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=600.0,
        description="Upper bound for every service-manager or signal call",
    )
    mode: Literal["live", "dry-run"] = Field(
        default="live",
        description="live: act on host processes, dry-run: log intended actions only",
    )

    @field_validator("check_interval", "max_restart_failures", "circuit_reset_time", mode="before")
    @classmethod
    def _whole_number(cls, value: Any) -> Any:
        """Accept ints and digit-only strings; reject bools, floats and anything else."""
        if isinstance(value, bool):
            raise ValueError("must be an integer, not a boolean")
        if isinstance(value, int):
            return value
        if isinstance(value, str) and INTEGER_PATTERN.fullmatch(value):
            return int(value)
        raise ValueError(f"must be a whole number, got {value!r}")


class PrometheusConfig(BaseModel):
    """Prometheus exporter settings."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False, description="Expose Prometheus metrics")
    port: int = Field(default=9108, ge=1, le=65535, description="Metrics HTTP port")


class Settings(BaseModel):
    """Root settings object. Immutable once validated."""

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig
    monitor: MonitorConfig
    metrics: PrometheusConfig = Field(default_factory=PrometheusConfig)
