import os
from typing import Any, Callable, Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from procwarden.config.models import DatabaseConfig, MonitorConfig, Settings
from procwarden.persistence.models import Base, Process, ProcessStatus


@pytest.fixture
def in_memory_db() -> Generator[Session, None, None]:
    """Create an in-memory SQLite database for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def add_process(in_memory_db: Session) -> Callable[..., None]:
    """Insert a process and its status row."""

    def _add(
        process_id: int,
        process_name: str | None,
        alarma: int = 1,
        sound: int = 0,
        notes: str | None = "",
    ) -> None:
        in_memory_db.add(Process(process_id=process_id, process_name=process_name))
        in_memory_db.add(
            ProcessStatus(process_id=process_id, alarma=alarma, sound=sound, notes=notes)
        )
        in_memory_db.commit()

    return _add


@pytest.fixture
def settings() -> Settings:
    """Valid settings: threshold 3, reset 60s."""
    return Settings(
        database=DatabaseConfig(
            host="localhost",
            user="monitor",
            password="secret",
            database="process_status",
            url="sqlite:///:memory:",
        ),
        monitor=MonitorConfig(
            check_interval=5,
            max_restart_failures=3,
            circuit_reset_time=60,
            restart_grace_seconds=0,
        ),
    )


@pytest.fixture
def config_data() -> dict[str, Any]:
    """Raw config file contents that pass validation."""
    return {
        "database": {
            "host": "db.example.com",
            "user": "monitor",
            "password": "secret",
            "database": "process_status",
        },
        "monitor": {
            "check_interval": 60,
            "max_restart_failures": 3,
            "circuit_reset_time": 300,
        },
    }


@pytest.fixture(autouse=True)
def clean_config_env() -> Generator[None, None, None]:
    """Ensure PROCWARDEN_* and SENTRY_* env vars do not interfere with tests unless explicitly set."""
    original_env = {}
    keys_to_clear = [
        key for key in os.environ
        if key.startswith("PROCWARDEN_") or key.startswith("SENTRY_")
    ]

    for key in keys_to_clear:
        original_env[key] = os.environ.pop(key)

    yield

    for key, value in original_env.items():
        os.environ[key] = value
