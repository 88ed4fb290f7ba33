"""Alarm store access: table models, alarm query and acknowledgment."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from procwarden.config.models import DatabaseConfig

from .alarm_source import AlarmSource
from .models import AlarmRecord, Base, Process, ProcessStatus
from .status_writer import StatusWriter


def create_session_factory(config: DatabaseConfig, create_tables: bool = False) -> sessionmaker:
    """
    Build an engine and session factory for the alarm store.

    Args:
        config: Database settings
        create_tables: Create missing tables (local SQLite runs)

    Returns:
        Configured sessionmaker
    """
    engine = create_engine(config.sqlalchemy_url(), echo=False, pool_pre_ping=True)
    if create_tables:
        Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)


__all__ = [
    "AlarmRecord",
    "AlarmSource",
    "Base",
    "Process",
    "ProcessStatus",
    "StatusWriter",
    "create_session_factory",
]
