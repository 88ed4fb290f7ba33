"""SQLAlchemy table models for the alarm store."""

from dataclasses import dataclass

import sqlalchemy as sa
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""
    pass


class Process(Base):
    """Registered process: identifier and the name used for OS lookup."""
    __tablename__ = "PROCESE"

    process_id: Mapped[int] = mapped_column(sa.Integer(), primary_key=True)
    process_name: Mapped[str | None] = mapped_column(sa.String(255), nullable=True)


class ProcessStatus(Base):
    """Alarm state per process.

    ``alarma`` is the alarm flag and ``sound`` the acknowledged flag; both are
    stored as 0/1 integers.
    """
    __tablename__ = "STATUS_PROCESS"

    process_id: Mapped[int] = mapped_column(
        sa.Integer(), sa.ForeignKey("PROCESE.process_id"), primary_key=True
    )
    alarma: Mapped[int] = mapped_column(sa.Integer(), default=0, nullable=False)
    sound: Mapped[int] = mapped_column(sa.Integer(), default=0, nullable=False)
    notes: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)


@dataclass(frozen=True)
class AlarmRecord:
    """One alarmed process instance pulled from storage."""

    process_id: int
    process_name: str
    alarm_flag: bool
    acknowledged_flag: bool
    notes: str
