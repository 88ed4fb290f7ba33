"""Reads unacknowledged alarms from the alarm store."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from procwarden.errors import QueryError
from procwarden.persistence.models import AlarmRecord, Process, ProcessStatus

logger = logging.getLogger(__name__)


class AlarmSource:
    """Selects processes flagged as alarmed and not yet acknowledged."""

    def __init__(self, session: Session):
        """
        Initialize alarm source with database session.

        Args:
            session: SQLAlchemy session
        """
        self.session = session

    def fetch_alarms(self) -> list[AlarmRecord]:
        """
        Fetch all alarm records with alarma = 1 and sound = 0.

        Rows missing an identifier or a process name are skipped with a
        warning. Order is unspecified.

        Returns:
            List of alarm records

        Raises:
            QueryError: If the query or connection fails
        """
        stmt = (
            select(
                ProcessStatus.process_id,
                Process.process_name,
                ProcessStatus.alarma,
                ProcessStatus.sound,
                ProcessStatus.notes,
            )
            .outerjoin(Process, Process.process_id == ProcessStatus.process_id)
            .where(ProcessStatus.alarma == 1, ProcessStatus.sound == 0)
        )

        try:
            rows = self.session.execute(stmt).all()
            # End the read transaction so the next poll sees fresh rows
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise QueryError(f"Alarm query failed: {e}") from e

        alarms: list[AlarmRecord] = []
        for process_id, process_name, alarma, sound, notes in rows:
            if process_id is None or not process_name:
                logger.warning(
                    f"Skipping malformed alarm record (process_id={process_id!r}, "
                    f"process_name={process_name!r})"
                )
                continue
            alarms.append(
                AlarmRecord(
                    process_id=process_id,
                    process_name=process_name,
                    alarm_flag=bool(alarma),
                    acknowledged_flag=bool(sound),
                    notes=notes or "",
                )
            )
        return alarms
