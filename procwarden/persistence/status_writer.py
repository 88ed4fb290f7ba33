"""Acknowledges remediated alarms in the alarm store."""

import logging
from datetime import datetime, timezone

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from procwarden.errors import AcknowledgeError
from procwarden.persistence.models import ProcessStatus

logger = logging.getLogger(__name__)

NOTE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S UTC"


class StatusWriter:
    """Clears alarm flags and appends audit notes after a successful restart."""

    def __init__(self, session: Session):
        """
        Initialize status writer with database session.

        Args:
            session: SQLAlchemy session
        """
        self.session = session

    def acknowledge(self, process_id: int, timestamp: datetime) -> bool:
        """
        Clear the alarm flag and append a restart note for a process.

        Both changes are applied in a single UPDATE so readers never see a
        half-updated row. A failure is logged and reported, never raised: the
        restart already happened and the alarm is simply selected again on
        the next poll.

        Args:
            process_id: Identifier of the alarmed process
            timestamp: Time of the successful restart (naive values are taken as UTC)

        Returns:
            True if the alarm was cleared
        """
        try:
            self._clear_alarm(process_id, timestamp)
        except AcknowledgeError as e:
            logger.error(
                f"DB UPDATE LOG: Failed to update alarm status for process_id: {process_id} ({e})"
            )
            return False

        logger.info(f"DB UPDATE LOG: Successfully updated alarm status for process_id: {process_id}")
        return True

    def _clear_alarm(self, process_id: int, timestamp: datetime) -> None:
        if timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone(timezone.utc)
        note = f" - Restarted at {timestamp.strftime(NOTE_TIMESTAMP_FORMAT)}"
        stmt = (
            update(ProcessStatus)
            .where(ProcessStatus.process_id == process_id)
            .values(
                alarma=0,
                notes=func.coalesce(ProcessStatus.notes, "") + note,
            )
            .execution_options(synchronize_session=False)
        )

        try:
            result = self.session.execute(stmt)
            if result.rowcount == 0:
                self.session.rollback()
                raise AcknowledgeError(f"no status row for process_id {process_id}")
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise AcknowledgeError(str(e)) from e
