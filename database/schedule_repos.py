"""Schedule repositories - agenda sessions, deadlines and check-ins.

Time-based lookups take ``now`` as a parameter so callers (and tests) decide
what "now" is.
"""
from typing import Optional, List, Sequence
from datetime import datetime, timedelta
from sqlalchemy import func
from sqlalchemy.orm import Session

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .models import AgendaSession, Checkin, Deadline

OPEN_DEADLINE_STATUSES = ("pending", "in_progress")
PRESENT_STATUSES = ("checked_in", "checked_out")


class AgendaRepository(BaseCRUD):
    """Agenda session repository."""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def list_by_event(self, event_id: int,
                      session: Optional[Session] = None
                      ) -> List[AgendaSession]:
        """Sessions of an event ordered by start time."""
        return self.get_all(
            AgendaSession, filters={"event_id": event_id},
            order_by=AgendaSession.start_time, session=session
        )

    def list_by_speaker(self, speaker_id: int,
                        session: Optional[Session] = None
                        ) -> List[AgendaSession]:
        """Sessions held by a speaker ordered by start time."""
        return self.get_all(
            AgendaSession, filters={"speaker_id": speaker_id},
            order_by=AgendaSession.start_time, session=session
        )


class DeadlineRepository(BaseCRUD):
    """Deadline repository."""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def list_by_event(self, event_id: int,
                      statuses: Optional[Sequence[str]] = None,
                      session: Optional[Session] = None) -> List[Deadline]:
        """Deadlines of an event by due date, optionally filtered by status."""
        def _query(sess):
            query = sess.query(Deadline).filter(Deadline.event_id == event_id)
            if statuses:
                query = query.filter(Deadline.status.in_(statuses))
            return query.order_by(Deadline.due_date.asc()).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def get_upcoming(self, event_id: int, now: datetime, days: int = 7,
                     session: Optional[Session] = None) -> List[Deadline]:
        """Open deadlines due within ``days`` days from ``now``."""
        def _query(sess):
            return sess.query(Deadline).filter(
                Deadline.event_id == event_id,
                Deadline.due_date >= now,
                Deadline.due_date <= now + timedelta(days=days),
                Deadline.status.in_(OPEN_DEADLINE_STATUSES)
            ).order_by(Deadline.due_date.asc()).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def get_past_due(self, event_id: Optional[int], now: datetime,
                     session: Optional[Session] = None) -> List[Deadline]:
        """Open or already flagged deadlines whose due date has passed.

        Args:
            event_id: Event filter; None scans every event.
            now: Reference time.
            session: External session (optional).
        """
        def _query(sess):
            query = sess.query(Deadline).filter(
                Deadline.due_date <= now,
                Deadline.status.in_(OPEN_DEADLINE_STATUSES + ("overdue",))
            )
            if event_id is not None:
                query = query.filter(Deadline.event_id == event_id)
            return query.order_by(Deadline.due_date.asc()).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)


class CheckinRepository(BaseCRUD):
    """Check-in repository."""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def list_by_event(self, event_id: int, status: Optional[str] = None,
                      session: Optional[Session] = None) -> List[Checkin]:
        """Check-ins of an event, most recent first."""
        filters = {"event_id": event_id}
        if status:
            filters["status"] = status
        return self.get_all(
            Checkin, filters=filters, order_by=Checkin.checked_in_at.desc(),
            session=session
        )

    def find_present(self, event_id: int, person_type: str, person_id: int,
                     session: Optional[Session] = None) -> Optional[Checkin]:
        """The check-in of a person who showed up (checked in or out)."""
        def _query(sess):
            return sess.query(Checkin).filter(
                Checkin.event_id == event_id,
                Checkin.person_type == person_type,
                Checkin.person_id == person_id,
                Checkin.status.in_(PRESENT_STATUSES)
            ).first()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def is_person_checked_in(self, event_id: int, email: str,
                             session: Optional[Session] = None) -> bool:
        """Whether someone with this email showed up (case-insensitive)."""
        def _query(sess):
            return sess.query(Checkin.id).filter(
                Checkin.event_id == event_id,
                func.lower(Checkin.person_email) == email.lower(),
                Checkin.status.in_(PRESENT_STATUSES)
            ).first() is not None

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def get_recent(self, event_id: int, limit: int = 5,
                   session: Optional[Session] = None) -> List[Checkin]:
        """Latest arrivals of an event."""
        def _query(sess):
            return sess.query(Checkin).filter(
                Checkin.event_id == event_id,
                Checkin.status.in_(PRESENT_STATUSES)
            ).order_by(Checkin.checked_in_at.desc()).limit(limit).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def get_needing_badges(self, event_id: int,
                           session: Optional[Session] = None
                           ) -> List[Checkin]:
        """Checked-in people still waiting for a badge, oldest first."""
        def _query(sess):
            return sess.query(Checkin).filter(
                Checkin.event_id == event_id,
                Checkin.status == "checked_in",
                Checkin.badge_printed.is_(False)
            ).order_by(Checkin.checked_in_at.asc()).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)
