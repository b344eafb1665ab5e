"""Entity repositories - data access for events and the people around them.

Manages the base entities of the store (events, participants, staff). Every
repository inherits BaseCRUD and adds domain-specific lookups.
"""
from typing import Optional, List, Dict
from datetime import datetime
from sqlalchemy import or_, func
from sqlalchemy.orm import Session

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .models import Event, Participant, Staff


class EventRepository(BaseCRUD):
    """Event repository."""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def list_events(self, status: Optional[str] = None,
                    session: Optional[Session] = None) -> List[Event]:
        """List events, most recent start date first.

        Args:
            status: Status filter (optional).
            session: External session (optional).

        Returns:
            Event list.
        """
        def _query(sess):
            query = sess.query(Event)
            if status:
                query = query.filter(Event.status == status)
            return query.order_by(Event.start_date.desc()).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def get_upcoming(self, now: Optional[datetime] = None,
                     session: Optional[Session] = None) -> List[Event]:
        """Events starting after ``now`` that are not cancelled."""
        now = now or datetime.utcnow()

        def _query(sess):
            return sess.query(Event).filter(
                Event.start_date >= now,
                Event.status != "cancelled"
            ).order_by(Event.start_date.asc()).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def set_status(self, event_id: int, status: str,
                   session: Optional[Session] = None) -> Optional[Event]:
        """Change the status of an event.

        Returns:
            The updated Event, or None when it does not exist.
        """
        return self.update_by_id(Event, event_id, session=session,
                                 status=status)

    def search(self, keyword: str,
               session: Optional[Session] = None) -> List[Event]:
        """Search events by title or location."""
        def _query(sess):
            return sess.query(Event).filter(
                or_(
                    Event.title.contains(keyword),
                    Event.location.contains(keyword),
                )
            ).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)


class ParticipantRepository(BaseCRUD):
    """Participant repository."""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def list_by_event(self, event_id: int,
                      session: Optional[Session] = None) -> List[Participant]:
        """Participants of an event ordered by last name."""
        def _query(sess):
            return sess.query(Participant).filter(
                Participant.event_id == event_id
            ).order_by(Participant.last_name, Participant.first_name).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def find_by_email(self, event_id: int, email: str,
                      session: Optional[Session] = None
                      ) -> Optional[Participant]:
        """Find a participant of an event by email (case-insensitive)."""
        def _query(sess):
            return sess.query(Participant).filter(
                Participant.event_id == event_id,
                func.lower(Participant.email) == email.lower()
            ).first()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def count_by_status(self, event_id: int,
                        session: Optional[Session] = None) -> Dict[str, int]:
        """Count participants of an event per registration status.

        Returns:
            Mapping of status to count, plus ``checked_in``.
        """
        def _query(sess):
            rows = sess.query(
                Participant.registration_status, func.count(Participant.id)
            ).filter(
                Participant.event_id == event_id
            ).group_by(Participant.registration_status).all()
            counts = {
                "pending": 0, "confirmed": 0, "cancelled": 0, "waitlist": 0
            }
            for status, total in rows:
                counts[status] = total
            counts["checked_in"] = sess.query(Participant).filter(
                Participant.event_id == event_id,
                Participant.checked_in.is_(True)
            ).count()
            return counts

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def check_in(self, participant_id: int,
                 at: Optional[datetime] = None,
                 session: Optional[Session] = None) -> Optional[Participant]:
        """Mark a participant as checked in."""
        return self.update_by_id(
            Participant, participant_id, session=session,
            checked_in=True, checked_in_at=at or datetime.utcnow()
        )


class StaffRepository(BaseCRUD):
    """Staff repository."""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def get_active_staff(self,
                         session: Optional[Session] = None) -> List[Staff]:
        """All active staff members."""
        return self.get_all(
            Staff, filters={"is_active": True}, session=session
        )

    def deactivate(self, staff_id: int,
                   session: Optional[Session] = None) -> Optional[Staff]:
        """Deactivate a staff member.

        Returns:
            The updated Staff object.
        """
        return self.update_by_id(
            Staff, staff_id, session=session, is_active=False
        )

    def search(self, keyword: str,
               session: Optional[Session] = None) -> List[Staff]:
        """Search staff by first or last name."""
        def _query(sess):
            return sess.query(Staff).filter(
                or_(
                    Staff.first_name.contains(keyword),
                    Staff.last_name.contains(keyword),
                )
            ).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)
