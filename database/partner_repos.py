"""Partner repositories - speakers, services, sponsors and staff assignments.

These entities may carry a financial facet mirrored by a budget item. The
link is the plain ``budget_item_id`` column; nothing at the store level keeps
it consistent, so the repositories expose the lookups used to detect and
clear stale links.
"""
from typing import Optional, List, Type
from sqlalchemy.orm import Session, selectinload

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .models import Speaker, Service, Sponsor, StaffAssignment


class LinkedEntityRepository(BaseCRUD):
    """Common lookups for entities with a ``budget_item_id`` link.

    Subclasses set ``model``.
    """

    model: Type = None

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def list_by_event(self, event_id: int,
                      session: Optional[Session] = None) -> List:
        """Rows of an event in creation order."""
        return self.get_all(
            self.model, filters={"event_id": event_id},
            order_by=self.model.id, session=session
        )

    def list_linked(self, event_id: Optional[int] = None,
                    session: Optional[Session] = None) -> List:
        """Rows that reference a budget item."""
        def _query(sess):
            query = sess.query(self.model).filter(
                self.model.budget_item_id.isnot(None)
            )
            if event_id is not None:
                query = query.filter(self.model.event_id == event_id)
            return query.order_by(self.model.id).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def find_by_budget_item(self, item_id: int,
                            session: Optional[Session] = None):
        """The row linked to a budget item, or None."""
        def _query(sess):
            return sess.query(self.model).filter(
                self.model.budget_item_id == item_id
            ).first()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def set_link(self, entity_id: int, item_id: Optional[int],
                 session: Optional[Session] = None):
        """Store (or clear, with None) the linked budget item ID."""
        return self.update_by_id(
            self.model, entity_id, session=session, budget_item_id=item_id
        )


class SpeakerRepository(LinkedEntityRepository):
    """Speaker repository."""

    model = Speaker

    def list_by_status(self, event_id: int, status: str,
                       session: Optional[Session] = None) -> List[Speaker]:
        """Speakers of an event with a given confirmation status."""
        return self.get_all(
            Speaker,
            filters={"event_id": event_id, "confirmation_status": status},
            session=session
        )


class ServiceRepository(LinkedEntityRepository):
    """External service repository."""

    model = Service

    def list_by_type(self, event_id: int, service_type: str,
                     session: Optional[Session] = None) -> List[Service]:
        """Services of an event with a given type."""
        return self.get_all(
            Service,
            filters={"event_id": event_id, "service_type": service_type},
            session=session
        )


class SponsorRepository(LinkedEntityRepository):
    """Sponsor repository."""

    model = Sponsor


class StaffAssignmentRepository(LinkedEntityRepository):
    """Staff assignment repository."""

    model = StaffAssignment

    def list_by_event(self, event_id: int,
                      session: Optional[Session] = None
                      ) -> List[StaffAssignment]:
        """Assignments of an event with their staff member loaded."""
        def _query(sess):
            return sess.query(StaffAssignment).options(
                selectinload(StaffAssignment.staff)
            ).filter(
                StaffAssignment.event_id == event_id
            ).order_by(StaffAssignment.id).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def list_by_staff(self, staff_id: int,
                      session: Optional[Session] = None
                      ) -> List[StaffAssignment]:
        """Every assignment of a staff member."""
        return self.get_all(
            StaffAssignment, filters={"staff_id": staff_id},
            order_by=StaffAssignment.id, session=session
        )
