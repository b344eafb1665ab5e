"""Database manager - unified facade.

DatabaseManager is the single entry point of the database package. It
composes every repository and offers two APIs:

1. **Repository access** (fine-grained):
   ``db.events``, ``db.budget_items`` and the other attributes return ORM
   objects, for callers that need full control.

2. **Convenience methods** (coarse-grained):
   flat methods such as ``get_event_list()`` return dicts and plain numbers,
   for the business layer and the JSON API.
"""
from typing import Optional, List, Dict, Any
from sqlalchemy.orm import Session

from .connection import DatabaseConnection
from .entity_repos import (
    EventRepository, ParticipantRepository, StaffRepository
)
from .budget_repos import BudgetCategoryRepository, BudgetItemRepository
from .partner_repos import (
    SpeakerRepository, ServiceRepository, SponsorRepository,
    StaffAssignmentRepository
)
from .schedule_repos import (
    AgendaRepository, CheckinRepository, DeadlineRepository
)
from .survey_repos import SurveyRepository
from .system_repos import (
    CommunicationRepository, EmailTemplateRepository, SettingsRepository,
    FileRepository, UserRepository
)
from .models import Event, Staff


class DatabaseManager:
    """Database manager - unified facade.

    Attributes:
        conn: Connection manager.
        events: Event repository.
        participants: Participant repository.
        staff: Staff repository.
        speakers: Speaker repository.
        services: External service repository.
        sponsors: Sponsor repository.
        staff_assignments: Staff assignment repository.
        budget_categories: Budget category repository.
        budget_items: Budget item repository.
        agenda: Agenda session repository.
        deadlines: Deadline repository.
        checkins: Check-in repository.
        surveys: Survey repository.
        communications: Communication log repository.
        email_templates: Email template repository.
        org_settings: Organization settings repository.
        files: File metadata repository.
        users: User repository.

    Example::

        db = DatabaseManager("sqlite:///data/events.db")
        db.create_tables()

        # Repository access (ORM objects)
        event = db.events.get_by_id(Event, 1)

        # Convenience access (dicts)
        events = db.get_event_list()
    """

    def __init__(self, database_url: Optional[str] = None) -> None:
        """Initialize the manager.

        Args:
            database_url: Connection URL; None uses the settings value.
        """
        # Infrastructure
        self.conn = DatabaseConnection(database_url)

        # Entities
        self.events = EventRepository(self.conn)
        self.participants = ParticipantRepository(self.conn)
        self.staff = StaffRepository(self.conn)

        # Partners with budget links
        self.speakers = SpeakerRepository(self.conn)
        self.services = ServiceRepository(self.conn)
        self.sponsors = SponsorRepository(self.conn)
        self.staff_assignments = StaffAssignmentRepository(self.conn)

        # Budget
        self.budget_categories = BudgetCategoryRepository(self.conn)
        self.budget_items = BudgetItemRepository(self.conn)

        # Schedule and on-site
        self.agenda = AgendaRepository(self.conn)
        self.deadlines = DeadlineRepository(self.conn)
        self.checkins = CheckinRepository(self.conn)

        # Surveys and system data
        self.surveys = SurveyRepository(self.conn)
        self.communications = CommunicationRepository(self.conn)
        self.email_templates = EmailTemplateRepository(self.conn)
        self.org_settings = SettingsRepository(self.conn)
        self.files = FileRepository(self.conn)
        self.users = UserRepository(self.conn)

    # ================================================================
    # Infrastructure
    # ================================================================

    def create_tables(self) -> None:
        """Create all tables (idempotent)."""
        self.conn.create_tables()

    def get_session(self) -> Session:
        """Return a new session."""
        return self.conn.get_session()

    @property
    def database_url(self) -> str:
        """Database connection URL."""
        return self.conn.database_url

    @property
    def engine(self):
        """SQLAlchemy engine."""
        return self.conn.engine

    def execute_raw_sql(self, sql: str,
                        params: Optional[dict] = None) -> Any:
        """Execute a raw SQL statement.

        Prefer the ORM; use raw SQL only when necessary.
        """
        return self.conn.execute_raw_sql(sql, params)

    def close(self) -> None:
        """Dispose of the connection pool."""
        self.conn.close()

    # ================================================================
    # Convenience queries
    # ================================================================

    def get_event_list(self, status: Optional[str] = None
                       ) -> List[Dict[str, Any]]:
        """List events as dicts, most recent first.

        Args:
            status: Status filter (optional).

        Returns:
            Event info dicts.
        """
        return [
            self._event_to_dict(e)
            for e in self.events.list_events(status=status)
        ]

    def get_event_info(self, event_id: int) -> Optional[Dict[str, Any]]:
        """Event info with participant counts.

        Returns:
            Event dict with a ``participants`` count mapping, or None.
        """
        event = self.events.get_by_id(Event, event_id)
        if event is None:
            return None

        info = self._event_to_dict(event)
        info["participants"] = self.participants.count_by_status(event_id)
        info["speakers_count"] = len(self.speakers.list_by_event(event_id))
        info["sponsors_count"] = len(self.sponsors.list_by_event(event_id))
        return info

    def get_staff_list(self, active_only: bool = True
                       ) -> List[Dict[str, Any]]:
        """Staff members as dicts.

        Args:
            active_only: Only active staff, default True.
        """
        if active_only:
            members = self.staff.get_active_staff()
        else:
            members = self.staff.get_all(Staff)

        return [
            {
                "id": s.id,
                "name": s.full_name,
                "role": s.role,
                "hourly_rate": float(s.hourly_rate) if s.hourly_rate else 0,
                "is_active": s.is_active,
            }
            for s in members
        ]

    @staticmethod
    def _event_to_dict(event: Event) -> Dict[str, Any]:
        return {
            "id": event.id,
            "title": event.title,
            "event_type": event.event_type,
            "status": event.status,
            "start_date": event.start_date.isoformat() if event.start_date else None,
            "end_date": event.end_date.isoformat() if event.end_date else None,
            "location": event.location,
            "max_participants": event.max_participants,
            "total_budget": float(event.total_budget) if event.total_budget else 0,
        }
