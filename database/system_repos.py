"""System repositories - communications, templates, settings, files, users.

Supporting data of the platform: the email communication log, stock email
templates, the single organization settings row, uploaded file metadata and
back-office users.
"""
from typing import Optional, List, Dict, Any
from datetime import datetime
from sqlalchemy import func
from sqlalchemy.orm import Session

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .models import (
    Communication, EmailTemplate, OrganizationSettings, FileRecord, User
)


class CommunicationRepository(BaseCRUD):
    """Communication log repository (append-mostly)."""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def list_by_event(self, event_id: int, status: Optional[str] = None,
                      session: Optional[Session] = None
                      ) -> List[Communication]:
        """Communications of an event, newest first."""
        def _query(sess):
            query = sess.query(Communication).filter(
                Communication.event_id == event_id
            )
            if status:
                query = query.filter(Communication.status == status)
            return query.order_by(Communication.id.desc()).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def get_due_scheduled(self, now: Optional[datetime] = None,
                          session: Optional[Session] = None
                          ) -> List[Communication]:
        """Scheduled communications whose send time has come."""
        now = now or datetime.utcnow()

        def _query(sess):
            return sess.query(Communication).filter(
                Communication.status == "scheduled",
                Communication.scheduled_at <= now
            ).order_by(Communication.scheduled_at.asc()).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def add_metrics(self, communication_id: int,
                    opens: int = 0, clicks: int = 0, bounces: int = 0
                    ) -> Optional[Communication]:
        """Increment the delivery counters of a communication.

        Returns:
            The updated Communication, or None when it does not exist.
        """
        with self._get_session() as session:
            communication = session.get(Communication, communication_id)
            if communication is None:
                return None
            communication.open_count = (communication.open_count or 0) + opens
            communication.click_count = (
                (communication.click_count or 0) + clicks
            )
            communication.bounce_count = (
                (communication.bounce_count or 0) + bounces
            )
            session.commit()
        return self.get_by_id(Communication, communication_id)

    def get_stats(self, event_id: int,
                  session: Optional[Session] = None) -> Dict[str, Any]:
        """Aggregate delivery statistics of an event's sent communications."""
        def _query(sess):
            row = sess.query(
                func.count(Communication.id),
                func.coalesce(func.sum(Communication.recipients_count), 0),
                func.coalesce(func.sum(Communication.open_count), 0),
                func.coalesce(func.sum(Communication.click_count), 0),
                func.coalesce(func.sum(Communication.bounce_count), 0),
            ).filter(
                Communication.event_id == event_id,
                Communication.status == "sent"
            ).one()
            sent, recipients, opens, clicks, bounces = row
            return {
                "sent_count": sent,
                "recipients": recipients,
                "open_rate": opens / recipients * 100 if recipients else 0,
                "click_rate": clicks / recipients * 100 if recipients else 0,
                "bounce_rate": bounces / recipients * 100 if recipients else 0,
            }

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)


class EmailTemplateRepository(BaseCRUD):
    """Email template repository."""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def get_or_create(self, name: str, category: str, subject: str,
                      body: str, is_default: bool = False,
                      session: Optional[Session] = None) -> EmailTemplate:
        """Get a template by name or create it.

        Returns:
            EmailTemplate object.
        """
        def _do(sess):
            template = sess.query(EmailTemplate).filter(
                EmailTemplate.name == name
            ).first()
            if not template:
                template = EmailTemplate(
                    name=name, category=category, subject=subject,
                    body=body, is_default=is_default
                )
                sess.add(template)
                sess.flush()
                sess.refresh(template)
            return template

        if session:
            return _do(session)

        with self._get_session() as sess:
            template = _do(sess)
            sess.commit()
            template_id = template.id
        return self.get_by_id(EmailTemplate, template_id)

    def list_by_category(self, category: str,
                         session: Optional[Session] = None
                         ) -> List[EmailTemplate]:
        return self.get_all(
            EmailTemplate, filters={"category": category}, session=session
        )


class SettingsRepository(BaseCRUD):
    """Organization settings repository (single row)."""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def get(self, session: Optional[Session] = None) -> OrganizationSettings:
        """Return the settings row, creating it with defaults if missing."""
        def _do(sess):
            row = sess.query(OrganizationSettings).order_by(
                OrganizationSettings.id
            ).first()
            if row is None:
                row = OrganizationSettings()
                sess.add(row)
                sess.flush()
                sess.refresh(row)
            return row

        if session:
            return _do(session)

        with self._get_session() as sess:
            row = _do(sess)
            sess.commit()
            row_id = row.id
        return self.get_by_id(OrganizationSettings, row_id)

    def save(self, settings_data: Dict[str, Any]) -> int:
        """Update the settings row (idempotent).

        Unknown keys are ignored.

        Returns:
            Settings row ID.
        """
        with self._get_session() as session:
            row = self.get(session=session)
            for key, value in settings_data.items():
                if hasattr(row, key):
                    setattr(row, key, value)
            session.commit()
            session.refresh(row)
            return row.id


class FileRepository(BaseCRUD):
    """Uploaded file metadata repository."""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def list_by_event(self, event_id: int,
                      session: Optional[Session] = None) -> List[FileRecord]:
        return self.get_all(
            FileRecord, filters={"event_id": event_id},
            order_by=FileRecord.uploaded_at, session=session
        )

    def total_size(self, event_id: Optional[int] = None,
                   session: Optional[Session] = None) -> int:
        """Sum of file sizes in bytes, optionally for one event."""
        def _query(sess):
            query = sess.query(func.coalesce(func.sum(FileRecord.file_size), 0))
            if event_id is not None:
                query = query.filter(FileRecord.event_id == event_id)
            return int(query.scalar() or 0)

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)


class UserRepository(BaseCRUD):
    """Back-office user repository."""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def get_by_email(self, email: str,
                     session: Optional[Session] = None) -> Optional[User]:
        def _query(sess):
            return sess.query(User).filter(
                func.lower(User.email) == email.lower()
            ).first()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def set_role(self, user_id: int, role: str,
                 session: Optional[Session] = None) -> Optional[User]:
        return self.update_by_id(User, user_id, session=session, role=role)
