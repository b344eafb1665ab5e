"""Email communications and organization settings."""
from datetime import datetime
from typing import Any, Mapping, Optional

from loguru import logger

from database import DatabaseManager
from database.models import Communication, EmailTemplate, Event
from validation import validate
from validation.communications import (
    CommunicationForm, EmailTemplateForm, OrganizationSettingsForm
)
from .results import ActionResult
from .serialization import row_to_dict

Payload = Optional[Mapping[str, Any]]


class CommunicationActions:
    """Communication log entries and their delivery outcome.

    Sending itself happens outside this class; the caller reports the
    outcome with ``mark_communication_sent`` or ``mark_communication_failed``.
    """

    def __init__(self, db: DatabaseManager) -> None:
        self.db = db

    def create_communication(self, event_id: int,
                             payload: Payload) -> ActionResult:
        """Create a communication, scheduled when ``scheduled_at`` is set."""
        result = validate(CommunicationForm, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)
        data = result.data

        try:
            if self.db.events.get_by_id(Event, event_id) is None:
                return ActionResult.fail("Event not found")
            if (data.template_id is not None
                    and self.db.email_templates.get_by_id(
                        EmailTemplate, data.template_id) is None):
                return ActionResult.fail("Email template not found")

            communication = self.db.communications.create(
                Communication, event_id=event_id,
                subject=data.subject,
                body=data.body,
                recipient_type=data.recipient_type,
                custom_recipients=list(data.custom_recipients or []),
                template_id=data.template_id,
                scheduled_at=data.scheduled_at,
                status="scheduled" if data.scheduled_at else "draft",
            )
        except Exception as e:
            logger.error(f"Failed to create communication: {e}")
            return ActionResult.fail("Could not create the communication")

        return ActionResult.ok(
            "Communication created", row_to_dict(communication)
        )

    def mark_communication_sent(self, communication_id: int,
                                recipients_count: int,
                                sent_at: Optional[datetime] = None
                                ) -> ActionResult:
        return self._update(
            communication_id, "Communication sent",
            status="sent", recipients_count=max(recipients_count, 0),
            sent_at=sent_at or datetime.utcnow(), error_message=None,
        )

    def mark_communication_failed(self, communication_id: int,
                                  error: str) -> ActionResult:
        logger.warning(f"Communication {communication_id} failed: {error}")
        return self._update(
            communication_id, "Communication marked as failed",
            status="failed", error_message=error,
        )

    def record_communication_metrics(self, communication_id: int,
                                     opens: int = 0, clicks: int = 0,
                                     bounces: int = 0) -> ActionResult:
        """Add delivery metrics reported by the mail provider."""
        if min(opens, clicks, bounces) < 0:
            return ActionResult.fail("Metrics cannot be negative")
        try:
            communication = self.db.communications.add_metrics(
                communication_id, opens=opens, clicks=clicks, bounces=bounces
            )
        except Exception as e:
            logger.error(
                f"Failed to record metrics of communication {communication_id}: {e}"
            )
            return ActionResult.fail("Could not record the metrics")

        if communication is None:
            return ActionResult.fail("Communication not found")
        data = row_to_dict(communication)
        data.update(
            open_rate=communication.open_rate,
            click_rate=communication.click_rate,
            bounce_rate=communication.bounce_rate,
        )
        return ActionResult.ok("Metrics recorded", data)

    def create_email_template(self, payload: Payload) -> ActionResult:
        result = validate(EmailTemplateForm, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)

        try:
            template = self.db.email_templates.create(
                EmailTemplate, **result.data.model_dump()
            )
        except Exception as e:
            logger.error(f"Failed to create email template: {e}")
            return ActionResult.fail("Could not create the email template")

        return ActionResult.ok("Email template created", row_to_dict(template))

    def update_organization_settings(self, payload: Payload) -> ActionResult:
        """Update only the settings present in the payload."""
        result = validate(OrganizationSettingsForm, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)

        try:
            self.db.org_settings.save(result.data.provided())
            settings_row = self.db.org_settings.get()
        except Exception as e:
            logger.error(f"Failed to save organization settings: {e}")
            return ActionResult.fail("Could not save the settings")

        return ActionResult.ok("Settings saved", row_to_dict(settings_row))

    def _update(self, communication_id: int, message: str,
                **fields: Any) -> ActionResult:
        try:
            communication = self.db.communications.update_by_id(
                Communication, communication_id, **fields
            )
        except Exception as e:
            logger.error(
                f"Failed to update communication {communication_id}: {e}"
            )
            return ActionResult.fail("Could not update the communication")

        if communication is None:
            return ActionResult.fail("Communication not found")
        return ActionResult.ok(message, row_to_dict(communication))
