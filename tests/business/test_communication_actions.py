"""CommunicationActions tests."""
from datetime import datetime

import pytest

from business.communication_actions import CommunicationActions

MESSAGE = {
    "recipient_type": "all_participants",
    "subject": "Agenda update",
    "body": "The keynote moves to 10:00.",
}


@pytest.fixture
def actions(temp_db):
    return CommunicationActions(temp_db)


class TestCommunications:

    def test_draft_and_scheduled(self, actions, event):
        draft = actions.create_communication(event.id, MESSAGE)
        scheduled = actions.create_communication(
            event.id, dict(MESSAGE, scheduled_at="2025-06-01T09:00:00")
        )

        assert draft.message == "Communication created"
        assert draft.data["status"] == "draft"
        assert scheduled.data["status"] == "scheduled"

    def test_custom_recipients(self, actions, event):
        result = actions.create_communication(event.id, dict(
            MESSAGE, recipient_type="custom",
            custom_recipients=["anna@acme.com", "luca@acme.com"],
        ))
        assert result.data["custom_recipients"] == [
            "anna@acme.com", "luca@acme.com"
        ]

    def test_missing_template(self, actions, event):
        result = actions.create_communication(
            event.id, dict(MESSAGE, template_id=8)
        )
        assert result.message == "Email template not found"

    def test_sent_then_metrics(self, actions, event):
        created = actions.create_communication(event.id, MESSAGE).data
        sent_at = datetime(2025, 6, 2, 10, 0)

        sent = actions.mark_communication_sent(created["id"], 200, sent_at)
        assert sent.data["status"] == "sent"
        assert sent.data["sent_at"] == sent_at

        actions.record_communication_metrics(created["id"], opens=80, clicks=20)
        result = actions.record_communication_metrics(created["id"], opens=20,
                                                      bounces=4)

        assert result.message == "Metrics recorded"
        assert result.data["open_count"] == 100
        assert result.data["open_rate"] == 50.0
        assert result.data["click_rate"] == 10.0
        assert result.data["bounce_rate"] == 2.0

    def test_negative_metrics(self, actions, event):
        created = actions.create_communication(event.id, MESSAGE).data
        result = actions.record_communication_metrics(created["id"], opens=-1)
        assert result.message == "Metrics cannot be negative"

    def test_failed(self, actions, event):
        created = actions.create_communication(event.id, MESSAGE).data
        result = actions.mark_communication_failed(created["id"], "SMTP timeout")
        assert result.data["status"] == "failed"
        assert result.data["error_message"] == "SMTP timeout"

    def test_unknown_communication(self, actions):
        assert actions.mark_communication_sent(3, 10).message == (
            "Communication not found"
        )


class TestTemplatesAndSettings:

    def test_create_template(self, actions):
        result = actions.create_email_template({
            "name": "Venue change", "category": "update",
            "subject": "New venue", "body": "The event moves to MiCo.",
        })
        assert result.message == "Email template created"
        assert result.data["is_default"] is False

    def test_partial_settings_update(self, actions):
        result = actions.update_organization_settings({
            "organization_name": "Acme Events", "weekly_digest": True
        })

        assert result.message == "Settings saved"
        assert result.data["organization_name"] == "Acme Events"
        assert result.data["weekly_digest"] is True
        assert result.data["language"] == "it"

    def test_invalid_settings(self, actions):
        result = actions.update_organization_settings({"contact_email": "nope"})
        assert "contact_email" in result.errors
