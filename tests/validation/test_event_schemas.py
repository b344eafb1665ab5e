"""Event and participant schema tests."""
from validation import validate
from validation.events import (
    EventCreate, EventStatusUpdate, EventUpdate, ParticipantCreate
)

EVENT = {
    "title": "Tech Summit",
    "start_date": "2025-06-12T09:00:00",
    "end_date": "2025-06-13T18:00:00",
    "location": "Milano",
}


class TestEventCreate:

    def test_valid_event_defaults(self):
        result = validate(EventCreate, EVENT)
        assert result.valid
        assert result.data.status == "draft"
        assert result.data.total_budget == 0
        assert result.data.is_public is False

    def test_end_before_start(self):
        result = validate(EventCreate, dict(EVENT, end_date="2025-06-11T09:00:00"))
        assert result.errors == {
            "end_date": ["End date must be on or after the start date"]
        }

    def test_registration_window_order(self):
        result = validate(EventCreate, dict(
            EVENT,
            registration_open_date="2025-05-10T00:00:00",
            registration_close_date="2025-05-01T00:00:00",
        ))
        assert "registration_close_date" in result.errors

    def test_required_fields(self):
        result = validate(EventCreate, {"title": "Tech Summit"})
        assert {"start_date", "end_date", "location"} <= set(result.errors)

    def test_capacity_must_be_positive(self):
        result = validate(EventCreate, dict(EVENT, max_participants=0))
        assert "max_participants" in result.errors


class TestEventUpdate:

    def test_partial_update(self):
        result = validate(EventUpdate, {"venue": "MiCo"})
        assert result.data.provided() == {"venue": "MiCo"}

    def test_status_values(self):
        assert validate(EventStatusUpdate, {"status": "active"}).valid
        assert not validate(EventStatusUpdate, {"status": "archived"}).valid


class TestParticipantCreate:

    def test_valid_participant(self):
        result = validate(ParticipantCreate, {
            "first_name": "Anna", "last_name": "Verdi",
            "email": "anna@acme.com",
        })
        assert result.valid
        assert result.data.registration_status == "pending"

    def test_invalid_email(self):
        result = validate(ParticipantCreate, {
            "first_name": "Anna", "last_name": "Verdi", "email": "anna-at-acme",
        })
        assert "email" in result.errors
