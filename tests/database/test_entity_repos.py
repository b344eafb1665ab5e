"""Entity and partner repository tests.

Tests for:
- EventRepository: get_upcoming, set_status, search
- ParticipantRepository: find_by_email, check_in
- StaffRepository: search, deactivate
- LinkedEntityRepository: list_linked, find_by_budget_item, set_link
- StaffAssignmentRepository: list_by_event with staff loaded
"""
from datetime import datetime

from database.models import Participant, Speaker, StaffAssignment


class TestEventRepository:

    def test_get_upcoming_skips_past_and_cancelled(self, temp_db, make_event):
        make_event("Past", start_date=datetime(2024, 1, 1, 9),
                   end_date=datetime(2024, 1, 1, 18))
        make_event("Cancelled", status="cancelled",
                   start_date=datetime(2025, 9, 1, 9),
                   end_date=datetime(2025, 9, 1, 18))
        make_event("Next", start_date=datetime(2025, 8, 1, 9),
                   end_date=datetime(2025, 8, 1, 18))

        upcoming = temp_db.events.get_upcoming(now=datetime(2025, 1, 1))
        assert [e.title for e in upcoming] == ["Next"]

    def test_set_status(self, temp_db, event):
        assert temp_db.events.set_status(event.id, "active").status == "active"
        assert temp_db.events.set_status(999, "active") is None

    def test_search(self, temp_db, make_event):
        make_event("Data Summit")
        make_event("Design Day")
        assert [e.title for e in temp_db.events.search("Summit")] == ["Data Summit"]


class TestParticipantRepository:

    def test_find_by_email_case_insensitive(self, temp_db, event):
        participant = temp_db.participants.create(
            Participant, event_id=event.id, first_name="Anna",
            last_name="Verdi", email="Anna@Acme.com"
        )
        found = temp_db.participants.find_by_email(event.id, "anna@acme.com")
        assert found.id == participant.id

    def test_check_in(self, temp_db, event, sample_datetime):
        participant = temp_db.participants.create(
            Participant, event_id=event.id, first_name="Anna",
            last_name="Verdi", email="anna@acme.com"
        )
        updated = temp_db.participants.check_in(participant.id, sample_datetime)
        assert updated.checked_in is True
        assert updated.checked_in_at == sample_datetime


class TestStaffRepository:

    def test_search_and_deactivate(self, temp_db, make_staff):
        member = make_staff("Giulia", "Bianchi")
        make_staff("Paolo", "Rossi")

        assert [s.id for s in temp_db.staff.search("Bian")] == [member.id]
        assert temp_db.staff.deactivate(member.id).is_active is False
        assert len(temp_db.staff.get_active_staff()) == 1


class TestLinkedEntityRepository:

    def _speaker(self, db, event_id, item_id=None):
        return db.speakers.create(
            Speaker, event_id=event_id, first_name="Marco",
            last_name="Rossi", email="marco@acme.com",
            budget_item_id=item_id
        )

    def test_list_linked(self, temp_db, make_event):
        first = make_event("First")
        second = make_event("Second")
        linked = self._speaker(temp_db, first.id, item_id=7)
        self._speaker(temp_db, first.id)
        self._speaker(temp_db, second.id, item_id=8)

        assert [s.id for s in temp_db.speakers.list_linked(first.id)] == [linked.id]
        assert len(temp_db.speakers.list_linked()) == 2

    def test_find_by_budget_item_and_set_link(self, temp_db, event):
        speaker = self._speaker(temp_db, event.id, item_id=11)
        assert temp_db.speakers.find_by_budget_item(11).id == speaker.id

        temp_db.speakers.set_link(speaker.id, None)
        assert temp_db.speakers.find_by_budget_item(11) is None


class TestStaffAssignmentRepository:

    def test_list_by_event_loads_staff(self, temp_db, event, make_staff):
        member = make_staff()
        temp_db.staff_assignments.create(
            StaffAssignment, event_id=event.id, staff_id=member.id,
            role="Registration desk"
        )

        assignments = temp_db.staff_assignments.list_by_event(event.id)
        assert assignments[0].staff.full_name == "Giulia Bianchi"
        assert len(temp_db.staff_assignments.list_by_staff(member.id)) == 1
