"""BaseCRUD generic operation tests.

Tests for:
- create / get_by_id / get_all with filters and ordering
- update_by_id (missing rows, unknown fields)
- delete_by_id / count
- External session handling
"""
from datetime import datetime

import pytest

from database.base_crud import BaseCRUD
from database.models import Event


@pytest.fixture
def base_crud(temp_db):
    return BaseCRUD(temp_db.conn)


def _event_fields(title, day=1, status="draft"):
    return {
        "title": title,
        "start_date": datetime(2025, 3, day, 9, 0),
        "end_date": datetime(2025, 3, day, 18, 0),
        "status": status,
    }


class TestCreateAndGet:

    def test_create_returns_detached_object_with_id(self, base_crud):
        event = base_crud.create(Event, **_event_fields("Kickoff"))
        assert event.id is not None
        assert event.title == "Kickoff"

    def test_get_by_id_missing(self, base_crud):
        assert base_crud.get_by_id(Event, 999) is None

    def test_get_by_id_none(self, base_crud):
        assert base_crud.get_by_id(Event, None) is None

    def test_get_all_with_filters_and_order(self, base_crud):
        base_crud.create(Event, **_event_fields("B", day=2, status="active"))
        base_crud.create(Event, **_event_fields("A", day=1, status="active"))
        base_crud.create(Event, **_event_fields("C", day=3))

        events = base_crud.get_all(
            Event, filters={"status": "active"}, order_by=Event.start_date
        )
        assert [e.title for e in events] == ["A", "B"]


class TestUpdate:

    def test_update_by_id(self, base_crud):
        event = base_crud.create(Event, **_event_fields("Old title"))
        updated = base_crud.update_by_id(Event, event.id, title="New title")
        assert updated.title == "New title"
        assert base_crud.get_by_id(Event, event.id).title == "New title"

    def test_update_missing_row_returns_none(self, base_crud):
        assert base_crud.update_by_id(Event, 12345, title="x") is None

    def test_update_unknown_field_raises(self, base_crud):
        event = base_crud.create(Event, **_event_fields("Event"))
        with pytest.raises(AttributeError):
            base_crud.update_by_id(Event, event.id, not_a_column=1)


class TestDeleteAndCount:

    def test_delete_by_id(self, base_crud):
        event = base_crud.create(Event, **_event_fields("To delete"))
        assert base_crud.delete_by_id(Event, event.id) is True
        assert base_crud.get_by_id(Event, event.id) is None

    def test_delete_missing_row(self, base_crud):
        assert base_crud.delete_by_id(Event, 999) is False

    def test_count_with_filters(self, base_crud):
        base_crud.create(Event, **_event_fields("One", status="active"))
        base_crud.create(Event, **_event_fields("Two"))
        assert base_crud.count(Event) == 2
        assert base_crud.count(Event, filters={"status": "active"}) == 1


class TestExternalSession:

    def test_rollback_discards_writes(self, temp_db, base_crud):
        with temp_db.get_session() as session:
            base_crud.create(Event, session=session,
                             **_event_fields("Uncommitted"))
            session.rollback()
        assert base_crud.count(Event) == 0

    def test_commit_keeps_writes(self, temp_db, base_crud):
        with temp_db.get_session() as session:
            event = base_crud.create(Event, session=session,
                                     **_event_fields("Committed"))
            base_crud.update_by_id(Event, event.id, session=session,
                                   status="active")
            session.commit()
        assert base_crud.count(Event, filters={"status": "active"}) == 1
