"""Shared fixtures.

Every test gets a fresh DatabaseManager bound to a temp-file SQLite
database, plus small factories for the rows most tests need.
"""
import os
import shutil
import tempfile
from datetime import datetime, date

import pytest

from database import DatabaseManager
from database.models import BudgetCategory, BudgetItem, Event, Staff


@pytest.fixture
def temp_db():
    """Yield a fresh DatabaseManager bound to a temp SQLite database."""
    temp_dir = tempfile.mkdtemp(prefix="event-db-tests-")
    db_path = os.path.join(temp_dir, "test.db")
    manager = DatabaseManager(database_url=f"sqlite:///{db_path}")
    manager.create_tables()

    try:
        yield manager
    finally:
        manager.close()
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def sample_datetime():
    """Stable datetime value for deterministic tests."""
    return datetime(2025, 6, 12, 9, 0, 0)


@pytest.fixture
def sample_date():
    """Stable date value for deterministic tests."""
    return date(2025, 6, 12)


@pytest.fixture
def make_event(temp_db):
    """Factory: create an event and return it."""
    def _make(title="Tech Summit", **fields):
        values = {
            "title": title,
            "start_date": datetime(2025, 6, 12, 9, 0, 0),
            "end_date": datetime(2025, 6, 13, 18, 0, 0),
            "location": "Milano",
            "status": "upcoming",
        }
        values.update(fields)
        return temp_db.events.create(Event, **values)
    return _make


@pytest.fixture
def event(make_event):
    return make_event()


@pytest.fixture
def make_category(temp_db):
    """Factory: create a budget category and return it."""
    def _make(event_id, name="Catering", allocated=1000, **fields):
        return temp_db.budget_categories.create(
            BudgetCategory, event_id=event_id, name=name,
            allocated_amount=allocated, spent_amount=0, **fields
        )
    return _make


@pytest.fixture
def make_item(temp_db):
    """Factory: create a budget item in a category and return it."""
    def _make(category, description="Coffee break", estimated=100,
              actual=None, status="planned", **fields):
        return temp_db.budget_items.create(
            BudgetItem, category_id=category.id, event_id=category.event_id,
            description=description, estimated_cost=estimated,
            actual_cost=actual, status=status, **fields
        )
    return _make


@pytest.fixture
def make_staff(temp_db):
    """Factory: create a staff member and return it."""
    def _make(first_name="Giulia", last_name="Bianchi", **fields):
        return temp_db.staff.create(
            Staff, first_name=first_name, last_name=last_name, **fields
        )
    return _make
