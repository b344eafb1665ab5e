"""Event mutations - create, edit, status changes, duplication, deletion."""
from datetime import datetime
from typing import Any, Mapping, Optional

from loguru import logger

from database import DatabaseManager
from database.models import Event
from validation import validate
from validation.events import EventCreate, EventUpdate, EventStatusUpdate
from .results import ActionResult
from .serialization import row_to_dict

Payload = Optional[Mapping[str, Any]]


def shift_one_year(value: Optional[datetime]) -> Optional[datetime]:
    """Same moment one year later; 29 February becomes 28 February."""
    if value is None:
        return None
    try:
        return value.replace(year=value.year + 1)
    except ValueError:
        return value.replace(year=value.year + 1, day=28)


class EventActions:
    """Event mutations.

    Deleting an event removes every child row (participants, partners,
    budget, surveys, communications, files) through the ORM cascades.
    """

    def __init__(self, db: DatabaseManager) -> None:
        self.db = db

    def create_event(self, payload: Payload) -> ActionResult:
        result = validate(EventCreate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)

        try:
            event = self.db.events.create(Event, **result.data.model_dump())
        except Exception as e:
            logger.error(f"Failed to create event: {e}")
            return ActionResult.fail("Could not create the event")

        logger.info(f"Event {event.id} created: {event.title}")
        return ActionResult.ok("Event created", row_to_dict(event))

    def update_event(self, event_id: int, payload: Payload) -> ActionResult:
        """Partial update; date order is checked against the stored dates."""
        result = validate(EventUpdate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)
        fields = result.data.provided()

        try:
            event = self.db.events.get_by_id(Event, event_id)
            if event is None:
                return ActionResult.fail("Event not found")

            start = fields.get("start_date", event.start_date)
            end = fields.get("end_date", event.end_date)
            if start and end and end < start:
                return ActionResult.invalid({
                    "end_date": ["End date must be on or after the start date"]
                })

            event = self.db.events.update_by_id(Event, event_id, **fields)
        except Exception as e:
            logger.error(f"Failed to update event {event_id}: {e}")
            return ActionResult.fail("Could not update the event")

        return ActionResult.ok("Event updated", row_to_dict(event))

    def update_event_status(self, event_id: int,
                            payload: Payload) -> ActionResult:
        result = validate(EventStatusUpdate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)

        try:
            event = self.db.events.set_status(event_id, result.data.status)
        except Exception as e:
            logger.error(f"Failed to change status of event {event_id}: {e}")
            return ActionResult.fail("Could not change the event status")

        if event is None:
            return ActionResult.fail("Event not found")
        logger.info(f"Event {event_id} status -> {event.status}")
        return ActionResult.ok("Event status updated", row_to_dict(event))

    def duplicate_event(self, event_id: int) -> ActionResult:
        """Copy an event one year later as a draft.

        Budget categories are copied without their items; participants,
        partners and surveys are not copied.
        """
        try:
            source = self.db.events.get_by_id(Event, event_id)
            if source is None:
                return ActionResult.fail("Event not found")

            with self.db.get_session() as session:
                copy = self.db.events.create(
                    Event, session=session,
                    title=f"{source.title} (Copy)",
                    description=source.description,
                    event_type=source.event_type,
                    start_date=shift_one_year(source.start_date),
                    end_date=shift_one_year(source.end_date),
                    location=source.location,
                    venue=source.venue,
                    max_participants=source.max_participants,
                    status="draft",
                    total_budget=source.total_budget,
                    registration_open_date=shift_one_year(
                        source.registration_open_date
                    ),
                    registration_close_date=shift_one_year(
                        source.registration_close_date
                    ),
                    is_public=False,
                )
                self.db.budget_categories.copy_to_event(
                    event_id, copy.id, session=session
                )
                session.commit()
                data = row_to_dict(copy)
        except Exception as e:
            logger.error(f"Failed to duplicate event {event_id}: {e}")
            return ActionResult.fail("Could not duplicate the event")

        logger.info(f"Event {event_id} duplicated as {data['id']}")
        return ActionResult.ok("Event duplicated", data)

    def delete_event(self, event_id: int) -> ActionResult:
        try:
            deleted = self.db.events.delete_by_id(Event, event_id)
        except Exception as e:
            logger.error(f"Failed to delete event {event_id}: {e}")
            return ActionResult.fail("Could not delete the event")

        if not deleted:
            return ActionResult.fail("Event not found")
        logger.info(f"Event {event_id} deleted")
        return ActionResult.ok("Event deleted")
