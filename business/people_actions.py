"""Participant and staff member mutations."""
from datetime import datetime
from typing import Any, Mapping, Optional

from loguru import logger

from database import DatabaseManager
from database.models import Event, Participant, Staff
from validation import validate
from validation.events import ParticipantCreate, ParticipantUpdate
from validation.partners import StaffForm
from .results import ActionResult
from .serialization import row_to_dict

Payload = Optional[Mapping[str, Any]]


class ParticipantActions:
    """Registration, edits, check-in and removal of participants."""

    def __init__(self, db: DatabaseManager) -> None:
        self.db = db

    def create_participant(self, event_id: int,
                           payload: Payload) -> ActionResult:
        """Register a participant to an event.

        An email can be registered only once per event.
        """
        result = validate(ParticipantCreate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)
        data = result.data

        try:
            if self.db.events.get_by_id(Event, event_id) is None:
                return ActionResult.fail("Event not found")
            if self.db.participants.find_by_email(event_id, data.email):
                return ActionResult.invalid({
                    "email": ["This email is already registered for the event"]
                })
            participant = self.db.participants.create(
                Participant, event_id=event_id, **data.model_dump()
            )
        except Exception as e:
            logger.error(f"Failed to register participant: {e}")
            return ActionResult.fail("Could not register the participant")

        return ActionResult.ok("Participant registered", row_to_dict(participant))

    def update_participant(self, participant_id: int,
                           payload: Payload) -> ActionResult:
        result = validate(ParticipantUpdate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)

        try:
            participant = self.db.participants.update_by_id(
                Participant, participant_id, **result.data.provided()
            )
        except Exception as e:
            logger.error(f"Failed to update participant {participant_id}: {e}")
            return ActionResult.fail("Could not update the participant")

        if participant is None:
            return ActionResult.fail("Participant not found")
        return ActionResult.ok("Participant updated", row_to_dict(participant))

    def check_in_participant(self, participant_id: int,
                             at: Optional[datetime] = None) -> ActionResult:
        try:
            participant = self.db.participants.get_by_id(
                Participant, participant_id
            )
            if participant is None:
                return ActionResult.fail("Participant not found")
            if participant.checked_in:
                return ActionResult.fail("Participant already checked in")
            participant = self.db.participants.check_in(participant_id, at)
        except Exception as e:
            logger.error(f"Failed to check in participant {participant_id}: {e}")
            return ActionResult.fail("Could not check in the participant")

        return ActionResult.ok("Participant checked in", row_to_dict(participant))

    def delete_participant(self, participant_id: int) -> ActionResult:
        try:
            deleted = self.db.participants.delete_by_id(
                Participant, participant_id
            )
        except Exception as e:
            logger.error(f"Failed to delete participant {participant_id}: {e}")
            return ActionResult.fail("Could not delete the participant")

        if not deleted:
            return ActionResult.fail("Participant not found")
        return ActionResult.ok("Participant deleted")


class StaffActions:
    """Staff member records shared across events."""

    def __init__(self, db: DatabaseManager) -> None:
        self.db = db

    def create_staff(self, payload: Payload) -> ActionResult:
        result = validate(StaffForm, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)

        try:
            member = self.db.staff.create(Staff, **result.data.model_dump())
        except Exception as e:
            logger.error(f"Failed to create staff member: {e}")
            return ActionResult.fail("Could not create the staff member")

        return ActionResult.ok("Staff member created", row_to_dict(member))

    def update_staff(self, staff_id: int, payload: Payload) -> ActionResult:
        result = validate(StaffForm, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)

        try:
            member = self.db.staff.update_by_id(
                Staff, staff_id, **result.data.model_dump()
            )
        except Exception as e:
            logger.error(f"Failed to update staff member {staff_id}: {e}")
            return ActionResult.fail("Could not update the staff member")

        if member is None:
            return ActionResult.fail("Staff member not found")
        return ActionResult.ok("Staff member updated", row_to_dict(member))

    def deactivate_staff(self, staff_id: int) -> ActionResult:
        """Deactivate instead of deleting, assignments keep their history."""
        try:
            member = self.db.staff.deactivate(staff_id)
        except Exception as e:
            logger.error(f"Failed to deactivate staff member {staff_id}: {e}")
            return ActionResult.fail("Could not deactivate the staff member")

        if member is None:
            return ActionResult.fail("Staff member not found")
        return ActionResult.ok("Staff member deactivated", row_to_dict(member))
