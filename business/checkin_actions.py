"""On-site check-ins.

A check-in references a participant, speaker, sponsor or staff member. A
person can show up once per event; checking in a participant also sets the
participant's own ``checked_in`` flag.
"""
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from loguru import logger

from database import DatabaseManager
from database.models import (
    Checkin, Event, Participant, Speaker, Sponsor, Staff
)
from validation import validate
from validation.schedule import CheckinCreate, CheckinStatusUpdate
from .results import ActionResult
from .serialization import row_to_dict

Payload = Optional[Mapping[str, Any]]

# person_type -> (repository attribute, model)
PERSON_SOURCES = {
    "participant": ("participants", Participant),
    "speaker": ("speakers", Speaker),
    "sponsor": ("sponsors", Sponsor),
    "staff": ("staff", Staff),
}
PERSON_TYPES = tuple(PERSON_SOURCES)


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole > 0 else 0


class CheckinActions:
    """Record check-ins and report attendance."""

    def __init__(self, db: DatabaseManager) -> None:
        self.db = db

    def _person(self, event_id: int, person_type: str,
                person_id: int) -> Optional[Tuple[str, Optional[str]]]:
        """Name and email of the referenced person, None when unknown.

        Staff members are shared across events; everyone else must belong to
        the event.
        """
        repo_name, model = PERSON_SOURCES[person_type]
        person = getattr(self.db, repo_name).get_by_id(model, person_id)
        if person is None:
            return None
        if person_type != "staff" and person.event_id != event_id:
            return None
        if person_type == "sponsor":
            return person.contact_name or person.company_name, person.email
        return f"{person.first_name} {person.last_name}", person.email

    def record_checkin(self, event_id: int, payload: Payload) -> ActionResult:
        result = validate(CheckinCreate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)
        data = result.data
        at = data.checked_in_at or datetime.utcnow()

        try:
            if self.db.events.get_by_id(Event, event_id) is None:
                return ActionResult.fail("Event not found")
            person = self._person(event_id, data.person_type, data.person_id)
            if person is None:
                return ActionResult.fail("Person not found")
            if self.db.checkins.find_present(
                event_id, data.person_type, data.person_id
            ):
                return ActionResult.fail("Already checked in")

            name, email = person
            columns = data.model_dump(exclude={"checked_in_at"})
            columns["person_name"] = data.person_name or name
            columns["person_email"] = data.person_email or email

            with self.db.get_session() as session:
                checkin = self.db.checkins.create(
                    Checkin, session=session, event_id=event_id,
                    checked_in_at=at, status="checked_in", **columns
                )
                if data.person_type == "participant":
                    self.db.participants.check_in(
                        data.person_id, at, session=session
                    )
                session.commit()
                row = row_to_dict(checkin)
        except Exception as e:
            logger.error(f"Failed to record check-in for event {event_id}: {e}")
            return ActionResult.fail("Could not record the check-in")

        logger.info(
            f"{row['person_type']} {row['person_id']} checked in to event {event_id}"
        )
        return ActionResult.ok("Checked in", row)

    def update_checkin_status(self, checkin_id: int,
                              payload: Payload) -> ActionResult:
        """Check out, mark as no-show or undo a check-out."""
        result = validate(CheckinStatusUpdate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)
        data = result.data

        fields: Dict[str, Any] = {"status": data.status, "checked_out_at": None}
        if data.status == "checked_out":
            fields["checked_out_at"] = data.checked_out_at or datetime.utcnow()

        try:
            checkin = self.db.checkins.update_by_id(Checkin, checkin_id, **fields)
        except Exception as e:
            logger.error(f"Failed to update check-in {checkin_id}: {e}")
            return ActionResult.fail("Could not update the check-in")

        if checkin is None:
            return ActionResult.fail("Check-in not found")
        return ActionResult.ok("Check-in updated", row_to_dict(checkin))

    def mark_badge_printed(self, checkin_id: int) -> ActionResult:
        try:
            checkin = self.db.checkins.update_by_id(
                Checkin, checkin_id, badge_printed=True
            )
        except Exception as e:
            logger.error(f"Failed to update check-in {checkin_id}: {e}")
            return ActionResult.fail("Could not update the check-in")

        if checkin is None:
            return ActionResult.fail("Check-in not found")
        return ActionResult.ok("Badge printed", row_to_dict(checkin))

    def delete_checkin(self, checkin_id: int) -> ActionResult:
        try:
            deleted = self.db.checkins.delete_by_id(Checkin, checkin_id)
        except Exception as e:
            logger.error(f"Failed to delete check-in {checkin_id}: {e}")
            return ActionResult.fail("Could not delete the check-in")

        if not deleted:
            return ActionResult.fail("Check-in not found")
        return ActionResult.ok("Check-in deleted")

    # ---------------- queries ----------------

    def get_checkin_stats(self, event_id: int) -> Dict[str, Any]:
        """Attendance figures of an event.

        Rates are rounded percentages of the registered participants (0 when
        there are none). ``checked_in`` counts everyone who showed up,
        including those who already left.
        """
        checkins = self.db.checkins.list_by_event(event_id)
        expected = self.db.participants.count(
            Participant, filters={"event_id": event_id}
        )
        present = sum(1 for c in checkins
                      if c.status in ("checked_in", "checked_out"))
        no_show = sum(1 for c in checkins if c.status == "no_show")
        by_type = {person_type: 0 for person_type in PERSON_TYPES}
        for checkin in checkins:
            by_type[checkin.person_type] = by_type.get(checkin.person_type, 0) + 1

        return {
            "total": len(checkins),
            "checked_in": present,
            "checked_out": sum(1 for c in checkins if c.status == "checked_out"),
            "no_show": no_show,
            "by_type": by_type,
            "badges_printed": sum(1 for c in checkins if c.badge_printed),
            "expected": expected,
            "checkin_rate": _percent(present, expected),
            "no_show_rate": _percent(no_show, expected),
        }

    def is_person_checked_in(self, event_id: int, email: str) -> bool:
        return self.db.checkins.is_person_checked_in(event_id, email)

    def get_recent_checkins(self, event_id: int,
                            limit: int = 5) -> List[Dict[str, Any]]:
        return [row_to_dict(c)
                for c in self.db.checkins.get_recent(event_id, limit)]

    def get_badge_queue(self, event_id: int) -> List[Dict[str, Any]]:
        """Checked-in people still waiting for their badge."""
        return [row_to_dict(c)
                for c in self.db.checkins.get_needing_badges(event_id)]
