"""Event deadlines: mutations, status workflow and dashboard queries.

Completing a deadline stamps ``completed_at``; moving it back to an open
status clears the stamp. Open deadlines past their due date are flagged
``overdue`` by ``refresh_overdue_deadlines``.
"""
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger

from database import DatabaseManager
from database.models import Deadline, Event
from validation import validate
from validation.schedule import (
    DeadlineCreate, DeadlineStatusUpdate, DeadlineUpdate
)
from .results import ActionResult
from .serialization import row_to_dict

Payload = Optional[Mapping[str, Any]]

STATUSES = ("pending", "in_progress", "completed", "overdue", "cancelled")
PRIORITIES = ("low", "medium", "high", "critical")
PRIORITY_RANK = {priority: rank for rank, priority in enumerate(PRIORITIES)}
OPEN_STATUSES = ("pending", "in_progress")


def _completion_fields(status: str, completed_at: Optional[datetime],
                       completed_by: Optional[str]) -> Dict[str, Any]:
    if status == "completed":
        return {
            "completed_at": completed_at or datetime.utcnow(),
            "completed_by": completed_by,
        }
    return {"completed_at": None, "completed_by": None}


class DeadlineActions:
    """Deadline mutations and the queries behind the deadline widgets."""

    def __init__(self, db: DatabaseManager) -> None:
        self.db = db

    # ================================================================
    # Mutations
    # ================================================================

    def create_deadline(self, event_id: int, payload: Payload) -> ActionResult:
        result = validate(DeadlineCreate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)
        data = result.data
        columns = data.model_dump()
        columns.update(
            _completion_fields(data.status, None, data.completed_by)
        )

        try:
            if self.db.events.get_by_id(Event, event_id) is None:
                return ActionResult.fail("Event not found")
            deadline = self.db.deadlines.create(
                Deadline, event_id=event_id, **columns
            )
        except Exception as e:
            logger.error(f"Failed to create deadline: {e}")
            return ActionResult.fail("Could not create the deadline")

        return ActionResult.ok("Deadline created", row_to_dict(deadline))

    def update_deadline(self, deadline_id: int,
                        payload: Payload) -> ActionResult:
        """Partial update of the descriptive fields (not the status)."""
        result = validate(DeadlineUpdate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)

        try:
            deadline = self.db.deadlines.update_by_id(
                Deadline, deadline_id, **result.data.provided()
            )
        except Exception as e:
            logger.error(f"Failed to update deadline {deadline_id}: {e}")
            return ActionResult.fail("Could not update the deadline")

        if deadline is None:
            return ActionResult.fail("Deadline not found")
        return ActionResult.ok("Deadline updated", row_to_dict(deadline))

    def update_deadline_status(self, deadline_id: int,
                               payload: Payload) -> ActionResult:
        result = validate(DeadlineStatusUpdate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)
        data = result.data

        try:
            deadline = self.db.deadlines.update_by_id(
                Deadline, deadline_id, status=data.status,
                **_completion_fields(
                    data.status, data.completed_at, data.completed_by
                )
            )
        except Exception as e:
            logger.error(f"Failed to update deadline {deadline_id}: {e}")
            return ActionResult.fail("Could not update the deadline")

        if deadline is None:
            return ActionResult.fail("Deadline not found")
        return ActionResult.ok("Deadline status updated", row_to_dict(deadline))

    def delete_deadline(self, deadline_id: int) -> ActionResult:
        try:
            deleted = self.db.deadlines.delete_by_id(Deadline, deadline_id)
        except Exception as e:
            logger.error(f"Failed to delete deadline {deadline_id}: {e}")
            return ActionResult.fail("Could not delete the deadline")

        if not deleted:
            return ActionResult.fail("Deadline not found")
        return ActionResult.ok("Deadline deleted")

    def refresh_overdue_deadlines(self, event_id: Optional[int] = None,
                                  now: Optional[datetime] = None) -> int:
        """Flag open deadlines past their due date as overdue.

        Returns:
            Number of deadlines flagged.
        """
        now = now or datetime.utcnow()
        changed = 0
        for deadline in self.db.deadlines.get_past_due(event_id, now):
            if deadline.status in OPEN_STATUSES:
                self.db.deadlines.update_by_id(
                    Deadline, deadline.id, status="overdue"
                )
                changed += 1
        if changed:
            logger.info(f"Flagged {changed} deadlines as overdue")
        return changed

    # ================================================================
    # Queries
    # ================================================================

    def get_deadline_stats(self, event_id: int) -> Dict[str, Any]:
        """Counts per status and priority plus the completion rate.

        The completion rate is completed / (total - cancelled) as a rounded
        percentage, 0 when nothing is active.
        """
        deadlines = self.db.deadlines.list_by_event(event_id)
        by_status = {status: 0 for status in STATUSES}
        by_priority = {priority: 0 for priority in PRIORITIES}
        for deadline in deadlines:
            by_status[deadline.status] = by_status.get(deadline.status, 0) + 1
            by_priority[deadline.priority] = (
                by_priority.get(deadline.priority, 0) + 1
            )

        active = len(deadlines) - by_status["cancelled"]
        return {
            "total": len(deadlines),
            "by_status": by_status,
            "by_priority": by_priority,
            "completion_rate": (
                round(by_status["completed"] / active * 100) if active > 0 else 0
            ),
        }

    def get_upcoming_deadlines(self, event_id: int, days: int = 7,
                               now: Optional[datetime] = None
                               ) -> List[Dict[str, Any]]:
        now = now or datetime.utcnow()
        return [
            row_to_dict(d)
            for d in self.db.deadlines.get_upcoming(event_id, now, days)
        ]

    def get_overdue_deadlines(self, event_id: int,
                              now: Optional[datetime] = None
                              ) -> List[Dict[str, Any]]:
        """Deadlines past due that are still open or already flagged."""
        now = now or datetime.utcnow()
        return [
            row_to_dict(d) for d in self.db.deadlines.get_past_due(event_id, now)
        ]

    def get_high_priority_deadlines(self, event_id: int
                                    ) -> List[Dict[str, Any]]:
        """Open high and critical deadlines, critical first, then by due date."""
        deadlines = [
            d for d in self.db.deadlines.list_by_event(
                event_id, statuses=OPEN_STATUSES + ("overdue",)
            )
            if d.priority in ("high", "critical")
        ]
        deadlines.sort(key=lambda d: (-PRIORITY_RANK[d.priority], d.due_date))
        return [row_to_dict(d) for d in deadlines]
