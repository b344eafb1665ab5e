"""Agenda session, deadline and check-in schemas."""
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import EmailStr, Field

from .base import Form

SessionType = Literal[
    "keynote", "talk", "workshop", "panel", "break", "networking", "other"
]
SessionStatus = Literal["scheduled", "ongoing", "completed", "cancelled"]
DeadlineCategory = Literal[
    "registration", "payment", "submission", "logistics", "marketing", "other"
]
DeadlinePriority = Literal["low", "medium", "high", "critical"]
DeadlineStatus = Literal[
    "pending", "in_progress", "completed", "overdue", "cancelled"
]
PersonType = Literal["participant", "speaker", "sponsor", "staff"]
CheckinStatus = Literal["checked_in", "checked_out", "no_show"]
VerificationMethod = Literal["qr_code", "manual", "facial_recognition", "other"]


class AgendaSessionForm(Form):
    """Full session form, used for both create and update."""

    title: str = Field(min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    session_type: SessionType
    start_time: datetime
    end_time: datetime
    room: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=200)
    speaker_id: Optional[int] = None
    max_attendees: Optional[int] = Field(None, ge=0)
    status: SessionStatus = "scheduled"

    def cross_field_errors(self) -> Dict[str, List[str]]:
        if self.end_time <= self.start_time:
            return {"end_time": ["End time must be after the start time"]}
        return {}

    @property
    def duration(self) -> int:
        """Length of the session in whole minutes."""
        return round((self.end_time - self.start_time).total_seconds() / 60)


class DeadlineCreate(Form):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    due_date: datetime
    category: DeadlineCategory
    priority: DeadlinePriority = "medium"
    status: DeadlineStatus = "pending"
    completed_by: Optional[str] = Field(None, max_length=200)
    reminder_days: int = Field(7, ge=0)
    notes: Optional[str] = Field(None, max_length=2000)


class DeadlineUpdate(Form):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    due_date: Optional[datetime] = None
    category: Optional[DeadlineCategory] = None
    priority: Optional[DeadlinePriority] = None
    reminder_days: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=2000)


class DeadlineStatusUpdate(Form):
    status: DeadlineStatus
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = Field(None, max_length=200)


class CheckinCreate(Form):
    """Check-in of a known person.

    Name and email default to the values stored on the referenced row.
    """

    person_type: PersonType
    person_id: int
    person_name: Optional[str] = Field(None, min_length=1, max_length=200)
    person_email: Optional[EmailStr] = None
    checked_in_at: Optional[datetime] = None
    checked_in_by: Optional[str] = Field(None, max_length=200)
    verification_method: VerificationMethod = "manual"
    verification_code: Optional[str] = Field(None, max_length=100)
    badge_printed: bool = False
    location_name: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = Field(None, max_length=2000)


class CheckinStatusUpdate(Form):
    status: CheckinStatus
    checked_out_at: Optional[datetime] = None
