"""Event and participant schemas."""
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import EmailStr, Field

from .base import Form

EventStatus = Literal["draft", "upcoming", "active", "completed", "cancelled"]
RegistrationStatus = Literal["pending", "confirmed", "cancelled", "waitlist"]
TicketPaymentStatus = Literal["pending", "paid", "refunded", "free"]


def _date_order_errors(start: Optional[datetime], end: Optional[datetime],
                       end_field: str, message: str) -> Dict[str, List[str]]:
    if start is not None and end is not None and end < start:
        return {end_field: [message]}
    return {}


class EventCreate(Form):
    title: str = Field(min_length=3, max_length=200)
    description: Optional[str] = Field(None, min_length=10, max_length=5000)
    event_type: Optional[str] = Field(None, max_length=50)
    start_date: datetime
    end_date: datetime
    location: str = Field(min_length=2, max_length=200)
    venue: Optional[str] = Field(None, max_length=200)
    max_participants: Optional[int] = Field(None, gt=0, le=1_000_000)
    status: EventStatus = "draft"
    total_budget: float = Field(0, ge=0, le=1_000_000_000)
    registration_open_date: Optional[datetime] = None
    registration_close_date: Optional[datetime] = None
    is_public: bool = False

    def cross_field_errors(self) -> Dict[str, List[str]]:
        errors = _date_order_errors(
            self.start_date, self.end_date, "end_date",
            "End date must be on or after the start date"
        )
        errors.update(_date_order_errors(
            self.registration_open_date, self.registration_close_date,
            "registration_close_date",
            "Registration must close on or after it opens"
        ))
        return errors


class EventUpdate(Form):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, min_length=10, max_length=5000)
    event_type: Optional[str] = Field(None, max_length=50)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[str] = Field(None, min_length=2, max_length=200)
    venue: Optional[str] = Field(None, max_length=200)
    max_participants: Optional[int] = Field(None, gt=0, le=1_000_000)
    status: Optional[EventStatus] = None
    total_budget: Optional[float] = Field(None, ge=0, le=1_000_000_000)
    registration_open_date: Optional[datetime] = None
    registration_close_date: Optional[datetime] = None
    is_public: Optional[bool] = None

    def cross_field_errors(self) -> Dict[str, List[str]]:
        errors = _date_order_errors(
            self.start_date, self.end_date, "end_date",
            "End date must be on or after the start date"
        )
        errors.update(_date_order_errors(
            self.registration_open_date, self.registration_close_date,
            "registration_close_date",
            "Registration must close on or after it opens"
        ))
        return errors


class EventStatusUpdate(Form):
    status: EventStatus


class ParticipantCreate(Form):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=200)
    job_title: Optional[str] = Field(None, max_length=200)
    registration_status: RegistrationStatus = "pending"
    ticket_price: float = Field(0, ge=0)
    payment_status: TicketPaymentStatus = "pending"
    dietary_requirements: Optional[str] = Field(None, max_length=1000)
    notes: Optional[str] = Field(None, max_length=2000)


class ParticipantUpdate(Form):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=200)
    job_title: Optional[str] = Field(None, max_length=200)
    registration_status: Optional[RegistrationStatus] = None
    ticket_price: Optional[float] = Field(None, ge=0)
    payment_status: Optional[TicketPaymentStatus] = None
    dietary_requirements: Optional[str] = Field(None, max_length=1000)
    notes: Optional[str] = Field(None, max_length=2000)
