"""Speaker, service, sponsor, staff and staff assignment schemas.

Speaker and service forms are full forms used for both create and update;
``budget_category_id`` selects the category of the linked budget item.
Sponsors are updated partially through ``SponsorUpdate``.
"""
from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import EmailStr, Field

from .base import Form

ConfirmationStatus = Literal["invited", "confirmed", "declined", "tentative"]
ServiceType = Literal[
    "catering", "av_equipment", "photography", "videography", "transport",
    "security", "cleaning", "printing", "other",
]
ContractStatus = Literal["requested", "quoted", "contracted", "delivered"]
ServicePaymentStatus = Literal["pending", "paid"]
SponsorshipLevel = Literal["platinum", "gold", "silver", "bronze", "partner"]
SponsorPaymentStatus = Literal["pending", "partial", "paid"]
AssignmentStatus = Literal[
    "requested", "confirmed", "declined", "completed", "cancelled"
]
StaffPaymentStatus = Literal["not_due", "pending", "overdue", "paid"]
PaymentTerms = Literal["custom", "immediate", "30_days", "60_days", "90_days"]

URL_PATTERN = r"^https?://\S+$"


class SpeakerForm(Form):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=200)
    job_title: Optional[str] = Field(None, max_length=200)
    bio: Optional[str] = Field(None, max_length=5000)
    session_title: Optional[str] = Field(None, max_length=300)
    session_description: Optional[str] = Field(None, max_length=5000)
    session_date: Optional[datetime] = None
    session_duration: Optional[int] = Field(None, gt=0, le=1440)
    confirmation_status: ConfirmationStatus = "invited"
    fee: float = Field(0, ge=0, le=1_000_000)
    budget_category_id: Optional[int] = None
    notes: Optional[str] = Field(None, max_length=2000)


class ServiceForm(Form):
    service_name: str = Field(min_length=3, max_length=200)
    service_type: ServiceType = "other"
    provider_name: Optional[str] = Field(None, max_length=200)
    contact_person: Optional[str] = Field(None, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=5000)
    quoted_price: Optional[float] = Field(None, ge=0, le=1_000_000_000)
    final_price: Optional[float] = Field(None, ge=0, le=1_000_000_000)
    contract_status: ContractStatus = "requested"
    payment_status: ServicePaymentStatus = "pending"
    delivery_date: Optional[datetime] = None
    budget_category_id: Optional[int] = None
    notes: Optional[str] = Field(None, max_length=2000)


class ServiceStatusUpdate(Form):
    contract_status: Optional[ContractStatus] = None
    payment_status: Optional[ServicePaymentStatus] = None

    def cross_field_errors(self) -> Dict[str, List[str]]:
        if self.contract_status is None and self.payment_status is None:
            return {"contract_status": ["Provide a contract or payment status"]}
        return {}


class SponsorForm(Form):
    company_name: str = Field(min_length=1, max_length=200)
    contact_name: Optional[str] = Field(None, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    website_url: Optional[str] = Field(None, max_length=500, pattern=URL_PATTERN)
    sponsorship_level: SponsorshipLevel
    sponsorship_amount: float = Field(0, ge=0, le=1_000_000_000)
    payment_status: SponsorPaymentStatus = "pending"
    contract_signed: bool = False
    payment_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=2000)


class SponsorUpdate(Form):
    company_name: Optional[str] = Field(None, min_length=1, max_length=200)
    contact_name: Optional[str] = Field(None, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    website_url: Optional[str] = Field(None, max_length=500, pattern=URL_PATTERN)
    sponsorship_level: Optional[SponsorshipLevel] = None
    sponsorship_amount: Optional[float] = Field(None, ge=0, le=1_000_000_000)
    payment_status: Optional[SponsorPaymentStatus] = None
    contract_signed: Optional[bool] = None
    payment_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=2000)


class StaffForm(Form):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    role: Optional[str] = Field(None, max_length=100)
    hourly_rate: Optional[float] = Field(None, ge=0, le=100_000)
    is_active: bool = True
    notes: Optional[str] = Field(None, max_length=2000)


class StaffAssignmentForm(Form):
    staff_id: int
    role: Optional[str] = Field(None, max_length=100)
    start_time: datetime
    end_time: datetime
    assignment_status: AssignmentStatus = "requested"
    payment_amount: Optional[float] = Field(None, ge=0, le=1_000_000)
    payment_terms: PaymentTerms = "custom"
    payment_due_date: Optional[date] = None
    budget_category_id: Optional[int] = None
    notes: Optional[str] = Field(None, max_length=5000)

    def cross_field_errors(self) -> Dict[str, List[str]]:
        if self.end_time < self.start_time:
            return {"end_time": ["End time must be after the start time"]}
        return {}


class StaffAssignmentMarkPaid(Form):
    payment_date: date
    notes: Optional[str] = Field(None, max_length=5000)
