"""SQLAlchemy ORM models.

This module defines every table of the event store:
- Events and the people around them (participants, speakers, staff)
- Commercial partners (sponsors, services) and staff assignments
- Budget categories and budget items
- Surveys, communications and email templates
- Agenda sessions, deadlines and on-site check-ins
- Organization settings, file metadata and users
"""
from typing import Dict, Any, List, Optional
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, Date, DateTime,
    DECIMAL, ForeignKey, JSON
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import relationship
from datetime import datetime, date

# Declarative base for every model
Base = declarative_base()

# Allow plain annotations next to Column() attributes
Base.__allow_unmapped__ = True


class Event(Base):
    """Event table model.

    Attributes:
        id: Primary key.
        title: Event title, required, max 200 characters.
        description: Free text description.
        event_type: Conference, workshop, gala, ...
        start_date: Start timestamp, required.
        end_date: End timestamp, required.
        location: City or place, max 200 characters.
        venue: Venue name.
        max_participants: Capacity, optional.
        status: draft / upcoming / active / completed / cancelled.
        total_budget: Target budget figure, DECIMAL(12,2).
        registration_open_date: Registration window start, optional.
        registration_close_date: Registration window end, optional.
        is_public: Whether the event is listed publicly.

    Relationships:
        Every child collection is deleted together with the event.
    """
    __tablename__ = "events"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    title: str = Column(String(200), nullable=False)
    description: Optional[str] = Column(Text)
    event_type: Optional[str] = Column(String(50))
    start_date: datetime = Column(DateTime, nullable=False)
    end_date: datetime = Column(DateTime, nullable=False)
    location: Optional[str] = Column(String(200))
    venue: Optional[str] = Column(String(200))
    max_participants: Optional[int] = Column(Integer)
    status: str = Column(String(20), default="draft")
    total_budget: float = Column(DECIMAL(12, 2), default=0)
    registration_open_date: Optional[datetime] = Column(DateTime)
    registration_close_date: Optional[datetime] = Column(DateTime)
    is_public: bool = Column(Boolean, default=False)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow,
                                  onupdate=datetime.utcnow)

    # Relationships
    participants: List["Participant"] = relationship(
        "Participant", back_populates="event", cascade="all, delete-orphan"
    )
    speakers: List["Speaker"] = relationship(
        "Speaker", back_populates="event", cascade="all, delete-orphan"
    )
    sponsors: List["Sponsor"] = relationship(
        "Sponsor", back_populates="event", cascade="all, delete-orphan"
    )
    services: List["Service"] = relationship(
        "Service", back_populates="event", cascade="all, delete-orphan"
    )
    staff_assignments: List["StaffAssignment"] = relationship(
        "StaffAssignment", back_populates="event",
        cascade="all, delete-orphan"
    )
    budget_categories: List["BudgetCategory"] = relationship(
        "BudgetCategory", back_populates="event",
        cascade="all, delete-orphan"
    )
    surveys: List["Survey"] = relationship(
        "Survey", back_populates="event", cascade="all, delete-orphan"
    )
    communications: List["Communication"] = relationship(
        "Communication", back_populates="event", cascade="all, delete-orphan"
    )
    files: List["FileRecord"] = relationship(
        "FileRecord", back_populates="event", cascade="all, delete-orphan"
    )
    agenda_sessions: List["AgendaSession"] = relationship(
        "AgendaSession", back_populates="event", cascade="all, delete-orphan"
    )
    deadlines: List["Deadline"] = relationship(
        "Deadline", back_populates="event", cascade="all, delete-orphan"
    )
    checkins: List["Checkin"] = relationship(
        "Checkin", back_populates="event", cascade="all, delete-orphan"
    )


class Participant(Base):
    """Participant table model.

    Attributes:
        registration_status: pending / confirmed / cancelled / waitlist.
        payment_status: pending / paid / refunded / free.
        checked_in: Whether the participant has been checked in.
    """
    __tablename__ = "participants"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    event_id: int = Column(Integer, ForeignKey("events.id"), nullable=False)
    first_name: str = Column(String(100), nullable=False)
    last_name: str = Column(String(100), nullable=False)
    email: str = Column(String(200), nullable=False)
    phone: Optional[str] = Column(String(50))
    company: Optional[str] = Column(String(200))
    job_title: Optional[str] = Column(String(200))
    registration_status: str = Column(String(20), default="pending")
    ticket_price: float = Column(DECIMAL(12, 2), default=0)
    payment_status: str = Column(String(20), default="pending")
    checked_in: bool = Column(Boolean, default=False)
    checked_in_at: Optional[datetime] = Column(DateTime)
    dietary_requirements: Optional[str] = Column(Text)
    notes: Optional[str] = Column(Text)
    registered_at: datetime = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event: "Event" = relationship("Event", back_populates="participants")


class Speaker(Base):
    """Speaker table model.

    ``budget_item_id`` is a weak reference to the budget item created for the
    speaker fee. It is not a foreign key: the item may be edited or removed
    independently, leaving an orphaned reference.
    """
    __tablename__ = "speakers"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    event_id: int = Column(Integer, ForeignKey("events.id"), nullable=False)
    first_name: str = Column(String(100), nullable=False)
    last_name: str = Column(String(100), nullable=False)
    email: str = Column(String(200), nullable=False)
    phone: Optional[str] = Column(String(50))
    company: Optional[str] = Column(String(200))
    job_title: Optional[str] = Column(String(200))
    bio: Optional[str] = Column(Text)
    session_title: Optional[str] = Column(String(300))
    session_description: Optional[str] = Column(Text)
    session_date: Optional[datetime] = Column(DateTime)
    session_duration: Optional[int] = Column(Integer)  # minutes
    confirmation_status: str = Column(String(20), default="invited")
    fee: float = Column(DECIMAL(12, 2), default=0)
    budget_item_id: Optional[int] = Column(Integer)
    notes: Optional[str] = Column(Text)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event: "Event" = relationship("Event", back_populates="speakers")


class Service(Base):
    """External service (catering, AV, transport, ...) table model."""
    __tablename__ = "services"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    event_id: int = Column(Integer, ForeignKey("events.id"), nullable=False)
    service_name: str = Column(String(200), nullable=False)
    service_type: str = Column(String(30), default="other")
    provider_name: Optional[str] = Column(String(200))
    contact_person: Optional[str] = Column(String(200))
    email: Optional[str] = Column(String(200))
    phone: Optional[str] = Column(String(50))
    description: Optional[str] = Column(Text)
    quoted_price: Optional[float] = Column(DECIMAL(12, 2))
    final_price: Optional[float] = Column(DECIMAL(12, 2))
    contract_status: str = Column(String(20), default="requested")
    payment_status: str = Column(String(20), default="pending")
    delivery_date: Optional[datetime] = Column(DateTime)
    budget_item_id: Optional[int] = Column(Integer)
    notes: Optional[str] = Column(Text)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event: "Event" = relationship("Event", back_populates="services")


class Sponsor(Base):
    """Sponsor table model.

    Sponsorship money is revenue: the linked budget item lives in the
    event's income category.
    """
    __tablename__ = "sponsors"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    event_id: int = Column(Integer, ForeignKey("events.id"), nullable=False)
    company_name: str = Column(String(200), nullable=False)
    contact_name: Optional[str] = Column(String(200))
    email: Optional[str] = Column(String(200))
    phone: Optional[str] = Column(String(50))
    website_url: Optional[str] = Column(String(500))
    sponsorship_level: str = Column(String(20), default="partner")
    sponsorship_amount: float = Column(DECIMAL(12, 2), default=0)
    payment_status: str = Column(String(20), default="pending")
    contract_signed: bool = Column(Boolean, default=False)
    payment_date: Optional[date] = Column(Date)
    budget_item_id: Optional[int] = Column(Integer)
    notes: Optional[str] = Column(Text)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event: "Event" = relationship("Event", back_populates="sponsors")


class Staff(Base):
    """Staff member table model (shared across events)."""
    __tablename__ = "staff"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    first_name: str = Column(String(100), nullable=False)
    last_name: str = Column(String(100), nullable=False)
    email: Optional[str] = Column(String(200))
    phone: Optional[str] = Column(String(50))
    role: Optional[str] = Column(String(100))
    hourly_rate: Optional[float] = Column(DECIMAL(10, 2))
    is_active: bool = Column(Boolean, default=True)
    notes: Optional[str] = Column(Text)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)

    # Relationships
    assignments: List["StaffAssignment"] = relationship(
        "StaffAssignment", back_populates="staff"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class StaffAssignment(Base):
    """Assignment of a staff member to an event, with its payment terms.

    Attributes:
        assignment_status: requested / confirmed / declined / completed / cancelled.
        payment_terms: custom / immediate / 30_days / 60_days / 90_days.
        payment_status: not_due / pending / overdue / paid.
        budget_item_id: Weak reference to the linked budget item.
    """
    __tablename__ = "staff_assignments"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    event_id: int = Column(Integer, ForeignKey("events.id"), nullable=False)
    staff_id: int = Column(Integer, ForeignKey("staff.id"), nullable=False)
    role: Optional[str] = Column(String(100))
    start_time: Optional[datetime] = Column(DateTime)
    end_time: Optional[datetime] = Column(DateTime)
    assignment_status: str = Column(String(20), default="requested")
    payment_amount: Optional[float] = Column(DECIMAL(12, 2))
    payment_terms: str = Column(String(20), default="30_days")
    payment_due_date: Optional[date] = Column(Date)
    payment_date: Optional[date] = Column(Date)
    payment_status: str = Column(String(20), default="not_due")
    budget_item_id: Optional[int] = Column(Integer)
    notes: Optional[str] = Column(Text)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event: "Event" = relationship("Event", back_populates="staff_assignments")
    staff: "Staff" = relationship("Staff", back_populates="assignments")


class AgendaSession(Base):
    """Agenda session table model.

    Attributes:
        session_type: keynote / talk / workshop / panel / break / networking / other.
        duration: Minutes between start and end, computed on every write.
        speaker_id: Speaker of the same event, optional. Not a foreign key;
            the agenda drops the reference when the speaker is gone.
        status: scheduled / ongoing / completed / cancelled.
    """
    __tablename__ = "agenda_sessions"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    event_id: int = Column(Integer, ForeignKey("events.id"), nullable=False)
    title: str = Column(String(200), nullable=False)
    description: Optional[str] = Column(Text)
    session_type: str = Column(String(20), nullable=False, default="talk")
    start_time: datetime = Column(DateTime, nullable=False)
    end_time: datetime = Column(DateTime, nullable=False)
    duration: Optional[int] = Column(Integer)  # minutes
    room: Optional[str] = Column(String(100))
    location: Optional[str] = Column(String(200))
    speaker_id: Optional[int] = Column(Integer)
    max_attendees: Optional[int] = Column(Integer)
    status: str = Column(String(20), default="scheduled")
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow,
                                  onupdate=datetime.utcnow)

    # Relationships
    event: "Event" = relationship("Event", back_populates="agenda_sessions")


class Deadline(Base):
    """Event deadline / milestone table model.

    Attributes:
        category: registration / payment / submission / logistics /
            marketing / other.
        priority: low / medium / high / critical.
        status: pending / in_progress / completed / overdue / cancelled.
        completed_at: Set when the deadline is completed, cleared on reopen.
    """
    __tablename__ = "deadlines"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    event_id: int = Column(Integer, ForeignKey("events.id"), nullable=False)
    title: str = Column(String(200), nullable=False)
    description: Optional[str] = Column(Text)
    due_date: datetime = Column(DateTime, nullable=False)
    category: str = Column(String(20), nullable=False, default="other")
    priority: str = Column(String(20), default="medium")
    status: str = Column(String(20), default="pending")
    completed_at: Optional[datetime] = Column(DateTime)
    completed_by: Optional[str] = Column(String(200))
    reminder_days: int = Column(Integer, default=7)
    notification_sent: bool = Column(Boolean, default=False)
    notes: Optional[str] = Column(Text)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow,
                                  onupdate=datetime.utcnow)

    # Relationships
    event: "Event" = relationship("Event", back_populates="deadlines")


class Checkin(Base):
    """On-site check-in of a person attending an event.

    ``person_id`` points into the table named by ``person_type``
    (participant / speaker / sponsor / staff). Name and email are copied at
    check-in time.

    Attributes:
        status: checked_in / checked_out / no_show.
        verification_method: qr_code / manual / facial_recognition / other.
    """
    __tablename__ = "checkins"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    event_id: int = Column(Integer, ForeignKey("events.id"), nullable=False)
    person_type: str = Column(String(20), nullable=False)
    person_id: int = Column(Integer, nullable=False)
    person_name: str = Column(String(200), nullable=False)
    person_email: Optional[str] = Column(String(200))
    checked_in_at: datetime = Column(DateTime, nullable=False,
                                     default=datetime.utcnow)
    checked_in_by: Optional[str] = Column(String(200))
    checked_out_at: Optional[datetime] = Column(DateTime)
    status: str = Column(String(20), default="checked_in")
    verification_method: str = Column(String(20), default="manual")
    verification_code: Optional[str] = Column(String(100))
    badge_printed: bool = Column(Boolean, default=False)
    location_name: Optional[str] = Column(String(200))
    notes: Optional[str] = Column(Text)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event: "Event" = relationship("Event", back_populates="checkins")


class BudgetCategory(Base):
    """Budget category table model.

    ``spent_amount`` is a cache of the sum of the items' actual cost. It is
    refreshed after item writes, but aggregation always recomputes from the
    items.

    Attributes:
        kind: expense / revenue.
        allocated_amount: Planned amount, DECIMAL(12,2).
        spent_amount: Cached sum of item actual costs.
        color: Hex colour for charts, e.g. ``#3B82F6``.
        icon: Icon name for the UI.

    Relationships:
        items: Budget items of the category, deleted with it.
    """
    __tablename__ = "budget_categories"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    event_id: int = Column(Integer, ForeignKey("events.id"), nullable=False)
    name: str = Column(String(100), nullable=False)
    description: Optional[str] = Column(Text)
    kind: str = Column(String(20), default="expense")
    allocated_amount: float = Column(DECIMAL(12, 2), default=0)
    spent_amount: float = Column(DECIMAL(12, 2), default=0)
    color: str = Column(String(7), default="#3B82F6")
    icon: Optional[str] = Column(String(50))
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow,
                                  onupdate=datetime.utcnow)

    # Relationships
    event: "Event" = relationship("Event", back_populates="budget_categories")
    items: List["BudgetItem"] = relationship(
        "BudgetItem", back_populates="category", cascade="all, delete-orphan"
    )


class BudgetItem(Base):
    """Budget item table model.

    Attributes:
        estimated_cost: Planned cost, required.
        actual_cost: Realized cost, NULL until known.
        status: planned / approved / invoiced / paid.
        payment_date: Due or actual payment date.
    """
    __tablename__ = "budget_items"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    category_id: int = Column(
        Integer, ForeignKey("budget_categories.id"), nullable=False
    )
    event_id: int = Column(Integer, ForeignKey("events.id"), nullable=False)
    description: str = Column(String(500), nullable=False)
    estimated_cost: float = Column(DECIMAL(12, 2), default=0)
    actual_cost: Optional[float] = Column(DECIMAL(12, 2))
    status: str = Column(String(20), default="planned")
    vendor: Optional[str] = Column(String(200))
    invoice_number: Optional[str] = Column(String(100))
    payment_date: Optional[date] = Column(Date)
    notes: Optional[str] = Column(Text)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow,
                                  onupdate=datetime.utcnow)

    # Relationships
    category: "BudgetCategory" = relationship(
        "BudgetCategory", back_populates="items"
    )


class Survey(Base):
    """Survey table model (draft -> active -> closed)."""
    __tablename__ = "surveys"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    event_id: int = Column(Integer, ForeignKey("events.id"), nullable=False)
    title: str = Column(String(200), nullable=False)
    description: Optional[str] = Column(Text)
    status: str = Column(String(20), default="draft")
    is_anonymous: bool = Column(Boolean, default=False)
    allow_multiple_responses: bool = Column(Boolean, default=False)
    published_at: Optional[datetime] = Column(DateTime)
    closed_at: Optional[datetime] = Column(DateTime)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event: "Event" = relationship("Event", back_populates="surveys")
    questions: List["SurveyQuestion"] = relationship(
        "SurveyQuestion", back_populates="survey",
        cascade="all, delete-orphan", order_by="SurveyQuestion.position"
    )
    responses: List["SurveyResponse"] = relationship(
        "SurveyResponse", back_populates="survey",
        cascade="all, delete-orphan"
    )


class SurveyQuestion(Base):
    """Survey question table model.

    Attributes:
        question_type: multiple_choice / checkboxes / text / textarea / rating / scale.
        options: Choice labels for multiple_choice and checkboxes.
        position: Display order inside the survey.
    """
    __tablename__ = "survey_questions"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    survey_id: int = Column(Integer, ForeignKey("surveys.id"), nullable=False)
    question_text: str = Column(String(500), nullable=False)
    question_type: str = Column(String(20), nullable=False)
    options: List[str] = Column(JSON, default=list)
    is_required: bool = Column(Boolean, default=False)
    position: int = Column(Integer, default=0)

    # Relationships
    survey: "Survey" = relationship("Survey", back_populates="questions")


class SurveyResponse(Base):
    """One submission of a survey, optionally tied to a participant."""
    __tablename__ = "survey_responses"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    survey_id: int = Column(Integer, ForeignKey("surveys.id"), nullable=False)
    participant_id: Optional[int] = Column(
        Integer, ForeignKey("participants.id")
    )
    submitted_at: datetime = Column(DateTime, default=datetime.utcnow)

    # Relationships
    survey: "Survey" = relationship("Survey", back_populates="responses")
    answers: List["SurveyAnswer"] = relationship(
        "SurveyAnswer", back_populates="response",
        cascade="all, delete-orphan"
    )


class SurveyAnswer(Base):
    """Answer to one question inside a response."""
    __tablename__ = "survey_answers"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    response_id: int = Column(
        Integer, ForeignKey("survey_responses.id"), nullable=False
    )
    question_id: int = Column(
        Integer, ForeignKey("survey_questions.id"), nullable=False
    )
    answer_text: Optional[str] = Column(Text)

    # Relationships
    response: "SurveyResponse" = relationship(
        "SurveyResponse", back_populates="answers"
    )


class Communication(Base):
    """Email communication log record.

    Attributes:
        recipient_type: all_participants / confirmed_only / speakers / sponsors / custom.
        status: draft / scheduled / sent / failed.
        recipients_count: Number of recipients at send time.
        open_count, click_count, bounce_count: Delivery metrics.
    """
    __tablename__ = "communications"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    event_id: int = Column(Integer, ForeignKey("events.id"), nullable=False)
    subject: str = Column(String(200), nullable=False)
    body: str = Column(Text, nullable=False)
    recipient_type: str = Column(String(30), nullable=False)
    custom_recipients: List[str] = Column(JSON, default=list)
    template_id: Optional[int] = Column(Integer, ForeignKey("email_templates.id"))
    status: str = Column(String(20), default="draft")
    scheduled_at: Optional[datetime] = Column(DateTime)
    sent_at: Optional[datetime] = Column(DateTime)
    error_message: Optional[str] = Column(Text)
    recipients_count: int = Column(Integer, default=0)
    open_count: int = Column(Integer, default=0)
    click_count: int = Column(Integer, default=0)
    bounce_count: int = Column(Integer, default=0)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event: "Event" = relationship("Event", back_populates="communications")

    def _rate(self, count: Optional[int]) -> float:
        if not self.recipients_count:
            return 0.0
        return (count or 0) / self.recipients_count * 100

    @property
    def open_rate(self) -> float:
        return self._rate(self.open_count)

    @property
    def click_rate(self) -> float:
        return self._rate(self.click_count)

    @property
    def bounce_rate(self) -> float:
        return self._rate(self.bounce_count)


class EmailTemplate(Base):
    """Reusable email template."""
    __tablename__ = "email_templates"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    name: str = Column(String(100), nullable=False)
    category: str = Column(String(20), default="custom")
    subject: str = Column(String(200), nullable=False)
    body: str = Column(Text, nullable=False)
    is_default: bool = Column(Boolean, default=False)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)


class OrganizationSettings(Base):
    """Organization-wide settings (single row)."""
    __tablename__ = "organization_settings"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    organization_name: Optional[str] = Column(String(200))
    contact_email: Optional[str] = Column(String(200))
    timezone: str = Column(String(50), default="Europe/Rome")
    language: str = Column(String(5), default="it")
    notify_new_registration: bool = Column(Boolean, default=True)
    notify_payment_received: bool = Column(Boolean, default=True)
    notify_deadline_reminder: bool = Column(Boolean, default=True)
    weekly_digest: bool = Column(Boolean, default=False)
    extra_data: Dict[str, Any] = Column(JSON, default={})
    updated_at: datetime = Column(DateTime, default=datetime.utcnow,
                                  onupdate=datetime.utcnow)


class FileRecord(Base):
    """Metadata of an uploaded file; the blob itself lives elsewhere."""
    __tablename__ = "files"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    event_id: Optional[int] = Column(Integer, ForeignKey("events.id"))
    file_name: str = Column(String(255), nullable=False)
    file_type: Optional[str] = Column(String(100))
    file_size: int = Column(Integer, default=0)
    storage_path: str = Column(String(500), nullable=False)
    uploaded_at: datetime = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event: Optional["Event"] = relationship("Event", back_populates="files")


class User(Base):
    """Back-office user."""
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    email: str = Column(String(200), nullable=False, unique=True)
    name: Optional[str] = Column(String(200))
    password_hash: Optional[str] = Column(String(255))
    role: str = Column(String(20), default="user")  # user / admin
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
