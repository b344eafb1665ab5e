"""Communication, email template and organization settings schemas."""
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import EmailStr, Field

from .base import Form

RecipientType = Literal[
    "all_participants", "confirmed_only", "speakers", "sponsors", "custom"
]
TemplateCategory = Literal[
    "welcome", "reminder", "confirmation", "update", "thank_you", "custom"
]


class CommunicationForm(Form):
    recipient_type: RecipientType
    custom_recipients: Optional[List[EmailStr]] = None
    subject: str = Field(min_length=3, max_length=200)
    body: str = Field(min_length=10, max_length=50_000)
    template_id: Optional[int] = None
    scheduled_at: Optional[datetime] = None

    def cross_field_errors(self) -> Dict[str, List[str]]:
        if self.recipient_type == "custom" and not self.custom_recipients:
            return {
                "custom_recipients": ["Add at least one recipient"]
            }
        return {}


class EmailTemplateForm(Form):
    name: str = Field(min_length=2, max_length=100)
    category: TemplateCategory = "custom"
    subject: str = Field(min_length=3, max_length=200)
    body: str = Field(min_length=10, max_length=50_000)


class OrganizationSettingsForm(Form):
    organization_name: Optional[str] = Field(None, min_length=2, max_length=200)
    contact_email: Optional[EmailStr] = None
    timezone: Optional[str] = Field(None, max_length=50)
    language: Optional[Literal["it", "en"]] = None
    notify_new_registration: Optional[bool] = None
    notify_payment_received: Optional[bool] = None
    notify_deadline_reminder: Optional[bool] = None
    weekly_digest: Optional[bool] = None
