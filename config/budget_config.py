"""
Budget configuration - replaceable defaults for budgets and communications

A deployment can provide its own BudgetConfig to change the income keywords,
the starter category set or the stock email templates.
"""
from abc import ABC, abstractmethod
from typing import List, Dict, Any


class BudgetConfig(ABC):
    """Abstract budget configuration"""

    @abstractmethod
    def get_income_keywords(self) -> List[str]:
        """Lower-case name fragments that mark a category as revenue"""
        pass

    @abstractmethod
    def get_income_category(self) -> Dict[str, Any]:
        """Attributes of the category created to hold sponsor income"""
        pass

    @abstractmethod
    def get_default_categories(self) -> List[Dict[str, Any]]:
        """Starter categories offered for a new event"""
        pass

    @abstractmethod
    def get_default_email_templates(self) -> List[Dict[str, Any]]:
        """Stock email templates seeded on first start"""
        pass


class EventBudgetConfig(BudgetConfig):
    """Default configuration for corporate events"""

    def get_income_keywords(self) -> List[str]:
        return ["entrat", "ricav", "income", "revenue"]

    def get_income_category(self) -> Dict[str, Any]:
        return {
            "name": "Entrate Sponsor",
            "description": "Sponsorship income",
            "kind": "revenue",
            "allocated_amount": 0,
            "color": "#10B981",
            "icon": "dollar-sign",
        }

    def get_default_categories(self) -> List[Dict[str, Any]]:
        return [
            {"name": "Venue", "color": "#3B82F6", "icon": "building"},
            {"name": "Catering", "color": "#F59E0B", "icon": "utensils"},
            {"name": "Speakers", "color": "#8B5CF6", "icon": "mic"},
            {"name": "Marketing", "color": "#EC4899", "icon": "megaphone"},
            {"name": "Staff", "color": "#6366F1", "icon": "users"},
            {"name": "Technology", "color": "#14B8A6", "icon": "monitor"},
        ]

    def get_default_email_templates(self) -> List[Dict[str, Any]]:
        return [
            {
                "name": "Registration welcome",
                "category": "welcome",
                "subject": "Welcome to {{event_title}}",
                "body": (
                    "Dear {{first_name}},\n\n"
                    "thank you for registering to {{event_title}}. "
                    "We look forward to seeing you on {{event_date}}."
                ),
            },
            {
                "name": "Event reminder",
                "category": "reminder",
                "subject": "Reminder: {{event_title}} is coming up",
                "body": (
                    "Dear {{first_name}},\n\n"
                    "this is a reminder that {{event_title}} takes place "
                    "on {{event_date}} at {{event_location}}."
                ),
            },
            {
                "name": "Registration confirmed",
                "category": "confirmation",
                "subject": "Your registration to {{event_title}} is confirmed",
                "body": (
                    "Dear {{first_name}},\n\n"
                    "your place at {{event_title}} has been confirmed."
                ),
            },
            {
                "name": "Thank you",
                "category": "thank_you",
                "subject": "Thank you for attending {{event_title}}",
                "body": (
                    "Dear {{first_name}},\n\n"
                    "thank you for joining us at {{event_title}}. "
                    "We would love to hear your feedback."
                ),
            },
        ]


# Default budget configuration
budget_config = EventBudgetConfig()
