"""Budget category and budget item schemas."""
from datetime import date
from typing import Dict, List, Literal, Optional

from pydantic import Field

from .base import Form

ItemStatus = Literal["planned", "approved", "invoiced", "paid"]
CategoryKind = Literal["expense", "revenue"]

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class BudgetCategoryCreate(Form):
    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    kind: CategoryKind = "expense"
    allocated_amount: float = Field(0, ge=0, le=1_000_000_000)
    color: str = Field("#3B82F6", pattern=HEX_COLOR_PATTERN)
    icon: Optional[str] = Field(None, max_length=50)


class BudgetCategoryUpdate(Form):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    kind: Optional[CategoryKind] = None
    allocated_amount: Optional[float] = Field(None, ge=0, le=1_000_000_000)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    icon: Optional[str] = Field(None, max_length=50)


class BudgetItemCreate(Form):
    description: str = Field(min_length=3, max_length=500)
    estimated_cost: float = Field(ge=0.01, le=1_000_000_000)
    actual_cost: Optional[float] = Field(None, ge=0, le=1_000_000_000)
    status: ItemStatus = "planned"
    vendor: Optional[str] = Field(None, max_length=200)
    invoice_number: Optional[str] = Field(None, max_length=100)
    payment_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=1000)


class BudgetItemUpdate(Form):
    description: Optional[str] = Field(None, min_length=3, max_length=500)
    estimated_cost: Optional[float] = Field(None, ge=0.01, le=1_000_000_000)
    actual_cost: Optional[float] = Field(None, ge=0, le=1_000_000_000)
    status: Optional[ItemStatus] = None
    vendor: Optional[str] = Field(None, max_length=200)
    invoice_number: Optional[str] = Field(None, max_length=100)
    payment_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=1000)


class BudgetItemStatusUpdate(Form):
    """Status change; marking an item paid needs the payment details."""

    status: ItemStatus
    payment_date: Optional[date] = None
    actual_cost: Optional[float] = Field(None, ge=0)

    def cross_field_errors(self) -> Dict[str, List[str]]:
        errors = {}
        if self.status == "paid":
            if self.payment_date is None:
                errors["payment_date"] = [
                    "Payment date is required when the item is paid"
                ]
            if self.actual_cost is None:
                errors["actual_cost"] = [
                    "Actual cost is required when the item is paid"
                ]
        return errors
