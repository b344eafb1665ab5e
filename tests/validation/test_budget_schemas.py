"""Budget schema tests.

Tests for:
- validate() result shape
- Blank strings treated as missing
- BudgetCategoryCreate / BudgetItemCreate field rules
- BudgetItemStatusUpdate cross-field rule for paid items
"""
from datetime import date

from validation import validate
from validation.budget import (
    BudgetCategoryCreate, BudgetCategoryUpdate, BudgetItemCreate,
    BudgetItemStatusUpdate
)


class TestValidateResult:

    def test_valid_payload(self):
        result = validate(BudgetCategoryCreate, {"name": "Venue"})
        assert result.valid is True
        assert result.errors == {}
        assert result.data.name == "Venue"
        assert result.data.allocated_amount == 0
        assert result.data.kind == "expense"

    def test_none_payload_is_empty(self):
        result = validate(BudgetCategoryCreate, None)
        assert result.valid is False
        assert result.errors["name"] == ["Field required"]

    def test_to_dict(self):
        result = validate(BudgetCategoryCreate, {"name": "V"})
        as_dict = result.to_dict()
        assert as_dict["valid"] is False
        assert "name" in as_dict["errors"]


class TestBudgetCategorySchemas:

    def test_numeric_strings_are_coerced(self):
        result = validate(BudgetCategoryCreate, {
            "name": "Catering", "allocated_amount": "1500.50"
        })
        assert result.data.allocated_amount == 1500.5

    def test_negative_allocation_rejected(self):
        result = validate(BudgetCategoryCreate, {
            "name": "Catering", "allocated_amount": -1
        })
        assert "allocated_amount" in result.errors

    def test_color_must_be_hex(self):
        result = validate(BudgetCategoryCreate, {
            "name": "Catering", "color": "blue"
        })
        assert "color" in result.errors

    def test_unknown_kind_rejected(self):
        result = validate(BudgetCategoryCreate, {
            "name": "Catering", "kind": "donation"
        })
        assert "kind" in result.errors

    def test_update_only_reports_provided_fields(self):
        result = validate(BudgetCategoryUpdate, {"allocated_amount": 200})
        assert result.data.provided() == {"allocated_amount": 200}


class TestBudgetItemCreate:

    def test_minimal_item(self):
        result = validate(BudgetItemCreate, {
            "description": "Projector rental", "estimated_cost": "250"
        })
        assert result.valid
        assert result.data.status == "planned"
        assert result.data.actual_cost is None

    def test_blank_estimate_is_required(self):
        result = validate(BudgetItemCreate, {
            "description": "Projector rental", "estimated_cost": "  "
        })
        assert result.errors["estimated_cost"] == ["Field required"]

    def test_estimate_must_be_positive(self):
        result = validate(BudgetItemCreate, {
            "description": "Projector rental", "estimated_cost": 0
        })
        assert "estimated_cost" in result.errors

    def test_blank_optional_fields_are_dropped(self):
        result = validate(BudgetItemCreate, {
            "description": "Projector rental", "estimated_cost": 250,
            "actual_cost": "", "vendor": "", "payment_date": "",
        })
        assert result.valid
        assert result.data.actual_cost is None
        assert result.data.vendor is None

    def test_short_description(self):
        result = validate(BudgetItemCreate, {
            "description": "ab", "estimated_cost": 10
        })
        assert "description" in result.errors


class TestBudgetItemStatusUpdate:

    def test_paid_requires_payment_details(self):
        result = validate(BudgetItemStatusUpdate, {"status": "paid"})
        assert result.valid is False
        assert set(result.errors) == {"payment_date", "actual_cost"}

    def test_paid_with_details(self):
        result = validate(BudgetItemStatusUpdate, {
            "status": "paid", "payment_date": "2025-06-20",
            "actual_cost": "480",
        })
        assert result.valid
        assert result.data.payment_date == date(2025, 6, 20)

    def test_other_statuses_need_nothing(self):
        assert validate(BudgetItemStatusUpdate, {"status": "approved"}).valid

    def test_field_errors_come_before_cross_field_rules(self):
        result = validate(BudgetItemStatusUpdate, {"status": "settled"})
        assert set(result.errors) == {"status"}
