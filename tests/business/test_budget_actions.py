"""BudgetActions tests - category and item mutations."""
from datetime import date

from business.budget_actions import BudgetActions
from business.results import ActionResult
from database.models import BudgetCategory


class TestActionResult:

    def test_to_dict_skips_empty_parts(self):
        assert ActionResult.ok("Done").to_dict() == {
            "success": True, "message": "Done"
        }

    def test_invalid(self):
        result = ActionResult.invalid({"name": ["Field required"]})
        assert result.success is False
        assert result.message == "Validation errors"
        assert result.to_dict()["errors"] == {"name": ["Field required"]}


class TestCategoryActions:

    def test_create_category(self, temp_db, event):
        result = BudgetActions(temp_db).create_category(event.id, {
            "name": "Venue", "allocated_amount": "2500"
        })

        assert result.success
        assert result.message == "Budget category created"
        assert result.data["allocated_amount"] == 2500
        assert result.data["spent_amount"] == 0
        assert result.data["event_id"] == event.id

    def test_create_category_invalid(self, temp_db, event):
        result = BudgetActions(temp_db).create_category(event.id, {"name": ""})
        assert result.success is False
        assert "name" in result.errors
        assert temp_db.budget_categories.list_by_event(event.id) == []

    def test_create_category_unknown_event(self, temp_db):
        result = BudgetActions(temp_db).create_category(999, {"name": "Venue"})
        assert result.to_dict() == {"success": False, "message": "Event not found"}

    def test_update_category(self, temp_db, event, make_category):
        category = make_category(event.id, allocated=1000)

        result = BudgetActions(temp_db).update_category(
            category.id, {"allocated_amount": 1500}
        )

        assert result.success
        assert result.data["allocated_amount"] == 1500
        assert result.data["name"] == "Catering"

    def test_update_missing_category(self, temp_db):
        result = BudgetActions(temp_db).update_category(42, {"name": "Venue"})
        assert result.message == "Budget category not found"

    def test_delete_category_removes_items(self, temp_db, event,
                                           make_category, make_item):
        category = make_category(event.id)
        make_item(category)

        result = BudgetActions(temp_db).delete_category(category.id)

        assert result.success
        assert temp_db.budget_items.list_by_event(event.id) == []
        assert not BudgetActions(temp_db).delete_category(category.id).success

    def test_default_categories(self, temp_db, event):
        actions = BudgetActions(temp_db)

        result = actions.create_default_categories(event.id)

        assert result.success
        names = [c["name"] for c in result.data]
        assert names == [
            "Venue", "Catering", "Speakers", "Marketing", "Staff", "Technology"
        ]
        assert all(c["allocated_amount"] == 0 for c in result.data)
        again = actions.create_default_categories(event.id)
        assert again.message == "Event already has budget categories"


class TestItemActions:

    def test_create_item_refreshes_spent(self, temp_db, event, make_category):
        category = make_category(event.id)

        result = BudgetActions(temp_db).create_item(category.id, {
            "description": "Coffee break", "estimated_cost": "300",
            "actual_cost": "280",
        })

        assert result.success
        assert result.data["event_id"] == event.id
        stored = temp_db.budget_categories.get_by_id(BudgetCategory, category.id)
        assert float(stored.spent_amount) == 280

    def test_create_item_missing_category(self, temp_db):
        result = BudgetActions(temp_db).create_item(7, {
            "description": "Coffee break", "estimated_cost": 10
        })
        assert result.message == "Budget category not found"

    def test_create_item_invalid(self, temp_db, event, make_category):
        category = make_category(event.id)
        result = BudgetActions(temp_db).create_item(category.id, {
            "description": "Coffee break", "estimated_cost": -5
        })
        assert result.message == "Validation errors"
        assert "estimated_cost" in result.errors

    def test_update_item(self, temp_db, event, make_category, make_item):
        category = make_category(event.id)
        item = make_item(category, estimated=100)

        result = BudgetActions(temp_db).update_item(
            item.id, {"actual_cost": 120, "vendor": "Bar Centrale"}
        )

        assert result.data["actual_cost"] == 120
        assert result.data["estimated_cost"] == 100
        stored = temp_db.budget_categories.get_by_id(BudgetCategory, category.id)
        assert float(stored.spent_amount) == 120

    def test_mark_paid_requires_details(self, temp_db, event, make_category,
                                        make_item):
        item = make_item(make_category(event.id))

        result = BudgetActions(temp_db).update_item_status(
            item.id, {"status": "paid"}
        )

        assert result.success is False
        assert set(result.errors) == {"payment_date", "actual_cost"}

    def test_mark_paid(self, temp_db, event, make_category, make_item):
        item = make_item(make_category(event.id))

        result = BudgetActions(temp_db).update_item_status(item.id, {
            "status": "paid", "payment_date": "2025-06-20", "actual_cost": 95
        })

        assert result.message == "Budget item status updated"
        assert result.data["status"] == "paid"
        assert result.data["payment_date"] == date(2025, 6, 20)

    def test_delete_item(self, temp_db, event, make_category, make_item):
        category = make_category(event.id)
        item = make_item(category, actual=50)
        temp_db.budget_categories.refresh_spent_amount(category.id)

        result = BudgetActions(temp_db).delete_item(item.id)

        assert result.success
        stored = temp_db.budget_categories.get_by_id(BudgetCategory, category.id)
        assert float(stored.spent_amount) == 0
        assert BudgetActions(temp_db).delete_item(item.id).message == (
            "Budget item not found"
        )
