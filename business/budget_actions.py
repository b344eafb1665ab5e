"""Budget mutations - categories and items.

Every entry point validates its payload, performs the write and returns an
ActionResult. Store errors are logged and turned into a short message; none
propagate to the caller. After item writes the category's cached spent
amount is refreshed from the item sums.
"""
from typing import Any, Dict, Mapping, Optional

from loguru import logger

from config.budget_config import BudgetConfig, budget_config
from database import DatabaseManager
from database.models import BudgetCategory, BudgetItem, Event
from validation import validate
from validation.budget import (
    BudgetCategoryCreate, BudgetCategoryUpdate, BudgetItemCreate,
    BudgetItemUpdate, BudgetItemStatusUpdate
)
from .results import ActionResult
from .serialization import row_to_dict

Payload = Optional[Mapping[str, Any]]


class BudgetActions:
    """Create, update and delete budget categories and items."""

    def __init__(self, db: DatabaseManager,
                 config: Optional[BudgetConfig] = None) -> None:
        self.db = db
        self.config = config or budget_config

    # ================================================================
    # Categories
    # ================================================================

    def create_category(self, event_id: int, payload: Payload) -> ActionResult:
        """Create a budget category for an event.

        Args:
            event_id: Owning event.
            payload: Raw category fields.

        Returns:
            ActionResult with the new category in ``data``.
        """
        result = validate(BudgetCategoryCreate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)

        try:
            if self.db.events.get_by_id(Event, event_id) is None:
                return ActionResult.fail("Event not found")
            category = self.db.budget_categories.create(
                BudgetCategory, event_id=event_id, spent_amount=0,
                **result.data.model_dump()
            )
        except Exception as e:
            logger.error(f"Failed to create budget category: {e}")
            return ActionResult.fail("Could not create the budget category")

        logger.info(f"Budget category {category.id} created for event {event_id}")
        return ActionResult.ok("Budget category created", row_to_dict(category))

    def update_category(self, category_id: int,
                        payload: Payload) -> ActionResult:
        result = validate(BudgetCategoryUpdate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)

        try:
            category = self.db.budget_categories.update_by_id(
                BudgetCategory, category_id, **result.data.provided()
            )
        except Exception as e:
            logger.error(f"Failed to update budget category {category_id}: {e}")
            return ActionResult.fail("Could not update the budget category")

        if category is None:
            return ActionResult.fail("Budget category not found")
        return ActionResult.ok("Budget category updated", row_to_dict(category))

    def delete_category(self, category_id: int) -> ActionResult:
        """Delete a category together with its items."""
        try:
            deleted = self.db.budget_categories.delete_by_id(
                BudgetCategory, category_id
            )
        except Exception as e:
            logger.error(f"Failed to delete budget category {category_id}: {e}")
            return ActionResult.fail("Could not delete the budget category")

        if not deleted:
            return ActionResult.fail("Budget category not found")
        logger.info(f"Budget category {category_id} deleted")
        return ActionResult.ok("Budget category deleted")

    def create_default_categories(self, event_id: int) -> ActionResult:
        """Seed the configured starter categories on an event without any."""
        try:
            if self.db.events.get_by_id(Event, event_id) is None:
                return ActionResult.fail("Event not found")
            if self.db.budget_categories.list_by_event(event_id):
                return ActionResult.fail("Event already has budget categories")
            created = [
                row_to_dict(self.db.budget_categories.create(
                    BudgetCategory, event_id=event_id, allocated_amount=0,
                    spent_amount=0, **category
                ))
                for category in self.config.get_default_categories()
            ]
        except Exception as e:
            logger.error(f"Failed to seed budget categories of event {event_id}: {e}")
            return ActionResult.fail("Could not create the budget categories")

        return ActionResult.ok("Default budget categories created", created)

    # ================================================================
    # Items
    # ================================================================

    def create_item(self, category_id: int, payload: Payload) -> ActionResult:
        """Create a budget item in a category.

        The item's event is taken from the category.
        """
        result = validate(BudgetItemCreate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)

        try:
            with self.db.get_session() as session:
                category = self.db.budget_categories.get_by_id(
                    BudgetCategory, category_id, session=session
                )
                if category is None:
                    return ActionResult.fail("Budget category not found")
                item = self.db.budget_items.create(
                    BudgetItem, session=session, category_id=category_id,
                    event_id=category.event_id, **result.data.model_dump()
                )
                self.db.budget_categories.refresh_spent_amount(
                    category_id, session=session
                )
                session.commit()
                data = row_to_dict(item)
        except Exception as e:
            logger.error(f"Failed to create budget item: {e}")
            return ActionResult.fail("Could not create the budget item")

        return ActionResult.ok("Budget item created", data)

    def update_item(self, item_id: int, payload: Payload) -> ActionResult:
        result = validate(BudgetItemUpdate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)
        return self._write_item(
            item_id, result.data.provided(), "Budget item updated"
        )

    def update_item_status(self, item_id: int,
                           payload: Payload) -> ActionResult:
        """Move an item through planned / approved / invoiced / paid.

        Marking an item paid requires its payment date and actual cost.
        """
        result = validate(BudgetItemStatusUpdate, payload)
        if not result.valid:
            return ActionResult.invalid(result.errors)
        return self._write_item(
            item_id, result.data.provided(), "Budget item status updated"
        )

    def delete_item(self, item_id: int) -> ActionResult:
        try:
            with self.db.get_session() as session:
                item = self.db.budget_items.get_by_id(
                    BudgetItem, item_id, session=session
                )
                if item is None:
                    return ActionResult.fail("Budget item not found")
                category_id = item.category_id
                self.db.budget_items.delete_by_id(
                    BudgetItem, item_id, session=session
                )
                self.db.budget_categories.refresh_spent_amount(
                    category_id, session=session
                )
                session.commit()
        except Exception as e:
            logger.error(f"Failed to delete budget item {item_id}: {e}")
            return ActionResult.fail("Could not delete the budget item")

        return ActionResult.ok("Budget item deleted")

    def _write_item(self, item_id: int, fields: Dict[str, Any],
                    message: str) -> ActionResult:
        try:
            with self.db.get_session() as session:
                item = self.db.budget_items.update_by_id(
                    BudgetItem, item_id, session=session, **fields
                )
                if item is None:
                    return ActionResult.fail("Budget item not found")
                self.db.budget_categories.refresh_spent_amount(
                    item.category_id, session=session
                )
                session.commit()
                data = row_to_dict(item)
        except Exception as e:
            logger.error(f"Failed to update budget item {item_id}: {e}")
            return ActionResult.fail("Could not update the budget item")

        return ActionResult.ok(message, data)
