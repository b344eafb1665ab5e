"""Cross-entity linkage between partners and budget items.

Speakers, services, sponsors and staff assignments can own a budget item that
mirrors their financial facet. The link is best effort: the partner row is
the primary write, the budget item a secondary one. Every secondary failure
is logged and swallowed so it never changes the outcome of the primary
operation. A failed delete leaves an orphaned item; a link to an item that
was removed elsewhere leaves an orphaned reference. ``reconcile_links``
reports (and optionally clears) orphaned references.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from config.budget_config import BudgetConfig, budget_config
from database import DatabaseManager
from database.models import BudgetCategory, BudgetItem


@dataclass(frozen=True)
class Unlinked:
    """The entity has no budget item."""

    @property
    def item_id(self) -> None:
        return None


@dataclass(frozen=True)
class Linked:
    """The entity references budget item ``item_id``."""

    item_id: int


BudgetLink = Union[Unlinked, Linked]


def link_of(entity: Any) -> BudgetLink:
    """Link state of an entity with a ``budget_item_id`` column."""
    item_id = getattr(entity, "budget_item_id", None)
    if item_id is None:
        return Unlinked()
    return Linked(item_id)


class BudgetLinker:
    """Best-effort writes of linked budget items.

    No method raises: failures are logged with ``logger.warning`` and reported
    through the return value.
    """

    def __init__(self, db: DatabaseManager,
                 config: Optional[BudgetConfig] = None) -> None:
        self.db = db
        self.config = config or budget_config

    def create_item(self, category_id: int, event_id: int,
                    fields: Dict[str, Any], owner: str) -> Optional[int]:
        """Create a budget item in a category of the event.

        Args:
            category_id: Target category.
            event_id: Event the owner belongs to.
            fields: Item columns (description, costs, vendor, ...).
            owner: Label of the owning entity for log lines, e.g. ``speaker 3``.

        Returns:
            The new item ID, or None when the item could not be created.
        """
        try:
            with self.db.get_session() as session:
                category = self.db.budget_categories.get_by_id(
                    BudgetCategory, category_id, session=session
                )
                if category is None or category.event_id != event_id:
                    logger.warning(
                        f"Budget category {category_id} not found for event "
                        f"{event_id}, {owner} left without budget item"
                    )
                    return None

                item = self.db.budget_items.create(
                    BudgetItem, session=session,
                    category_id=category_id, event_id=event_id, **fields
                )
                item_id = item.id
                self.db.budget_categories.refresh_spent_amount(
                    category_id, session=session
                )
                session.commit()
        except Exception as e:
            logger.warning(f"Could not create budget item for {owner}: {e}")
            return None

        logger.info(f"Budget item {item_id} created for {owner}")
        return item_id

    def update_item(self, item_id: int, fields: Dict[str, Any],
                    owner: str) -> bool:
        """Overwrite columns of a linked budget item.

        Returns:
            True when the item was updated, False when it is missing or the
            write failed.
        """
        try:
            with self.db.get_session() as session:
                item = self.db.budget_items.update_by_id(
                    BudgetItem, item_id, session=session, **fields
                )
                if item is None:
                    logger.warning(
                        f"Budget item {item_id} linked to {owner} no longer exists"
                    )
                    return False
                self.db.budget_categories.refresh_spent_amount(
                    item.category_id, session=session
                )
                session.commit()
        except Exception as e:
            logger.warning(
                f"Could not update budget item {item_id} of {owner}: {e}"
            )
            return False
        return True

    def delete_item(self, item_id: int, owner: str) -> bool:
        """Delete a linked budget item.

        Returns:
            True when the item is gone (deleted now or already missing),
            False when the delete failed and the item is left orphaned.
        """
        try:
            item = self.db.budget_items.get_by_id(BudgetItem, item_id)
            if item is None:
                return True
            category_id = item.category_id
            self.db.budget_items.delete_by_id(BudgetItem, item_id)
            self.db.budget_categories.refresh_spent_amount(category_id)
        except Exception as e:
            logger.warning(
                f"Could not delete budget item {item_id} of {owner}, "
                f"item left orphaned: {e}"
            )
            return False

        logger.info(f"Budget item {item_id} of {owner} deleted")
        return True

    def attach(self, repo: Any, entity_id: int, item_id: int,
               owner: str) -> bool:
        """Store ``item_id`` on the owning entity."""
        try:
            repo.set_link(entity_id, item_id)
        except Exception as e:
            logger.warning(
                f"Could not link budget item {item_id} to {owner}, "
                f"item left orphaned: {e}"
            )
            return False
        return True

    def ensure_income_category(self, event_id: int) -> Optional[int]:
        """ID of the event's income category, created when missing.

        Returns:
            Category ID, or None when it could neither be found nor created.
        """
        try:
            category = self.db.budget_categories.find_income_category(
                event_id, self.config.get_income_keywords()
            )
            if category is None:
                category = self.db.budget_categories.create(
                    BudgetCategory, event_id=event_id,
                    **self.config.get_income_category()
                )
                logger.info(
                    f"Income category {category.id} created for event {event_id}"
                )
            return category.id
        except Exception as e:
            logger.warning(
                f"Could not resolve income category of event {event_id}: {e}"
            )
            return None

    def reconcile_links(self, event_id: Optional[int] = None,
                        repair: bool = False) -> Dict[str, Any]:
        """Find entities whose linked budget item no longer exists.

        Args:
            event_id: Restrict the check to one event (optional).
            repair: Reset orphaned references to unlinked.

        Returns:
            Dict with ``checked`` (linked entities inspected), ``orphaned``
            (list of entity/id/budget_item_id dicts) and ``repaired``.
        """
        repos = {
            "speaker": self.db.speakers,
            "service": self.db.services,
            "sponsor": self.db.sponsors,
            "staff_assignment": self.db.staff_assignments,
        }
        checked = 0
        orphaned: List[Dict[str, Any]] = []
        repaired = 0

        for kind, repo in repos.items():
            linked = repo.list_linked(event_id=event_id)
            checked += len(linked)
            existing = self.db.budget_items.existing_ids(
                e.budget_item_id for e in linked
            )
            for entity in linked:
                if entity.budget_item_id in existing:
                    continue
                orphaned.append({
                    "entity": kind,
                    "id": entity.id,
                    "event_id": entity.event_id,
                    "budget_item_id": entity.budget_item_id,
                })
                if repair:
                    repo.set_link(entity.id, None)
                    repaired += 1

        if orphaned:
            logger.warning(f"Found {len(orphaned)} orphaned budget links")
        return {"checked": checked, "orphaned": orphaned, "repaired": repaired}
