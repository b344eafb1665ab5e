"""Budget repositories - data access for budget categories and items.

A category owns its items. ``BudgetCategory.spent_amount`` is only a cache of
the items' actual costs; ``refresh_spent_amount`` rewrites it from the item
sums after item writes.
"""
from typing import Optional, List, Iterable
from datetime import date
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload
from loguru import logger

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .models import BudgetCategory, BudgetItem


class BudgetCategoryRepository(BaseCRUD):
    """Budget category repository."""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def list_by_event(self, event_id: int, with_items: bool = False,
                      session: Optional[Session] = None
                      ) -> List[BudgetCategory]:
        """Categories of an event in creation order.

        Args:
            event_id: Event ID.
            with_items: Eager-load the items so they stay readable after
                the session closes.
            session: External session (optional).

        Returns:
            Category list.
        """
        def _query(sess):
            query = sess.query(BudgetCategory).filter(
                BudgetCategory.event_id == event_id
            )
            if with_items:
                query = query.options(selectinload(BudgetCategory.items))
            return query.order_by(BudgetCategory.id).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def list_all_with_items(self, session: Optional[Session] = None
                            ) -> List[BudgetCategory]:
        """Every category of every event, items and event eager-loaded."""
        def _query(sess):
            return sess.query(BudgetCategory).options(
                selectinload(BudgetCategory.items),
                selectinload(BudgetCategory.event),
            ).order_by(BudgetCategory.id).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def find_income_category(self, event_id: int, keywords: Iterable[str],
                             session: Optional[Session] = None
                             ) -> Optional[BudgetCategory]:
        """Find the event's income category.

        A category qualifies when its kind is ``revenue`` or its name
        contains one of ``keywords`` (case-insensitive).

        Returns:
            The first matching category, or None.
        """
        keywords = [k.lower() for k in keywords]

        def _query(sess):
            for category in self.list_by_event(event_id, session=sess):
                name = (category.name or "").lower()
                if category.kind == "revenue" or any(
                    k in name for k in keywords
                ):
                    return category
            return None

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def refresh_spent_amount(self, category_id: int,
                             session: Optional[Session] = None
                             ) -> Optional[float]:
        """Rewrite the cached ``spent_amount`` from the item actual costs.

        Returns:
            The new spent amount, or None when the category does not exist.
        """
        def _do(sess):
            category = sess.get(BudgetCategory, category_id)
            if category is None:
                return None
            total = sess.query(
                func.coalesce(func.sum(BudgetItem.actual_cost), 0)
            ).filter(BudgetItem.category_id == category_id).scalar()
            category.spent_amount = total
            sess.flush()
            logger.debug(
                f"Category {category_id} spent amount refreshed: {total}"
            )
            return float(total or 0)

        if session:
            return _do(session)

        with self._get_session() as sess:
            total = _do(sess)
            sess.commit()
            return total

    def copy_to_event(self, source_event_id: int, target_event_id: int,
                      session: Optional[Session] = None) -> int:
        """Copy an event's categories (without items) to another event.

        Returns:
            Number of copied categories.
        """
        def _do(sess):
            copied = 0
            for category in self.list_by_event(source_event_id, session=sess):
                sess.add(BudgetCategory(
                    event_id=target_event_id,
                    name=category.name,
                    description=category.description,
                    kind=category.kind,
                    allocated_amount=category.allocated_amount,
                    spent_amount=0,
                    color=category.color,
                    icon=category.icon,
                ))
                copied += 1
            sess.flush()
            return copied

        if session:
            return _do(session)

        with self._get_session() as sess:
            copied = _do(sess)
            sess.commit()
            return copied


class BudgetItemRepository(BaseCRUD):
    """Budget item repository."""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def list_by_category(self, category_id: int,
                         session: Optional[Session] = None
                         ) -> List[BudgetItem]:
        """Items of a category in creation order."""
        return self.get_all(
            BudgetItem, filters={"category_id": category_id},
            order_by=BudgetItem.id, session=session
        )

    def list_by_event(self, event_id: int, status: Optional[str] = None,
                      session: Optional[Session] = None
                      ) -> List[BudgetItem]:
        """Items of an event, optionally filtered by status."""
        filters = {"event_id": event_id}
        if status:
            filters["status"] = status
        return self.get_all(
            BudgetItem, filters=filters, order_by=BudgetItem.id,
            session=session
        )

    def get_overdue(self, event_id: Optional[int] = None,
                    today: Optional[date] = None,
                    session: Optional[Session] = None) -> List[BudgetItem]:
        """Invoiced items whose payment date has passed.

        Args:
            event_id: Restrict to one event (optional).
            today: Reference date, defaults to today.

        Returns:
            Overdue items, oldest payment date first.
        """
        today = today or date.today()

        def _query(sess):
            query = sess.query(BudgetItem).filter(
                BudgetItem.status == "invoiced",
                BudgetItem.payment_date.isnot(None),
                BudgetItem.payment_date < today,
            )
            if event_id is not None:
                query = query.filter(BudgetItem.event_id == event_id)
            return query.order_by(BudgetItem.payment_date.asc()).all()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def existing_ids(self, item_ids: Iterable[int],
                     session: Optional[Session] = None) -> set:
        """Subset of ``item_ids`` that still exist."""
        item_ids = [i for i in item_ids if i is not None]
        if not item_ids:
            return set()

        def _query(sess):
            rows = sess.query(BudgetItem.id).filter(
                BudgetItem.id.in_(item_ids)
            ).all()
            return {row[0] for row in rows}

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)
