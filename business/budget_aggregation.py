"""Budget aggregation - read-only financial views over budget items.

Nothing here writes to the store. Spent amounts are always recomputed from
the items' actual costs; the cached ``BudgetCategory.spent_amount`` column is
never read.

A ``BudgetAggregator`` is meant to live for one request: repeated calls with
the same arguments reuse the first result, a new aggregator recomputes.

Usage:
    ```python
    aggregator = BudgetAggregator(db)
    summary = aggregator.get_event_budget_summary(event_id)
    financials = aggregator.get_global_financials()
    ```
"""
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from config.budget_config import BudgetConfig, budget_config
from database import DatabaseManager
from database.models import BudgetCategory, BudgetItem, Sponsor
from .request_cache import memoized

ITEM_STATUSES = ("planned", "approved", "invoiced", "paid")
SPONSOR_PAYMENT_STATUSES = ("pending", "partial", "paid")

# Share of a partially paid sponsorship counted as received
PARTIAL_PAYMENT_SHARE = 0.5


def money(value: Any) -> float:
    """DECIMAL/None column value as float."""
    return float(value) if value else 0.0


def percentage(part: float, whole: float) -> float:
    """``part / whole * 100``, 0 when ``whole`` is 0.

    A zero allocation therefore reports 0 % used even when money was spent.
    """
    if not whole:
        return 0.0
    return part / whole * 100


def item_amount(item: BudgetItem) -> float:
    """Actual cost when known, otherwise the estimate."""
    return money(item.actual_cost) or money(item.estimated_cost)


def is_revenue_category(category: BudgetCategory,
                        keywords: Optional[Iterable[str]] = None) -> bool:
    """Whether a category holds revenue.

    The explicit ``kind`` wins; categories left at the default ``expense``
    kind are still treated as revenue when their name contains an income
    keyword.
    """
    if category.kind == "revenue":
        return True
    if keywords is None:
        keywords = budget_config.get_income_keywords()
    name = (category.name or "").lower()
    return any(keyword in name for keyword in keywords)


def count_statuses(items: Iterable[BudgetItem]) -> Dict[str, int]:
    counts = {status: 0 for status in ITEM_STATUSES}
    for item in items:
        if item.status in counts:
            counts[item.status] += 1
    return counts


class BudgetAggregator:
    """Computes budget summaries for one request.

    Attributes:
        db: Database manager.
        config: Budget configuration (income keywords).
    """

    def __init__(self, db: DatabaseManager,
                 config: Optional[BudgetConfig] = None) -> None:
        self.db = db
        self.config = config or budget_config
        self._memo: Dict[Any, Any] = {}

    def _category_view(self, category: BudgetCategory) -> Dict[str, Any]:
        items = list(category.items)
        allocated = money(category.allocated_amount)
        spent = sum(money(item.actual_cost) for item in items)
        status_counts = count_statuses(items)
        return {
            "id": category.id,
            "name": category.name,
            "kind": (
                "revenue"
                if is_revenue_category(category, self.config.get_income_keywords())
                else "expense"
            ),
            "color": category.color,
            "icon": category.icon,
            "allocated": allocated,
            "spent": spent,
            "remaining": allocated - spent,
            "percentage_used": percentage(spent, allocated),
            "items_count": len(items),
            "estimated_total": sum(money(i.estimated_cost) for i in items),
            "actual_total": spent,
            "status_counts": status_counts,
            "paid_items": status_counts["paid"],
            "pending_items": len(items) - status_counts["paid"],
        }

    @memoized
    def get_category_breakdown(self, event_id: int) -> List[Dict[str, Any]]:
        """Per-category figures of an event.

        Args:
            event_id: Event ID.

        Returns:
            One dict per category with allocated, spent, remaining,
            percentage_used, items_count, status_counts and totals.
        """
        categories = self.db.budget_categories.list_by_event(
            event_id, with_items=True
        )
        return [self._category_view(c) for c in categories]

    @memoized
    def get_event_budget_summary(self, event_id: int) -> Dict[str, Any]:
        """Totals of an event's budget.

        Returns:
            Dict with total_allocated, total_spent, remaining,
            percentage_used, categories_count, items_count, status_counts
            and category_breakdown.
        """
        breakdown = self.get_category_breakdown(event_id)
        total_allocated = sum(c["allocated"] for c in breakdown)
        total_spent = sum(c["spent"] for c in breakdown)

        status_counts = {status: 0 for status in ITEM_STATUSES}
        for category in breakdown:
            for status, total in category["status_counts"].items():
                status_counts[status] += total

        return {
            "event_id": event_id,
            "total_allocated": total_allocated,
            "total_spent": total_spent,
            "remaining": total_allocated - total_spent,
            "percentage_used": percentage(total_spent, total_allocated),
            "categories_count": len(breakdown),
            "items_count": sum(c["items_count"] for c in breakdown),
            "status_counts": status_counts,
            "category_breakdown": breakdown,
        }

    @memoized
    def get_global_financials(self) -> Dict[str, Any]:
        """Cross-event revenue, costs and profit.

        Every item contributes ``actual_cost or estimated_cost`` to revenue
        when its category is a revenue category, to costs otherwise.

        Returns:
            Dict with totals, revenue, costs, net_profit, profit_margin,
            status_counts and an event_breakdown sorted by event start date,
            newest first.
        """
        keywords = self.config.get_income_keywords()
        categories = self.db.budget_categories.list_all_with_items()

        revenue = 0.0
        costs = 0.0
        total_allocated = 0.0
        total_spent = 0.0
        all_items: List[BudgetItem] = []
        events: Dict[int, Dict[str, Any]] = {}

        for category in categories:
            items = list(category.items)
            all_items.extend(items)
            allocated = money(category.allocated_amount)
            spent = sum(money(item.actual_cost) for item in items)
            total_allocated += allocated
            total_spent += spent

            entry = events.get(category.event_id)
            if entry is None:
                event = category.event
                entry = events[category.event_id] = {
                    "event_id": category.event_id,
                    "event_title": event.title if event else None,
                    "event_status": event.status if event else None,
                    "event_date": event.start_date if event else None,
                    "allocated": 0.0,
                    "spent": 0.0,
                    "revenue": 0.0,
                    "costs": 0.0,
                    "items_count": 0,
                }
            entry["allocated"] += allocated
            entry["spent"] += spent
            entry["items_count"] += len(items)

            income = is_revenue_category(category, keywords)
            for item in items:
                amount = item_amount(item)
                if income:
                    revenue += amount
                    entry["revenue"] += amount
                else:
                    costs += amount
                    entry["costs"] += amount

        net_profit = revenue - costs
        breakdown = sorted(
            events.values(),
            key=lambda e: (e["event_date"] is not None, e["event_date"]),
            reverse=True,
        )
        logger.debug(
            f"Global financials: {len(categories)} categories, "
            f"revenue={revenue}, costs={costs}"
        )

        return {
            "total_allocated": total_allocated,
            "total_spent": total_spent,
            "total_estimated": sum(money(i.estimated_cost) for i in all_items),
            "total_actual": sum(money(i.actual_cost) for i in all_items),
            "revenue": revenue,
            "costs": costs,
            "net_profit": net_profit,
            "profit_margin": percentage(net_profit, revenue),
            "status_counts": count_statuses(all_items),
            "events_count": len(events),
            "event_breakdown": breakdown,
        }

    @memoized
    def get_budget_variance(self, event_id: int) -> Dict[str, Any]:
        """Estimated vs actual spend of an event.

        Returns:
            Dict with total_estimated, total_actual, variance (actual minus
            estimated), variance_percentage and is_over_budget.
        """
        items = self.db.budget_items.list_by_event(event_id)
        total_estimated = sum(money(i.estimated_cost) for i in items)
        total_actual = sum(money(i.actual_cost) for i in items)
        variance = total_actual - total_estimated
        return {
            "total_estimated": total_estimated,
            "total_actual": total_actual,
            "variance": variance,
            "variance_percentage": percentage(variance, total_estimated),
            "is_over_budget": variance > 0,
        }

    @memoized
    def get_overdue_items(self, event_id: Optional[int] = None,
                          today: Optional[date] = None
                          ) -> List[Dict[str, Any]]:
        """Invoiced items whose payment date has passed."""
        today = today or date.today()
        items = self.db.budget_items.get_overdue(event_id=event_id, today=today)
        return [
            {
                "id": item.id,
                "event_id": item.event_id,
                "category_id": item.category_id,
                "description": item.description,
                "vendor": item.vendor,
                "amount": item_amount(item),
                "payment_date": item.payment_date,
                "days_overdue": (today - item.payment_date).days,
            }
            for item in items
        ]

    @memoized
    def get_sponsor_payment_stats(self, event_id: int) -> Dict[str, Any]:
        """Sponsorship money committed and received.

        A partially paid sponsorship counts as half received; this is an
        approximation, not exact accounting.
        """
        sponsors = self.db.sponsors.list_by_event(event_id)
        total = 0.0
        received = 0.0
        counts = {status: 0 for status in SPONSOR_PAYMENT_STATUSES}
        by_level: Dict[str, float] = {}

        for sponsor in sponsors:
            amount = money(sponsor.sponsorship_amount)
            total += amount
            received += sponsor_received_amount(sponsor)
            counts[sponsor.payment_status] = counts.get(
                sponsor.payment_status, 0
            ) + 1
            by_level[sponsor.sponsorship_level] = (
                by_level.get(sponsor.sponsorship_level, 0.0) + amount
            )

        return {
            "sponsors_count": len(sponsors),
            "total_committed": total,
            "total_received": received,
            "outstanding": total - received,
            "status_counts": counts,
            "amount_by_level": by_level,
        }

    def get_budget_report(self, event_id: int,
                          today: Optional[date] = None) -> Dict[str, Any]:
        """Everything an event budget report needs, in one dict."""
        return {
            "summary": self.get_event_budget_summary(event_id),
            "variance": self.get_budget_variance(event_id),
            "overdue_items": self.get_overdue_items(event_id, today),
            "sponsors": self.get_sponsor_payment_stats(event_id),
        }


def sponsor_received_amount(sponsor: Sponsor) -> float:
    """Money received from a sponsor under the partial-payment rule."""
    amount = money(sponsor.sponsorship_amount)
    if sponsor.payment_status == "paid":
        return amount
    if sponsor.payment_status == "partial":
        return amount * PARTIAL_PAYMENT_SHARE
    return 0.0
