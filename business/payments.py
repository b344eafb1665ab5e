"""Staff payment scheduling helpers."""
from datetime import date, datetime, timedelta
from typing import Optional

TERM_DAYS = {"immediate": 0, "30_days": 30, "60_days": 60, "90_days": 90}


def calculate_payment_due_date(end_time: Optional[datetime],
                               payment_terms: str) -> Optional[date]:
    """Due date of a staff payment from the end of the assignment.

    Args:
        end_time: End of the assignment.
        payment_terms: immediate / 30_days / 60_days / 90_days / custom.

    Returns:
        The due date, or None for custom terms or a missing end time.
    """
    if end_time is None or payment_terms not in TERM_DAYS:
        return None
    end_day = end_time.date() if isinstance(end_time, datetime) else end_time
    return end_day + timedelta(days=TERM_DAYS[payment_terms])


def calculate_payment_status(due_date: Optional[date],
                             payment_date: Optional[date],
                             assignment_status: str,
                             today: Optional[date] = None) -> str:
    """Payment status of a staff assignment.

    Returns:
        ``paid`` when a payment date is recorded, ``not_due`` for cancelled
        or declined assignments and when no due date is known, ``overdue``
        once the due date has passed, ``pending`` otherwise.
    """
    if payment_date is not None:
        return "paid"
    if assignment_status in ("cancelled", "declined") or due_date is None:
        return "not_due"
    today = today or date.today()
    if today > due_date:
        return "overdue"
    return "pending"
