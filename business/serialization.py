"""ORM row to plain dict conversion for results and API payloads."""
from decimal import Decimal
from typing import Any, Dict, Optional


def row_to_dict(obj: Any) -> Optional[Dict[str, Any]]:
    """Column values of an ORM object; DECIMAL values become floats."""
    if obj is None:
        return None

    data = {}
    for column in obj.__table__.columns:
        value = getattr(obj, column.key)
        if isinstance(value, Decimal):
            value = float(value)
        data[column.key] = value
    return data
