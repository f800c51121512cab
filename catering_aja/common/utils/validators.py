from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union


def to_decimal(value: Union[str, int, float, Decimal, None], field: str = "value") -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so floats don't drag binary noise into the decimal
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"{field} must be a decimal number") from exc


def to_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Calendar day of a date, datetime or ISO string (time part ignored)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    return date.fromisoformat(text[:10])
