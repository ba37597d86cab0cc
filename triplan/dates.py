from datetime import date, datetime, timedelta
from typing import Any

DAY_ID_PREFIX = "day-"


class InvalidDropTarget(ValueError):
    pass


def to_day(value: Any) -> date:
    """Reduce a date, datetime or ISO string to its calendar day.

    Time-of-day (and any offset) is ignored: "2025-03-03T23:30:00Z" is 2025-03-03.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        raise ValueError("empty date value")
    return date.fromisoformat(text[:10])


def week_start(value: Any) -> date:
    day = to_day(value)
    return day - timedelta(days=day.weekday())


def week_days(start: Any) -> list[date]:
    monday = week_start(start)
    return [monday + timedelta(days=i) for i in range(7)]


def in_range(value: Any, start: date, end: date) -> bool:
    return start <= to_day(value) <= end


def day_id(day: Any) -> str:
    return f"{DAY_ID_PREFIX}{to_day(day).isoformat()}"


def is_day_id(target: str) -> bool:
    return target.startswith(DAY_ID_PREFIX)


def parse_day_id(target: str) -> date:
    if not is_day_id(target):
        raise InvalidDropTarget(f"Not a day identifier: {target!r}")
    raw = target[len(DAY_ID_PREFIX):]
    try:
        return date.fromisoformat(raw)
    except ValueError as err:
        raise InvalidDropTarget(f"Unparseable date in day identifier: {target!r}") from err
