from datetime import date, datetime

import pytest

from triplan.dates import InvalidDropTarget, day_id, parse_day_id, to_day, week_days, week_start


def test_week_starts_on_monday():
    assert week_start("2025-03-09") == date(2025, 3, 3)
    assert week_start(date(2025, 3, 3)) == date(2025, 3, 3)
    assert week_days("2025-03-05")[0] == date(2025, 3, 3)
    assert len(week_days("2025-03-05")) == 7


def test_to_day_drops_time_of_day():
    assert to_day("2025-03-03T23:59:59.999Z") == date(2025, 3, 3)
    assert to_day(datetime(2025, 3, 3, 18, 30)) == date(2025, 3, 3)
    with pytest.raises(ValueError):
        to_day("")


def test_day_identifiers():
    assert day_id("2025-03-03") == "day-2025-03-03"
    assert parse_day_id("day-2025-03-03") == date(2025, 3, 3)
    with pytest.raises(InvalidDropTarget):
        parse_day_id("day-2025-02-30")
    with pytest.raises(InvalidDropTarget):
        parse_day_id("workout-1")
