from datetime import timedelta
from typing import Any

from triplan.dates import to_day, week_start

COPIED_FIELDS = ("sport_type", "title", "description", "duration_min", "label_id")


class CopyWeekError(ValueError):
    pass


def compute_copy_plan(
    source_week_start: Any,
    target_week_start: Any,
    workouts: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Build new-workout specs that repeat a week's schedule in another week.

    Each copy lands on the same weekday of the target week and keeps its
    original ``order`` as-is, even if the target day already has workouts.
    """
    source = week_start(source_week_start)
    target = week_start(target_week_start)
    source_end = source + timedelta(days=6)

    in_week = [w for w in workouts if source <= to_day(w.get("date")) <= source_end]
    if not in_week:
        raise CopyWeekError("No workouts to copy in the source week.")

    in_week.sort(key=lambda w: (to_day(w.get("date")), int(w.get("order", 0))))
    plan = []
    for workout in in_week:
        offset = to_day(workout.get("date")).weekday()
        spec = {field: workout.get(field) for field in COPIED_FIELDS}
        spec["date"] = (target + timedelta(days=offset)).isoformat()
        spec["order"] = int(workout.get("order", 0))
        spec["source_id"] = workout.get("id")
        plan.append(spec)
    return plan
