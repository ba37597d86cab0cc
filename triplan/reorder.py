"""Drag-and-drop reorder planning.

A gesture picks up one workout and drops it either on a day surface
(``day-YYYY-MM-DD``) or on another workout (its id). The plan is a list of
``{"id", "order"}`` updates, with ``"date"`` present only on the moved workout
when it changes day. Planning is pure: nothing here reads or writes the store.
"""

from datetime import date
from typing import Any

from triplan.dates import InvalidDropTarget, is_day_id, parse_day_id, to_day
from triplan.logger import setup_logger

logger = setup_logger(__name__)


def find_workout(workouts: list[dict[str, Any]], workout_id: str) -> dict[str, Any] | None:
    return next((w for w in workouts if w.get("id") == workout_id), None)


def day_workouts(workouts: list[dict[str, Any]], day: date) -> list[dict[str, Any]]:
    rows = [w for w in workouts if to_day(w.get("date")) == day]
    return sorted(rows, key=lambda w: int(w.get("order", 0)))


def group_by_day(workouts: list[dict[str, Any]]) -> dict[date, list[dict[str, Any]]]:
    days = sorted({to_day(w.get("date")) for w in workouts})
    return {day: day_workouts(workouts, day) for day in days}


def move_before(items: list[dict[str, Any]], moved_id: str, target_id: str | None) -> list[dict[str, Any]]:
    moved = find_workout(items, moved_id)
    rest = [w for w in items if w.get("id") != moved_id]
    if moved is None:
        return rest
    idx = next((i for i, w in enumerate(rest) if w.get("id") == target_id), len(rest))
    return rest[:idx] + [moved] + rest[idx:]


def order_updates(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [{"id": w["id"], "order": i} for i, w in enumerate(items)]


def already_packed(before: list[dict[str, Any]], after: list[dict[str, Any]]) -> bool:
    same_sequence = [w.get("id") for w in before] == [w.get("id") for w in after]
    dense = all(int(w.get("order", -1)) == i for i, w in enumerate(before))
    return same_sequence and dense


def compute_reorder_plan(
    dragged_id: str,
    drop_target: str | None,
    workouts: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    if not drop_target:
        logger.info(f"Workout {dragged_id} dropped outside any target, nothing to do")
        return []

    dragged = find_workout(workouts, dragged_id)
    if dragged is None:
        logger.warning(f"Dragged workout {dragged_id} is not in the current collection, ignoring drop")
        return []

    source_day = to_day(dragged.get("date"))
    source_list = day_workouts(workouts, source_day)

    target_id: str | None = None
    on_day_surface = is_day_id(drop_target)
    if on_day_surface:
        try:
            destination_day = parse_day_id(drop_target)
        except InvalidDropTarget as err:
            logger.error(f"Aborting drop of workout {dragged_id}: {err}")
            return []
    else:
        target = find_workout(workouts, drop_target)
        if target is None:
            logger.warning(f"Drop target {drop_target} not found, moving workout {dragged_id} to the end of its day")
            destination_day = source_day
        else:
            target_id = target["id"]
            destination_day = to_day(target.get("date"))

    if destination_day == source_day:
        if on_day_surface or target_id == dragged_id:
            return []
        reordered = move_before(source_list, dragged_id, target_id)
        if already_packed(source_list, reordered):
            return []
        return order_updates(reordered)

    updated_source = [w for w in source_list if w.get("id") != dragged_id]
    destination_list = day_workouts(workouts, destination_day)
    moved = {**dragged, "date": destination_day.isoformat()}
    idx = next((i for i, w in enumerate(destination_list) if w.get("id") == target_id), len(destination_list))
    updated_destination = destination_list[:idx] + [moved] + destination_list[idx:]

    plan = order_updates(updated_source)
    for update in order_updates(updated_destination):
        if update["id"] == dragged_id:
            update["date"] = destination_day.isoformat()
        plan.append(update)
    return plan


def apply_reorder_plan(workouts: list[dict[str, Any]], plan: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Return a copy of ``workouts`` with ``plan`` applied, leaving the input untouched."""
    by_id = {u["id"]: u for u in plan}
    result = []
    for w in workouts:
        update = by_id.get(w.get("id"))
        if update is None:
            result.append(dict(w))
            continue
        row = {**w, "order": update["order"]}
        if update.get("date"):
            row["date"] = update["date"]
        result.append(row)
    return result
