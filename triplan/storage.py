import json
import re
import threading
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

from triplan.config import DATA_DIR, DEFAULT_LABELS, SPORT_TYPES
from triplan.dates import in_range, to_day
from triplan.logger import setup_logger

logger = setup_logger(__name__)

WORKOUTS_FILE = DATA_DIR / "workouts.json"
LABELS_FILE = DATA_DIR / "labels.json"
# Re-entrant so a read-modify-write can hold it across load and save.
FILE_LOCK = threading.RLock()

HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class StoreError(Exception):
    pass


class NotFoundError(StoreError):
    pass


def read_json_file(path: Path, default: Any) -> Any:
    with FILE_LOCK:
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text())
        except json.JSONDecodeError as err:
            logger.error(f"Unreadable store file {path}: {err}")
            raise StoreError(f"Store file {path.name} is unreadable.") from err


def write_json_file(path: Path, payload: Any) -> None:
    with FILE_LOCK:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, indent=2))
        tmp.replace(path)


def now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def load_workouts() -> list[dict[str, Any]]:
    raw = read_json_file(WORKOUTS_FILE, [])
    if isinstance(raw, list):
        return raw
    return []


def save_workouts(items: list[dict[str, Any]]) -> None:
    write_json_file(WORKOUTS_FILE, items)


def load_labels() -> list[dict[str, Any]]:
    raw = read_json_file(LABELS_FILE, [])
    if isinstance(raw, list):
        return raw
    return []


def save_labels(items: list[dict[str, Any]]) -> None:
    write_json_file(LABELS_FILE, items)


def owned_index(items: list[dict[str, Any]], owner_id: str, item_id: str) -> int:
    return next(
        (i for i, row in enumerate(items) if row.get("id") == item_id and row.get("owner_id") == owner_id),
        -1,
    )


def parse_sport_type(value: Any) -> str:
    raw = str(value or "").strip().lower()
    sport = next((s for s in SPORT_TYPES if s.lower() == raw), None)
    if sport is None:
        raise StoreError(f"sport_type must be one of {', '.join(SPORT_TYPES)}.")
    return sport


def parse_date(value: Any) -> date:
    try:
        return to_day(value)
    except (TypeError, ValueError) as err:
        raise StoreError("Invalid date format, use YYYY-MM-DD.") from err


def parse_order(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise StoreError("order must be a non-negative integer.")
    return value


def normalize_workout(payload: dict[str, Any], owner_id: str) -> dict[str, Any]:
    sport_type = parse_sport_type(payload.get("sport_type"))

    if not str(payload.get("date", "") or "").strip():
        raise StoreError("date is required (YYYY-MM-DD).")
    day = parse_date(payload.get("date"))

    try:
        duration = round(float(payload.get("duration_min", 0) or 0))
    except (TypeError, ValueError, OverflowError) as err:
        raise StoreError("duration_min must be a finite number.") from err

    title = str(payload.get("title", "") or "").strip() or sport_type
    label_id = str(payload.get("label_id") or "").strip() or None
    if label_id and get_label_or_none(owner_id, label_id) is None:
        raise StoreError("label_id does not reference one of your labels.")

    item: dict[str, Any] = {
        "owner_id": owner_id,
        "sport_type": sport_type,
        "title": title,
        "description": str(payload.get("description", "") or "").strip(),
        "duration_min": max(0, duration),
        "date": day.isoformat(),
        "label_id": label_id,
    }
    if payload.get("order") is not None:
        item["order"] = parse_order(payload.get("order"))
    return item


def next_order_for_day(items: list[dict[str, Any]], owner_id: str, day: str) -> int:
    orders = [int(row.get("order", 0)) for row in items if row.get("owner_id") == owner_id and row.get("date") == day]
    return max(orders) + 1 if orders else 0


def sorted_workouts(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return sorted(items, key=lambda x: (str(x.get("date", "")), int(x.get("order", 0)), str(x.get("created_at", ""))))


def list_workouts(owner_id: str, start: date | None = None, end: date | None = None) -> list[dict[str, Any]]:
    rows = [row for row in load_workouts() if row.get("owner_id") == owner_id]
    if start is not None or end is not None:
        lo = start or date.min
        hi = end or date.max
        rows = [row for row in rows if in_range(row.get("date"), lo, hi)]
    return sorted_workouts(rows)


def get_workout(owner_id: str, workout_id: str) -> dict[str, Any]:
    items = load_workouts()
    idx = owned_index(items, owner_id, workout_id)
    if idx < 0:
        raise NotFoundError("Workout not found.")
    return items[idx]


def create_workout(owner_id: str, payload: dict[str, Any]) -> dict[str, Any]:
    item = normalize_workout(payload, owner_id)
    with FILE_LOCK:
        items = load_workouts()
        if "order" not in item:
            item["order"] = next_order_for_day(items, owner_id, item["date"])
        stamp = now_iso()
        item = {"id": str(uuid4()), **item, "created_at": stamp, "updated_at": stamp}
        items.append(item)
        save_workouts(items)
    return item


def update_workout(owner_id: str, workout_id: str, payload: dict[str, Any]) -> dict[str, Any]:
    with FILE_LOCK:
        items = load_workouts()
        idx = owned_index(items, owner_id, workout_id)
        if idx < 0:
            raise NotFoundError("Workout not found.")

        existing = items[idx]
        merged = {**existing, **payload}
        normalized = normalize_workout(merged, owner_id)
        updated = {
            **normalized,
            "id": existing["id"],
            "order": normalized.get("order", existing.get("order", 0)),
            "created_at": existing.get("created_at"),
            "updated_at": now_iso(),
        }
        items[idx] = updated
        save_workouts(items)
    return updated


def delete_workout(owner_id: str, workout_id: str) -> bool:
    with FILE_LOCK:
        items = load_workouts()
        kept = [row for row in items if not (row.get("id") == workout_id and row.get("owner_id") == owner_id)]
        if len(kept) == len(items):
            raise NotFoundError("Workout not found.")
        save_workouts(kept)
    return True


def batch_update_workouts(owner_id: str, updates: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Apply ``{id, order, date?}`` updates as one write, or none of them.

    Every entry is validated against the current file before anything is
    touched; a single bad entry rejects the whole batch.
    """
    if not isinstance(updates, list):
        raise StoreError("workouts must be a list.")

    with FILE_LOCK:
        items = load_workouts()
        staged: dict[int, dict[str, Any]] = {}
        for update in updates:
            if not isinstance(update, dict):
                raise StoreError("Each update must be an object.")
            workout_id = str(update.get("id", "") or "")
            idx = owned_index(items, owner_id, workout_id)
            if idx < 0:
                raise NotFoundError(f"Workout {workout_id!r} not found.")
            row = dict(staged.get(idx, items[idx]))
            row["order"] = parse_order(update.get("order"))
            if update.get("date"):
                row["date"] = parse_date(update["date"]).isoformat()
            row["updated_at"] = now_iso()
            staged[idx] = row

        for idx, row in staged.items():
            items[idx] = row
        if staged:
            save_workouts(items)

    logger.info(f"Applied batch of {len(staged)} workout updates for owner {owner_id}")
    return [staged[idx] for idx in sorted(staged)]


def normalize_label(payload: dict[str, Any]) -> dict[str, Any]:
    name = str(payload.get("name", "") or "").strip()
    color = str(payload.get("color", "") or "").strip()
    if not name or not color:
        raise StoreError("Missing required fields: name and color.")
    if not HEX_COLOR.match(color):
        raise StoreError("color must be a hex string like #3B82F6.")
    return {"name": name, "color": color}


def list_labels(owner_id: str) -> list[dict[str, Any]]:
    rows = [row for row in load_labels() if row.get("owner_id") == owner_id]
    return sorted(rows, key=lambda x: str(x.get("name", "")))


def get_label_or_none(owner_id: str, label_id: str) -> dict[str, Any] | None:
    items = load_labels()
    idx = owned_index(items, owner_id, label_id)
    return items[idx] if idx >= 0 else None


def create_label(owner_id: str, payload: dict[str, Any]) -> dict[str, Any]:
    stamp = now_iso()
    label = {"id": str(uuid4()), **normalize_label(payload), "owner_id": owner_id, "created_at": stamp, "updated_at": stamp}
    with FILE_LOCK:
        items = load_labels()
        items.append(label)
        save_labels(items)
    return label


def update_label(owner_id: str, label_id: str, payload: dict[str, Any]) -> dict[str, Any]:
    with FILE_LOCK:
        items = load_labels()
        idx = owned_index(items, owner_id, label_id)
        if idx < 0:
            raise NotFoundError("Label not found.")
        existing = items[idx]
        merged = normalize_label({**existing, **{k: v for k, v in payload.items() if v is not None}})
        updated = {**existing, **merged, "updated_at": now_iso()}
        items[idx] = updated
        save_labels(items)
    return updated


def delete_label(owner_id: str, label_id: str) -> bool:
    with FILE_LOCK:
        items = load_labels()
        kept = [row for row in items if not (row.get("id") == label_id and row.get("owner_id") == owner_id)]
        if len(kept) == len(items):
            raise NotFoundError("Label not found.")
        save_labels(kept)

        # Workouts keep existing, only their reference is cleared.
        workouts = load_workouts()
        cleared = 0
        for row in workouts:
            if row.get("owner_id") == owner_id and row.get("label_id") == label_id:
                row["label_id"] = None
                row["updated_at"] = now_iso()
                cleared += 1
        if cleared:
            save_workouts(workouts)
    logger.info(f"Deleted label {label_id}, cleared it from {cleared} workouts")
    return True


def create_default_labels(owner_id: str) -> list[dict[str, Any]]:
    existing = list_labels(owner_id)
    names = {row.get("name") for row in existing}
    created = [create_label(owner_id, dict(label)) for label in DEFAULT_LABELS if label["name"] not in names]
    return existing + created


def reset_labels(owner_id: str) -> list[dict[str, Any]]:
    for label in list_labels(owner_id):
        delete_label(owner_id, label["id"])
    return [create_label(owner_id, dict(label)) for label in DEFAULT_LABELS]
