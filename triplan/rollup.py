from datetime import timedelta
from typing import Any, Iterable

from triplan.config import NO_LABEL_KEY, SPORT_BAR_COLORS, UNLABELED_COLOR, UNLABELED_NAME, ZONE_ORDER
from triplan.dates import to_day, week_days, week_start

SPORTS = ("swim", "bike", "run")
ZONE_RANK = {name: rank for rank, name in enumerate(ZONE_ORDER)}


def zone_sort_key(name: str) -> tuple[int, int, str]:
    if name in ZONE_RANK:
        return (0, ZONE_RANK[name], "")
    if name == UNLABELED_NAME:
        return (2, 0, "")
    return (1, 0, name.casefold())


def sort_by_zone(items: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    return sorted(items, key=lambda item: zone_sort_key(str(item.get("name", ""))))


def resolve_label(label_id: str | None, labels_by_id: dict[str, dict[str, Any]]) -> tuple[str, str, str]:
    key = label_id or NO_LABEL_KEY
    label = labels_by_id.get(label_id) if label_id else None
    if label is None:
        return key, UNLABELED_NAME, UNLABELED_COLOR
    return key, str(label.get("name", UNLABELED_NAME)), str(label.get("color", UNLABELED_COLOR))


def empty_sport() -> dict[str, Any]:
    return {"total_hours": 0.0, "by_label": {}}


def compute_weekly_rollup(
    week_start_value: Any,
    workouts: list[dict[str, Any]],
    labels: list[dict[str, Any]],
) -> dict[str, Any]:
    start = week_start(week_start_value)
    end = start + timedelta(days=6)
    labels_by_id = {str(label.get("id")): label for label in labels}
    per_sport = {sport: empty_sport() for sport in SPORTS}

    week_workouts = [w for w in workouts if start <= to_day(w.get("date")) <= end]

    daily_breakdown: list[dict[str, Any]] = []
    for day in week_days(start):
        totals = {"date": day.isoformat(), "swim_hours": 0.0, "bike_hours": 0.0, "run_hours": 0.0, "total_hours": 0.0}
        for workout in week_workouts:
            if to_day(workout.get("date")) != day:
                continue
            sport = str(workout.get("sport_type", "")).lower()
            if sport not in per_sport:
                continue
            hours = float(workout.get("duration_min", 0) or 0) / 60

            totals[f"{sport}_hours"] += hours
            totals["total_hours"] += hours
            per_sport[sport]["total_hours"] += hours

            key, name, color = resolve_label(workout.get("label_id"), labels_by_id)
            by_label = per_sport[sport]["by_label"]
            if key not in by_label:
                by_label[key] = {"id": key, "name": name, "color": color, "hours": 0.0}
            by_label[key]["hours"] += hours
        daily_breakdown.append(totals)

    training_days = sum(1 for day in daily_breakdown if day["total_hours"] > 0)
    return {
        "week_start": start.isoformat(),
        "week_end": end.isoformat(),
        "per_sport": per_sport,
        "total_hours": sum(per_sport[sport]["total_hours"] for sport in SPORTS),
        "daily_breakdown": daily_breakdown,
        "intensity_zones": intensity_distribution(per_sport),
        "training_days": training_days,
        "rest_days": 7 - training_days,
        "max_value": max(per_sport["swim"]["total_hours"], per_sport["bike"]["total_hours"], per_sport["run"]["total_hours"], 1),
    }


def intensity_distribution(per_sport: dict[str, dict[str, Any]]) -> list[dict[str, Any]]:
    # Known zones start as colorless placeholders; the first real label fills the color in.
    distribution: dict[str, dict[str, Any]] = {name: {"name": name, "color": None, "hours": 0.0} for name in ZONE_ORDER}
    distribution[UNLABELED_NAME] = {"name": UNLABELED_NAME, "color": UNLABELED_COLOR, "hours": 0.0}

    for sport in SPORTS:
        for label in per_sport[sport]["by_label"].values():
            zone = distribution.get(label["name"])
            if zone is None:
                zone = distribution[label["name"]] = {"name": label["name"], "color": label["color"], "hours": 0.0}
            elif zone["color"] is None:
                zone["color"] = label["color"]
            zone["hours"] += label["hours"]

    return sort_by_zone(zone for zone in distribution.values() if zone["hours"] > 0)


def sport_segments(sport_data: dict[str, Any], max_value: float, base_color: str) -> list[dict[str, Any]]:
    """Split one sport's progress bar into per-label segments.

    Widths are percentages of the full track: the sport bar covers
    ``total / max_value`` of it, and each label takes its share of that bar.
    """
    total = sport_data["total_hours"]
    if total <= 0:
        return []
    bar_width = total / max_value * 100
    labels = sort_by_zone(sport_data["by_label"].values())
    if not labels:
        return [{"name": None, "color": base_color, "width": bar_width}]
    return [
        {"name": label["name"], "color": label["color"], "width": label["hours"] / total * bar_width}
        for label in labels
    ]


def legend_items(per_sport: dict[str, dict[str, Any]]) -> list[dict[str, str]]:
    seen: dict[str, dict[str, str]] = {}
    for sport in SPORTS:
        for label in per_sport[sport]["by_label"].values():
            if label["id"] not in seen:
                seen[label["id"]] = {"name": label["name"], "color": label["color"]}
    return sort_by_zone(seen.values())


def percent(part: float, whole: float) -> int:
    if whole <= 0:
        return 0
    return round(part / whole * 100)


def format_hours(hours: float) -> str:
    return f"{hours:.1f}"


def format_duration(minutes: int) -> str:
    hours, mins = divmod(int(minutes), 60)
    if hours > 0:
        return f"{hours}h {mins}m" if mins else f"{hours}h"
    return f"{mins}m"


def total_duration(workouts: list[dict[str, Any]]) -> int:
    return sum(int(w.get("duration_min", 0) or 0) for w in workouts)


def weekly_summary_view(rollup: dict[str, Any]) -> dict[str, Any]:
    total = rollup["total_hours"]
    per_sport = rollup["per_sport"]
    return {
        **rollup,
        "segments": {
            sport: sport_segments(per_sport[sport], rollup["max_value"], SPORT_BAR_COLORS[sport]) for sport in SPORTS
        },
        "legend": legend_items(per_sport),
        "balance": {sport: percent(per_sport[sport]["total_hours"], total) for sport in SPORTS} if total > 0 else None,
        "intensity_percentages": [
            {"name": zone["name"], "color": zone["color"], "percent": percent(zone["hours"], total)}
            for zone in rollup["intensity_zones"]
        ],
        "formatted": {
            "total": format_hours(total),
            **{sport: format_hours(per_sport[sport]["total_hours"]) for sport in SPORTS},
        },
    }
