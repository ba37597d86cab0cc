from collections import defaultdict

from tests.conftest import make_workout
from triplan.reorder import apply_reorder_plan, compute_reorder_plan, group_by_day

MON = "2025-03-03"
TUE = "2025-03-04"


def monday_four():
    return [make_workout(wid, MON, order=i) for i, wid in enumerate("ABCD")]


def orders(plan):
    return {u["id"]: u["order"] for u in plan}


def test_same_day_move_down_inserts_before_target():
    plan = compute_reorder_plan("A", "C", monday_four())
    assert orders(plan) == {"B": 0, "A": 1, "C": 2, "D": 3}
    assert all("date" not in u for u in plan)


def test_same_day_move_up():
    plan = compute_reorder_plan("D", "B", monday_four())
    assert orders(plan) == {"A": 0, "D": 1, "B": 2, "C": 3}


def test_drop_on_own_day_surface_is_noop():
    assert compute_reorder_plan("B", f"day-{MON}", monday_four()) == []


def test_drop_on_itself_is_noop():
    assert compute_reorder_plan("B", "B", monday_four()) == []


def test_drop_that_keeps_same_index_is_noop():
    assert compute_reorder_plan("A", "B", monday_four()) == []


def test_cross_day_move_onto_workout():
    workouts = [
        make_workout("A", MON, 0),
        make_workout("B", MON, 1),
        make_workout("C", MON, 2),
        make_workout("X", TUE, 0),
        make_workout("Y", TUE, 1),
    ]
    plan = compute_reorder_plan("B", "Y", workouts)

    assert orders(plan) == {"A": 0, "C": 1, "X": 0, "B": 1, "Y": 2}
    dated = [u for u in plan if "date" in u]
    assert dated == [{"id": "B", "order": 1, "date": TUE}]


def test_cross_day_move_onto_day_surface_appends():
    workouts = [make_workout("A", MON, 0), make_workout("X", TUE, 0), make_workout("Y", TUE, 1)]
    plan = compute_reorder_plan("A", f"day-{TUE}", workouts)
    assert plan == [
        {"id": "X", "order": 0},
        {"id": "Y", "order": 1},
        {"id": "A", "order": 2, "date": TUE},
    ]


def test_move_to_empty_day():
    workouts = [make_workout("A", MON, 0), make_workout("B", MON, 1)]
    plan = compute_reorder_plan("A", "day-2025-03-09", workouts)
    assert plan == [{"id": "B", "order": 0}, {"id": "A", "order": 0, "date": "2025-03-09"}]


def test_unknown_dragged_workout_is_silent_noop():
    assert compute_reorder_plan("ghost", "A", monday_four()) == []


def test_drop_outside_any_target_aborts():
    assert compute_reorder_plan("A", None, monday_four()) == []
    assert compute_reorder_plan("A", "", monday_four()) == []


def test_malformed_day_identifier_aborts():
    assert compute_reorder_plan("A", "day-2025-13-45", monday_four()) == []
    assert compute_reorder_plan("A", "day-tomorrow", monday_four()) == []


def test_missing_target_workout_falls_back_to_end_of_source_day():
    plan = compute_reorder_plan("A", "vanished", monday_four())
    assert orders(plan) == {"B": 0, "C": 1, "D": 2, "A": 3}


def test_gapped_orders_are_repacked():
    workouts = [make_workout("A", MON, 0), make_workout("B", MON, 5), make_workout("C", MON, 9)]
    plan = compute_reorder_plan("C", "B", workouts)
    assert orders(plan) == {"A": 0, "C": 1, "B": 2}


def test_every_gesture_leaves_dense_orders():
    workouts = [
        make_workout("A", MON, 0),
        make_workout("B", MON, 1),
        make_workout("C", MON, 2),
        make_workout("X", TUE, 0),
        make_workout("Y", TUE, 1),
    ]
    targets = [w["id"] for w in workouts] + [f"day-{MON}", f"day-{TUE}", "day-2025-03-05"]
    for dragged in [w["id"] for w in workouts]:
        for target in targets:
            result = apply_reorder_plan(workouts, compute_reorder_plan(dragged, target, workouts))
            for rows in group_by_day(result).values():
                assert sorted(r["order"] for r in rows) == list(range(len(rows)))

            dates_before = {w["id"]: w["date"] for w in workouts}
            changed = [r["id"] for r in result if r["date"] != dates_before[r["id"]]]
            assert changed in ([], [dragged])


def test_apply_plan_does_not_mutate_input():
    workouts = monday_four()
    apply_reorder_plan(workouts, compute_reorder_plan("A", "D", workouts))
    assert [w["order"] for w in workouts] == [0, 1, 2, 3]


def test_same_day_sequence_follows_plan():
    result = apply_reorder_plan(monday_four(), compute_reorder_plan("A", "C", monday_four()))
    by_order = defaultdict(list)
    for row in result:
        by_order[row["date"]].append(row)
    assert [r["id"] for r in sorted(by_order[MON], key=lambda r: r["order"])] == ["B", "A", "C", "D"]
