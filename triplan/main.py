from datetime import date
from typing import Any

from fastapi import Body, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from triplan import storage
from triplan.config import DEFAULT_OWNER_ID, HOST, PORT
from triplan.copy_week import CopyWeekError, compute_copy_plan
from triplan.dates import to_day, week_start
from triplan.logger import setup_logger
from triplan.reorder import compute_reorder_plan
from triplan.rollup import compute_weekly_rollup, weekly_summary_view
from triplan.storage import NotFoundError, StoreError

logger = setup_logger(__name__)

app = FastAPI(title="Tri Planner")


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def owner_of(x_owner_id: str | None) -> str:
    return (x_owner_id or "").strip() or DEFAULT_OWNER_ID


def query_date(value: str | None, name: str) -> date | None:
    if value is None or not value.strip():
        return None
    try:
        return to_day(value)
    except ValueError as err:
        raise HTTPException(status_code=400, detail=f"Invalid {name} date, use YYYY-MM-DD.") from err


def apply_batch(owner_id: str, updates: list[dict[str, Any]]) -> list[dict[str, Any]]:
    if updates:
        try:
            storage.batch_update_workouts(owner_id, updates)
        except StoreError as err:
            logger.error(f"Rejected workout batch for owner {owner_id}: {err}")
            raise HTTPException(status_code=400, detail="Failed to reorder workouts.") from err
    return storage.list_workouts(owner_id)


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


@app.get("/workouts")
def get_workouts(
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    x_owner_id: str | None = Header(default=None),
) -> list[dict[str, Any]]:
    return storage.list_workouts(owner_of(x_owner_id), query_date(start, "start"), query_date(end, "end"))


@app.post("/workouts", status_code=201)
def create_workout(payload: dict[str, Any] = Body(...), x_owner_id: str | None = Header(default=None)) -> dict[str, Any]:
    return storage.create_workout(owner_of(x_owner_id), {k: v for k, v in payload.items() if k != "order"})


@app.patch("/workouts")
def batch_update_workouts(payload: dict[str, Any] = Body(...), x_owner_id: str | None = Header(default=None)) -> dict[str, Any]:
    updates = payload.get("workouts")
    if not isinstance(updates, list):
        raise HTTPException(status_code=400, detail="Invalid data format: workouts must be a list.")
    return {"ok": True, "workouts": apply_batch(owner_of(x_owner_id), updates)}


@app.post("/workouts/reorder")
def reorder_workouts(payload: dict[str, Any] = Body(...), x_owner_id: str | None = Header(default=None)) -> dict[str, Any]:
    owner_id = owner_of(x_owner_id)
    dragged_id = str(payload.get("dragged_id", "") or "").strip()
    if not dragged_id:
        raise HTTPException(status_code=400, detail="dragged_id is required.")
    drop_target = payload.get("drop_target")
    drop_target = str(drop_target).strip() if drop_target is not None else None

    plan = compute_reorder_plan(dragged_id, drop_target, storage.list_workouts(owner_id))
    return {"updates": plan, "workouts": apply_batch(owner_id, plan)}


@app.post("/workouts/copy-week", status_code=201)
def copy_week(payload: dict[str, Any] = Body(...), x_owner_id: str | None = Header(default=None)) -> dict[str, Any]:
    owner_id = owner_of(x_owner_id)
    source_raw = payload.get("source_week_start")
    target_raw = payload.get("target_week_start")
    if not source_raw or not target_raw:
        raise HTTPException(status_code=400, detail="Source and target weeks are required.")
    source = query_date(str(source_raw), "source_week_start")
    target = query_date(str(target_raw), "target_week_start")

    try:
        plan = compute_copy_plan(source, target, storage.list_workouts(owner_id))
    except CopyWeekError as err:
        raise HTTPException(status_code=404, detail=str(err)) from err

    created: list[dict[str, Any]] = []
    failed = 0
    for spec in plan:
        try:
            created.append(storage.create_workout(owner_id, spec))
        except StoreError as err:
            failed += 1
            logger.error(f"Could not copy workout {spec.get('source_id')} to {spec['date']}: {err}")

    if failed:
        logger.warning(f"Copy week {source} -> {target} finished with {failed} failures")
    return {
        "copied": len(created),
        "failed": failed,
        "message": f"Copied {len(created)} workouts to the target week",
        "workouts": created,
    }


@app.get("/workouts/{workout_id}")
def get_workout(workout_id: str, x_owner_id: str | None = Header(default=None)) -> dict[str, Any]:
    return storage.get_workout(owner_of(x_owner_id), workout_id)


@app.patch("/workouts/{workout_id}")
def update_workout(workout_id: str, payload: dict[str, Any] = Body(...), x_owner_id: str | None = Header(default=None)) -> dict[str, Any]:
    return storage.update_workout(owner_of(x_owner_id), workout_id, payload)


@app.delete("/workouts/{workout_id}")
def delete_workout(workout_id: str, x_owner_id: str | None = Header(default=None)) -> dict[str, bool]:
    storage.delete_workout(owner_of(x_owner_id), workout_id)
    return {"ok": True}


@app.post("/workouts/{workout_id}/move")
def move_workout(workout_id: str, payload: dict[str, Any] = Body(...), x_owner_id: str | None = Header(default=None)) -> dict[str, Any]:
    owner_id = owner_of(x_owner_id)
    update: dict[str, Any] = {"id": workout_id, "order": payload.get("order")}
    if payload.get("date"):
        update["date"] = payload["date"]
    return {"ok": True, "workouts": apply_batch(owner_id, [update])}


@app.get("/weekly-summary")
def weekly_summary(week_start_param: str | None = Query(default=None, alias="week_start"), x_owner_id: str | None = Header(default=None)) -> dict[str, Any]:
    owner_id = owner_of(x_owner_id)
    start = week_start(query_date(week_start_param, "week_start") or date.today())
    rollup = compute_weekly_rollup(start, storage.list_workouts(owner_id), storage.list_labels(owner_id))
    return weekly_summary_view(rollup)


@app.get("/labels")
def get_labels(x_owner_id: str | None = Header(default=None)) -> list[dict[str, Any]]:
    return storage.list_labels(owner_of(x_owner_id))


@app.post("/labels", status_code=201)
def create_label(payload: dict[str, Any] = Body(...), x_owner_id: str | None = Header(default=None)) -> dict[str, Any]:
    return storage.create_label(owner_of(x_owner_id), payload)


@app.post("/labels/defaults")
def create_default_labels(x_owner_id: str | None = Header(default=None)) -> list[dict[str, Any]]:
    return storage.create_default_labels(owner_of(x_owner_id))


@app.post("/labels/reset")
def reset_labels(x_owner_id: str | None = Header(default=None)) -> list[dict[str, Any]]:
    return storage.reset_labels(owner_of(x_owner_id))


@app.patch("/labels/{label_id}")
def update_label(label_id: str, payload: dict[str, Any] = Body(...), x_owner_id: str | None = Header(default=None)) -> dict[str, Any]:
    return storage.update_label(owner_of(x_owner_id), label_id, payload)


@app.delete("/labels/{label_id}")
def delete_label(label_id: str, x_owner_id: str | None = Header(default=None)) -> dict[str, bool]:
    storage.delete_label(owner_of(x_owner_id), label_id)
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("triplan.main:app", host=HOST, port=PORT)
