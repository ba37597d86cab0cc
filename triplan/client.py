from datetime import date
from typing import Any

import requests

from triplan.config import API_URL, DEFAULT_OWNER_ID, HTTP_TIMEOUT
from triplan.logger import setup_logger

logger = setup_logger(__name__)


class PlannerClientError(Exception):
    def __init__(self, status_code: int, detail: str):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class PlannerClient:
    """HTTP client for the planner service.

    Holds the last authoritative ``workouts`` and ``labels`` lists. Structural
    changes (reorder, drag, move, copy week) wait for the server to confirm
    and then refetch the workout list, so the cached list is never a locally
    computed guess.
    """

    def __init__(
        self,
        base_url: str = API_URL,
        owner_id: str = DEFAULT_OWNER_ID,
        session: Any | None = None,
        timeout: float = HTTP_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.owner_id = owner_id
        self.session = session or requests.Session()
        self.timeout = timeout
        self.workouts: list[dict[str, Any]] = []
        self.labels: list[dict[str, Any]] = []

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        resp = self.session.request(
            method,
            f"{self.base_url}{path}",
            headers={"X-Owner-Id": self.owner_id},
            timeout=self.timeout,
            **kwargs,
        )
        if resp.status_code >= 400:
            try:
                detail = resp.json().get("detail", resp.text)
            except ValueError:
                detail = resp.text
            logger.error(f"{method} {path} failed with {resp.status_code}: {detail}")
            raise PlannerClientError(resp.status_code, str(detail))
        return resp.json()

    def fetch_workouts(self, start: date | None = None, end: date | None = None) -> list[dict[str, Any]]:
        params = {}
        if start is not None:
            params["start"] = start.isoformat()
        if end is not None:
            params["end"] = end.isoformat()
        workouts = self._request("GET", "/workouts", params=params)
        if not params:
            self.workouts = workouts
        return workouts

    def add_workout(self, workout: dict[str, Any]) -> dict[str, Any]:
        created = self._request("POST", "/workouts", json=workout)
        self.workouts.append(created)
        return created

    def update_workout(self, workout_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        updated = self._request("PATCH", f"/workouts/{workout_id}", json=changes)
        self.workouts = [updated if w.get("id") == workout_id else w for w in self.workouts]
        return updated

    def delete_workout(self, workout_id: str) -> bool:
        self._request("DELETE", f"/workouts/{workout_id}")
        self.workouts = [w for w in self.workouts if w.get("id") != workout_id]
        return True

    def reorder(self, updates: list[dict[str, Any]]) -> list[dict[str, Any]]:
        self._request("PATCH", "/workouts", json={"workouts": updates})
        return self.fetch_workouts()

    def move_workout(self, workout_id: str, new_date: date, new_order: int) -> list[dict[str, Any]]:
        self._request("POST", f"/workouts/{workout_id}/move", json={"date": new_date.isoformat(), "order": new_order})
        return self.fetch_workouts()

    def apply_drag(self, dragged_id: str, drop_target: str | None) -> list[dict[str, Any]]:
        result = self._request("POST", "/workouts/reorder", json={"dragged_id": dragged_id, "drop_target": drop_target})
        logger.info(f"Drag of {dragged_id} onto {drop_target} produced {len(result['updates'])} updates")
        return self.fetch_workouts()

    def copy_week(self, source_week_start: date, target_week_start: date) -> int:
        result = self._request(
            "POST",
            "/workouts/copy-week",
            json={"source_week_start": source_week_start.isoformat(), "target_week_start": target_week_start.isoformat()},
        )
        self.fetch_workouts()
        return int(result.get("copied", 0))

    def weekly_summary(self, week_start: date) -> dict[str, Any]:
        return self._request("GET", "/weekly-summary", params={"week_start": week_start.isoformat()})

    def fetch_labels(self) -> list[dict[str, Any]]:
        self.labels = self._request("GET", "/labels")
        return self.labels

    def add_label(self, name: str, color: str) -> dict[str, Any]:
        label = self._request("POST", "/labels", json={"name": name, "color": color})
        self.labels.append(label)
        return label

    def update_label(self, label_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        label = self._request("PATCH", f"/labels/{label_id}", json=changes)
        self.labels = [label if row.get("id") == label_id else row for row in self.labels]
        return label

    def delete_label(self, label_id: str) -> bool:
        self._request("DELETE", f"/labels/{label_id}")
        self.labels = [row for row in self.labels if row.get("id") != label_id]
        # Workouts referencing the label were changed on the server.
        self.fetch_workouts()
        return True

    def create_default_labels(self) -> list[dict[str, Any]]:
        self.labels = self._request("POST", "/labels/defaults")
        return self.labels

    def reset_labels(self) -> list[dict[str, Any]]:
        self.labels = self._request("POST", "/labels/reset")
        return self.labels
