import pytest
from fastapi.testclient import TestClient

from triplan import storage
from triplan.main import app


@pytest.fixture()
def store(tmp_path, monkeypatch):
    monkeypatch.setattr(storage, "WORKOUTS_FILE", tmp_path / "workouts.json")
    monkeypatch.setattr(storage, "LABELS_FILE", tmp_path / "labels.json")
    return tmp_path


@pytest.fixture()
def api(store):
    return TestClient(app)


def make_workout(workout_id, day, order=0, sport="Bike", minutes=60, label_id=None):
    return {
        "id": workout_id,
        "owner_id": "athlete",
        "sport_type": sport,
        "title": workout_id,
        "description": "",
        "duration_min": minutes,
        "date": day,
        "order": order,
        "label_id": label_id,
    }
