from datetime import date

import pytest

from triplan.client import PlannerClient, PlannerClientError


class InProcessSession:
    """Routes the planner client's calls into the in-process app."""

    def __init__(self, api):
        self.api = api
        self.calls = []

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append((method, url))
        return self.api.request(method, url, **kwargs)


@pytest.fixture()
def client(api):
    return PlannerClient(base_url="http://testserver", owner_id="athlete", session=InProcessSession(api))


def test_drag_refetches_authoritative_state(client):
    a = client.add_workout({"sport_type": "Run", "date": "2025-03-03", "duration_min": 30, "title": "A"})
    b = client.add_workout({"sport_type": "Run", "date": "2025-03-03", "duration_min": 30, "title": "B"})

    workouts = client.apply_drag(b["id"], a["id"])

    assert [(w["title"], w["order"]) for w in workouts] == [("B", 0), ("A", 1)]
    assert client.workouts == workouts
    assert client.session.calls[-1] == ("GET", "http://testserver/workouts")


def test_reorder_and_move(client):
    a = client.add_workout({"sport_type": "Bike", "date": "2025-03-03", "duration_min": 60})
    client.reorder([{"id": a["id"], "order": 0, "date": "2025-03-06"}])
    assert client.workouts[0]["date"] == "2025-03-06"

    client.move_workout(a["id"], date(2025, 3, 7), 0)
    assert client.workouts[0]["date"] == "2025-03-07"


def test_copy_week_returns_count(client):
    client.add_workout({"sport_type": "Swim", "date": "2025-03-04", "duration_min": 45})
    assert client.copy_week(date(2025, 3, 3), date(2025, 3, 10)) == 1
    assert {w["date"] for w in client.workouts} == {"2025-03-04", "2025-03-11"}


def test_errors_carry_status_and_detail(client):
    with pytest.raises(PlannerClientError) as excinfo:
        client.copy_week(date(2025, 3, 3), date(2025, 3, 10))
    assert excinfo.value.status_code == 404
    assert "No workouts to copy" in excinfo.value.detail


def test_label_cache_follows_server(client):
    client.create_default_labels()
    assert len(client.labels) == 8

    tempo = next(label for label in client.labels if label["name"] == "Tempo")
    client.update_label(tempo["id"], {"name": "Tempo Intervals"})
    assert "Tempo Intervals" in {label["name"] for label in client.labels}

    client.delete_label(tempo["id"])
    assert len(client.fetch_labels()) == 7
    assert client.weekly_summary(date(2025, 3, 3))["rest_days"] == 7
