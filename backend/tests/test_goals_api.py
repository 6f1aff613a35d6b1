from __future__ import annotations

from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_dispatcher, get_model_client
from app.core.errors import ModelCallError
from app.db.deps import get_db, get_session_factory
from app.main import app
from conftest import WEEKDAYS_MWF, CapturingDispatcher, FakeModelClient, overview_response, stages_response

TASK_PATTERNS = {
    "task_patterns": [
        {
            "pattern_name": "Weekly loop",
            "weeks_duration": 1,
            "weekly_tasks": [
                {"title": "Read a chapter", "type": "study", "estimated_minutes": 30},
                {"title": "Solve exercises", "type": "exercise"},
            ],
        }
    ]
}


@pytest.fixture()
def client(session_factory):
    model_client = FakeModelClient()
    dispatcher = CapturingDispatcher()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_model_client] = lambda: model_client
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    with TestClient(app) as test_client:
        yield test_client, model_client, dispatcher
    app.dependency_overrides.clear()


def _goal_payload(user_id: UUID, **overrides):
    payload = {
        "user_id": str(user_id),
        "title": "Learn Spanish",
        "current_level": "beginner",
        "daily_time_commitment": 45,
        "start_date": "2024-01-15",
        "weekly_schedule": WEEKDAYS_MWF,
    }
    payload.update(overrides)
    return payload


def test_template_goal_returns_completed_roadmap(client):
    test_client, model_client, dispatcher = client
    user_id = uuid4()

    resp = test_client.post("/goals", json=_goal_payload(user_id), headers={"X-Request-Id": "req-goal"})

    assert resp.status_code == 201
    body = resp.json()
    assert body["request_id"] == "req-goal"
    assert body["goal"]["title"] == "Learn Spanish"
    roadmap = body["roadmap"]
    assert roadmap["generation_status"] == "completed"
    assert roadmap["model_identifier"] == "template:learn-spanish"
    assert len(roadmap["phases"]) == 6
    assert roadmap["phases"][0]["start_date"] == "2024-01-15"
    assert roadmap["phases"][0]["end_date"] == "2024-01-28"
    assert roadmap["phases"][0]["has_tasks"] is False
    assert model_client.calls == []
    assert dispatcher.jobs == []


def test_model_goal_is_polled_until_completed(client):
    test_client, model_client, dispatcher = client
    model_client.responses.extend([overview_response(3), stages_response([2, 2, 2])])
    user_id = uuid4()

    resp = test_client.post("/goals", json=_goal_payload(user_id, title="Master competitive chess openings"))

    assert resp.status_code == 201
    goal_id = resp.json()["goal"]["id"]
    assert resp.json()["roadmap"]["generation_status"] == "generating_phases"
    assert resp.json()["roadmap"]["phases"] == []

    dispatcher.run_all()

    poll = test_client.get(f"/goals/{goal_id}/roadmap", params={"user_id": str(user_id)})
    assert poll.status_code == 200
    roadmap = poll.json()["roadmap"]
    assert roadmap["generation_status"] == "completed"
    assert [phase["phase_id"] for phase in roadmap["phases"]] == ["stage-1", "stage-2", "stage-3"]

    detail = test_client.get(f"/goals/{goal_id}", params={"user_id": str(user_id)})
    assert detail.status_code == 200
    assert detail.json()["roadmap"]["phase_count"] == 3


def test_overview_failure_returns_bad_gateway(client):
    test_client, model_client, _ = client
    model_client.responses.append(ModelCallError("no key", retryable=False))
    user_id = uuid4()

    resp = test_client.post("/goals", json=_goal_payload(user_id, title="Master competitive chess openings"))

    assert resp.status_code == 502
    assert resp.json()["detail"] == "Generation model unavailable"


def test_failed_background_generation_is_visible_when_polling(client):
    test_client, model_client, dispatcher = client
    model_client.responses.extend([overview_response(3), '{"phases": [{"title": "only one"}]}'])
    user_id = uuid4()

    resp = test_client.post("/goals", json=_goal_payload(user_id, title="Master competitive chess openings"))
    goal_id = resp.json()["goal"]["id"]
    dispatcher.run_all()

    roadmap = test_client.get(f"/goals/{goal_id}/roadmap", params={"user_id": str(user_id)}).json()["roadmap"]
    assert roadmap["generation_status"] == "failed"
    assert roadmap["error_message"].startswith("IncompleteResponseError")


def test_invalid_goal_payloads_are_rejected(client):
    test_client, _, _ = client
    user_id = uuid4()

    assert test_client.post("/goals", json=_goal_payload(user_id, title="  a ")).status_code == 422
    assert test_client.post("/goals", json=_goal_payload(user_id, daily_time_commitment=2)).status_code == 422
    assert (
        test_client.post("/goals", json=_goal_payload(user_id, target_date="2024-01-01")).status_code == 422
    )


def test_goal_of_another_user_is_not_found(client):
    test_client, _, _ = client
    owner = uuid4()
    goal_id = test_client.post("/goals", json=_goal_payload(owner)).json()["goal"]["id"]

    resp = test_client.get(f"/goals/{goal_id}/roadmap", params={"user_id": str(uuid4())})

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Goal not found"


def test_phase_tasks_generate_list_and_complete(client):
    test_client, model_client, _ = client
    user_id = uuid4()
    roadmap = test_client.post("/goals", json=_goal_payload(user_id)).json()["roadmap"]
    phase = roadmap["phases"][0]
    model_client.responses.append(TASK_PATTERNS)

    generated = test_client.post(f"/phases/{phase['id']}/tasks", json={"user_id": str(user_id)})

    assert generated.status_code == 200
    body = generated.json()
    assert body["phase_key"] == "phase-1"
    assert body["task_count"] == 6
    assert [task["scheduled_date"] for task in body["tasks"]] == [
        "2024-01-15",
        "2024-01-17",
        "2024-01-19",
        "2024-01-22",
        "2024-01-24",
        "2024-01-26",
    ]
    assert [task["priority"] for task in body["tasks"][:2]] == [5, 3]

    again = test_client.post(f"/phases/{phase['id']}/tasks", json={"user_id": str(user_id)})
    assert [task["id"] for task in again.json()["tasks"]] == [task["id"] for task in body["tasks"]]

    listed = test_client.get(f"/phases/{phase['id']}/tasks", params={"user_id": str(user_id)})
    assert listed.json()["task_count"] == 6

    goal_id = roadmap["goal_id"]
    polled = test_client.get(f"/goals/{goal_id}/roadmap", params={"user_id": str(user_id)}).json()["roadmap"]
    assert polled["phases"][0]["task_count"] == 6
    assert polled["phases"][0]["has_tasks"] is True
    assert polled["phases"][1]["has_tasks"] is False

    task_id = body["tasks"][0]["id"]
    done = test_client.patch(f"/tasks/{task_id}", json={"user_id": str(user_id), "completed": True})
    assert done.status_code == 200
    assert done.json()["completed"] is True
    assert done.json()["completed_at"] is not None

    foreign = test_client.patch(f"/tasks/{task_id}", json={"user_id": str(uuid4()), "completed": False})
    assert foreign.status_code == 404
    assert foreign.json()["detail"] == "Task not found"


def test_phase_task_model_failure_returns_bad_gateway(client):
    test_client, model_client, _ = client
    user_id = uuid4()
    phase = test_client.post("/goals", json=_goal_payload(user_id)).json()["roadmap"]["phases"][0]
    model_client.responses.append("not json at all")

    resp = test_client.post(f"/phases/{phase['id']}/tasks", json={"user_id": str(user_id)})

    assert resp.status_code == 502
    assert resp.json()["detail"] == "Generation model returned unreadable output"


def test_unknown_phase_and_task_are_not_found(client):
    test_client, _, _ = client
    user_id = str(uuid4())

    assert test_client.post(f"/phases/{uuid4()}/tasks", json={"user_id": user_id}).status_code == 404
    assert test_client.get(f"/phases/{uuid4()}/tasks", params={"user_id": user_id}).status_code == 404
    assert (
        test_client.patch(f"/tasks/{uuid4()}", json={"user_id": user_id, "completed": True}).status_code == 404
    )


def test_regenerate_conflicts_while_generating(client):
    test_client, model_client, dispatcher = client
    model_client.responses.append(overview_response(3))
    user_id = uuid4()
    goal_id = test_client.post(
        "/goals", json=_goal_payload(user_id, title="Master competitive chess openings")
    ).json()["goal"]["id"]

    resp = test_client.post(f"/goals/{goal_id}/roadmap/regenerate", json={"user_id": str(user_id)})

    assert resp.status_code == 409
    assert resp.json()["detail"] == "Roadmap generation in progress"
    assert len(dispatcher.jobs) == 1


def test_regenerate_replaces_completed_roadmap(client):
    test_client, _, _ = client
    user_id = uuid4()
    created = test_client.post("/goals", json=_goal_payload(user_id)).json()

    resp = test_client.post(
        f"/goals/{created['goal']['id']}/roadmap/regenerate",
        json={"user_id": str(user_id)},
    )

    assert resp.status_code == 200
    roadmap = resp.json()["roadmap"]
    assert roadmap["id"] != created["roadmap"]["id"]
    assert roadmap["generation_status"] == "completed"
