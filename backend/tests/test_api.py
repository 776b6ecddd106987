# tests/test_api.py
import json
from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.v1.dependencies import get_clock
from app.core.security import create_access_token
from app.core.exceptions import RateLimitError
from main import create_app, render_app_exception

ROADMAP = {
    "title": "Frontend Basics",
    "description": "HTML, CSS, JS",
    "modules": [
        {"title": "HTML", "tasks": [
            {"title": "Semantic tags", "difficulty": "Easy"},
            {"title": "Forms", "difficulty": "Medium"},
        ]},
        {"title": "JavaScript", "tasks": [
            {"title": "Closures", "difficulty": "Hard"},
        ]},
    ],
}


def auth_headers(user):
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(database, clock):
    app = create_app()
    app.dependency_overrides[get_clock] = lambda: clock
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
async def roadmap(client, user):
    response = await client.post("/api/v1/roadmaps", json=ROADMAP, headers=auth_headers(user))
    assert response.status_code == 201
    return response.json()


def completion_url(roadmap, module_index=0, task_index=0):
    module = roadmap["modules"][module_index]
    task = module["tasks"][task_index]
    return f"/api/v1/roadmaps/{roadmap['id']}/modules/{module['id']}/tasks/{task['id']}/completion"


async def test_root_and_health(client):
    assert (await client.get("/")).status_code == 200

    response = await client.get("/health")
    assert response.json()["status"] == "healthy"


async def test_requests_without_valid_token_are_rejected(client):
    response = await client.get("/api/v1/stats")
    assert response.status_code == 401
    assert response.json()["error"] == "AuthenticationError"
    assert response.headers["www-authenticate"] == "Bearer"

    response = await client.get("/api/v1/stats", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json()["error"] == "AuthenticationError"
    assert response.json()["detail"] == "Could not validate credentials"


async def test_token_of_unknown_user_is_rejected(client):
    token = create_access_token({"sub": "999999"})

    response = await client.get("/api/v1/stats", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"] == "AuthenticationError"


def test_rate_limit_is_rendered_as_rate_limit_error():
    response = render_app_exception(RateLimitError("Too many requests: 30 per 1 minute"))

    assert response.status_code == 429
    body = json.loads(response.body)
    assert body["error"] == "RateLimitError"
    assert body["detail"] == "Too many requests: 30 per 1 minute"
    assert "timestamp" in body


async def test_expired_token_is_rejected(client, user):
    token = create_access_token({"sub": str(user.id)}, expires_delta=timedelta(minutes=-1))

    response = await client.get("/api/v1/stats", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


async def test_toggle_task_completion(client, user, roadmap):
    response = await client.put(
        completion_url(roadmap),
        json={"completed": True, "time_spent_minutes": 25},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["ledger_event"]["completed"] is True
    assert body["ledger_event"]["difficulty"] == "Easy"
    assert body["snapshot"]["total_completed"] == 1
    assert body["snapshot"]["experience_points"] == 10
    assert body["snapshot"]["total_study_time"] == 25
    assert [a["achievement"]["slug"] for a in body["new_achievements"]] == ["first_steps"]
    assert body["achievements_stale"] is False


async def test_toggle_by_task_id(client, user, roadmap):
    task_id = roadmap["modules"][1]["tasks"][0]["id"]

    response = await client.post(
        f"/api/v1/tasks/{task_id}/completion",
        json={"completed": True},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    assert response.json()["snapshot"]["problems_solved"]["hard"] == 1


async def test_toggle_validation_and_lookup_errors(client, user, other_user, roadmap):
    response = await client.put(
        completion_url(roadmap), json={"completed": True, "time_spent_minutes": -5},
        headers=auth_headers(user),
    )
    assert response.status_code == 422

    response = await client.post(
        "/api/v1/tasks/9999/completion", json={"completed": True}, headers=auth_headers(user),
    )
    assert response.status_code == 404
    assert response.json()["error"] == "NotFoundError"

    response = await client.put(
        completion_url(roadmap), json={"completed": True}, headers=auth_headers(other_user),
    )
    assert response.status_code == 403
    assert response.json()["error"] == "AuthorizationError"


async def test_read_models(client, user, roadmap, clock):
    headers = auth_headers(user)
    for task_index in range(2):
        await client.put(completion_url(roadmap, 0, task_index), json={"completed": True}, headers=headers)

    activity = (await client.get("/api/v1/activity", params={"year": clock().year}, headers=headers)).json()
    assert len(activity) == 365
    today = next(day for day in activity if day["date"] == clock().date().isoformat())
    assert today == {"date": clock().date().isoformat(), "tasks_completed": 2, "activity_level": 1}

    stats = (await client.get("/api/v1/stats", headers=headers)).json()
    assert stats["total_completed"] == 2
    assert stats["weekly_progress"] == 2

    streak = (await client.get("/api/v1/streak", headers=headers)).json()
    assert streak["current_streak"] == 1
    assert streak["last_active_date"] == clock().date().isoformat()

    earned = (await client.get("/api/v1/achievements", headers=headers)).json()
    assert [a["achievement"]["slug"] for a in earned] == ["first_steps"]

    catalog = (await client.get("/api/v1/achievements/catalog", headers=headers)).json()
    assert sum(1 for item in catalog if item["earned"]) == 1

    progress = (await client.get(f"/api/v1/roadmaps/{roadmap['id']}/progress", headers=headers)).json()
    assert progress["completed_tasks"] == 2
    assert progress["completed_modules"] == 1


async def test_streak_of_new_user_is_empty(client, user):
    response = await client.get("/api/v1/streak", headers=auth_headers(user))

    assert response.json()["current_streak"] == 0
    assert response.json()["longest_streak"] == 0


async def test_reconcile_and_check_endpoints(client, user, roadmap):
    headers = auth_headers(user)
    await client.put(completion_url(roadmap), json={"completed": True}, headers=headers)

    response = await client.post("/api/v1/stats/reconcile", headers=headers)
    assert response.status_code == 200
    assert response.json()["total_completed"] == 1

    response = await client.post("/api/v1/achievements/check", headers=headers)
    assert response.status_code == 200
    assert response.json() == []


async def test_delete_roadmap(client, user, other_user, roadmap):
    url = f"/api/v1/roadmaps/{roadmap['id']}"

    assert (await client.delete(url, headers=auth_headers(other_user))).status_code == 403
    assert (await client.delete(url, headers=auth_headers(user))).status_code == 204
    assert (await client.get(f"{url}/progress", headers=auth_headers(user))).status_code == 404
