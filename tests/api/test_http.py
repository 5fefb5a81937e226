"""HTTP surface: routing, status mapping, headers and actor attribution."""

import pytest

BASE = "/api/v1/workflow/engine"


async def _task(client, task_id: str, **fields) -> dict:
    payload = {"case_id": "case-1", "title": f"Task {task_id}", "id": task_id, **fields}
    response = await client.post(f"{BASE}/tasks", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def test_health(client) -> None:
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"

    ready = await client.get("/api/v1/health/ready")
    assert ready.status_code == 200
    assert ready.json() == {"status": "ok", "database": "ok", "cache": "disabled"}


async def test_register_and_fetch_task(client) -> None:
    created = await _task(client, "t1", priority="high", assigned_to_user_id="alice")
    assert created["version"] == 1

    response = await client.get(f"{BASE}/tasks/t1")
    assert response.status_code == 200
    assert response.json()["priority"] == "high"

    listed = await client.get(f"{BASE}/tasks", params={"case_id": "case-1"})
    assert [t["id"] for t in listed.json()] == ["t1"]


async def test_request_body_validation_is_422(client) -> None:
    response = await client.post(f"{BASE}/tasks", json={"case_id": "case-1"})
    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert body["details"]


async def test_engine_validation_is_400(client) -> None:
    response = await client.post(
        f"{BASE}/tasks", json={"case_id": "case-1", "title": "x", "priority": "urgent"}
    )
    assert response.status_code == 400
    assert response.json()["details"]["field"] == "priority"


async def test_unknown_task_is_404(client) -> None:
    response = await client.get(f"{BASE}/tasks/ghost")
    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "RESOURCE_NOT_FOUND"
    assert body["details"] == {"resource_type": "task", "resource_id": "ghost"}


async def test_blocked_start_and_cycle_are_409(client) -> None:
    await _task(client, "a")
    await _task(client, "b")
    response = await client.put(f"{BASE}/dependencies/a", json={"depends_on": ["b"]})
    assert response.status_code == 200
    assert response.json()["blocking"] == ["b"]

    blocked = await client.patch(f"{BASE}/tasks/a/status", json={"status": "in-progress"})
    assert blocked.status_code == 409
    assert blocked.json()["error"] == "TASK_BLOCKED"
    assert blocked.json()["details"]["blocked_by"] == ["b"]

    cycle = await client.put(f"{BASE}/dependencies/b", json={"depends_on": ["a"]})
    assert cycle.status_code == 409
    assert cycle.json()["details"]["cycle"] == ["b", "a", "b"]

    can_start = await client.get(f"{BASE}/dependencies/a/can-start")
    assert can_start.json()["can_start"] is False


async def test_rejected_cycle_leaves_graph_unchanged(client) -> None:
    await _task(client, "a")
    await _task(client, "b")
    await client.put(f"{BASE}/dependencies/a", json={"depends_on": ["b"]})
    await client.put(f"{BASE}/dependencies/b", json={"depends_on": ["a"]})

    deps = await client.get(f"{BASE}/dependencies/b")
    assert deps.json()["blocking"] == []


async def test_stale_version_is_409(client) -> None:
    await _task(client, "t1")
    ok = await client.patch(
        f"{BASE}/tasks/t1/status", json={"status": "review", "expected_version": 1}
    )
    assert ok.status_code == 200
    assert ok.json()["task"]["version"] == 2

    stale = await client.patch(
        f"{BASE}/tasks/t1/status", json={"status": "done", "expected_version": 1}
    )
    assert stale.status_code == 409
    assert stale.json()["error"] == "CONFLICT_RETRY"


async def test_wrong_approver_is_403(client) -> None:
    await _task(client, "t1")
    created = await client.post(f"{BASE}/approvals/t1", json={"approver_ids": ["alice", "bob"]})
    assert created.status_code == 201
    assert created.json()["current_approver_id"] == "alice"

    wrong = await client.post(
        f"{BASE}/approvals/t1/decision", json={"approver_id": "bob", "action": "approve"}
    )
    assert wrong.status_code == 403
    assert wrong.json()["error"] == "NOT_CURRENT_APPROVER"


async def test_sla_status_without_rule_is_404(client) -> None:
    await _task(client, "t1")
    response = await client.get(f"{BASE}/sla/tasks/t1")
    assert response.status_code == 404
    assert response.json()["error"] == "NO_RULE_CONFIGURED"

    with_default = await client.get(f"{BASE}/sla/tasks/t1", params={"use_default": True})
    assert with_default.status_code == 200
    assert with_default.json()["state"] == "on_track"


@pytest.mark.parametrize("header", ["X-Request-ID", "X-Correlation-ID"])
async def test_tracing_headers_are_echoed(client, header) -> None:
    response = await client.get("/api/v1/health", headers={header: "abc-123"})
    assert response.headers[header] == "abc-123"


async def test_request_id_generated_and_stored_on_audit(client) -> None:
    response = await client.post(
        f"{BASE}/tasks",
        json={"case_id": "case-1", "title": "audited", "id": "t1"},
        headers={"X-Actor-ID": "alice", "X-Request-ID": "req-42"},
    )
    assert response.status_code == 201

    entries = await client.get(f"{BASE}/audit", params={"entity_id": "t1"})
    [entry] = entries.json()
    assert entry["user_id"] == "alice"
    assert entry["request_id"] == "req-42"
    assert entry["action"] == "task_created"


async def test_missing_actor_falls_back_to_default(client) -> None:
    await _task(client, "t1")
    entries = await client.get(f"{BASE}/audit/cases/case-1")
    assert entries.json()[0]["user_id"] == "system"


async def test_analytics_endpoints(client) -> None:
    await _task(client, "t1", assigned_to_user_id="alice")
    metrics = await client.get(f"{BASE}/analytics/metrics", params={"scope": "case-1"})
    assert metrics.status_code == 200
    assert metrics.json()["total_tasks"] == 1

    velocity = await client.get(f"{BASE}/analytics/velocity", params={"window_days": 0})
    assert velocity.status_code == 422

    bottlenecks = await client.get(
        f"{BASE}/analytics/bottlenecks", params={"overload_threshold": 0}
    )
    assert bottlenecks.json()["overloaded_users"] == [{"user_id": "alice", "open_tasks": 1}]


async def test_oversized_body_is_413(client) -> None:
    response = await client.post(
        f"{BASE}/tasks",
        content=b"x" * (1024 * 1024 + 1),
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 413


async def test_conditional_rules(client) -> None:
    stage = (
        await client.post(f"{BASE}/stages", json={"case_id": "case-1", "name": "Intake", "order": 1})
    ).json()
    await _task(client, "t1", stage_id=stage["id"], priority="low")

    rule = {
        "stage_id": stage["id"],
        "field": "claim_amount",
        "operator": "greater_than",
        "value": 1000,
        "then_action": "set_priority",
        "then_value": "high",
    }
    created = await client.post(f"{BASE}/conditions", json=rule)
    assert created.status_code == 201, created.text

    listed = await client.get(f"{BASE}/conditions/{stage['id']}")
    assert [r["id"] for r in listed.json()] == [created.json()["id"]]

    evaluated = await client.post(
        f"{BASE}/conditions/{stage['id']}/evaluate", json={"claim_amount": 5000}
    )
    assert evaluated.status_code == 200
    [outcome] = evaluated.json()["actions_triggered"]
    assert outcome["executed"] is True
    assert outcome["affected_task_ids"] == ["t1"]
    assert (await client.get(f"{BASE}/tasks/t1")).json()["priority"] == "high"

    bad = await client.post(f"{BASE}/conditions", json={**rule, "operator": "between"})
    assert bad.status_code == 400
    assert bad.json()["error"] == "VALIDATION_ERROR"

    missing = await client.post(f"{BASE}/conditions/nope/evaluate", json={})
    assert missing.status_code == 404
