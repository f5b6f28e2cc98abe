from datetime import date, timedelta

from httpx import AsyncClient


async def _setup_tree(client: AsyncClient, today: date, **tree_fields) -> dict:
    project = (await client.post("/api/v1/projects", json={"name": "Kano Green Belt"})).json()
    await client.post("/api/v1/staff", json={"full_name": "Ada Obi"})
    payload = {
        "project_id": project["id"],
        "species": "Gmelina",
        "planting_date": (today - timedelta(days=10)).isoformat(),
        "created_by": "Ada Obi",
    }
    payload.update(tree_fields)
    res = await client.post("/api/v1/trees", json=payload)
    assert res.status_code == 201
    return res.json()


async def _assign(client: AsyncClient, tree_id: int, **overrides):
    payload = {"task_type": "weeding", "assignee_name": "Ada Obi", "due_mode": "model_rainy"}
    payload.update(overrides)
    return await client.post(f"/api/v1/trees/{tree_id}/tasks", json=payload)


# ── Trees ─────────────────────────────────────────────────────────────────────


async def test_tree_status_is_normalized(client: AsyncClient, today: date):
    tree = await _setup_tree(client, today, status="Need-Watering")
    assert tree["status"] == "need_watering"

    res = await client.patch(f"/api/v1/trees/{tree['id']}", json={"status": "on fire"})
    assert res.status_code == 422


async def test_tree_for_unknown_project(client: AsyncClient):
    res = await client.post("/api/v1/trees", json={"project_id": 404})
    assert res.status_code == 404


async def test_status_change_is_recorded_on_timeline(client: AsyncClient, today: date):
    tree = await _setup_tree(client, today)
    res = await client.patch(f"/api/v1/trees/{tree['id']}", json={"status": "damaged", "actor_name": "Uche Eze"})
    assert res.status_code == 200
    assert res.json()["status"] == "damaged"

    events = (await client.get(f"/api/v1/trees/{tree['id']}/timeline")).json()
    assert len(events) == 1
    assert events[0]["event_type"] == "tree_status_changed"
    assert events[0]["details"] == {"from": "healthy", "to": "damaged"}
    assert events[0]["actor_name"] == "Uche Eze"


# ── Assignment ────────────────────────────────────────────────────────────────


async def test_assign_with_model_due_date(client: AsyncClient, today: date):
    tree = await _setup_tree(client, today)
    res = await _assign(client, tree["id"], assignee_name="ada obi")
    assert res.status_code == 201
    task = res.json()
    # Rainy weeding in year one: first cycle 21 days after planting
    assert task["due_date"] == (today + timedelta(days=11)).isoformat()
    assert task["model_season"] == "rainy"
    assert task["assignee_name"] == "Ada Obi"
    assert task["status"] == "open"
    assert task["review_state"] == "none"


async def test_model_due_preview(client: AsyncClient, today: date):
    tree = await _setup_tree(client, today)
    res = await client.get(f"/api/v1/trees/{tree['id']}/model-due", params={"task_type": "inspection"})
    assert res.status_code == 200
    data = res.json()
    assert data["season_mode"] == "rainy"
    assert data["due_date"] == (today + timedelta(days=4)).isoformat()
    assert data["is_past_due"] is False
    assert data["first_days"] == 14

    res = await client.get(
        f"/api/v1/trees/{tree['id']}/model-due", params={"task_type": "watering", "season_mode": "dry"}
    )
    assert res.json()["is_past_due"] is True
    assert res.json()["repeat_days"] == 5


async def test_assign_rejects_past_model_date(client: AsyncClient, today: date):
    tree = await _setup_tree(client, today)
    res = await _assign(client, tree["id"], task_type="watering")
    assert res.status_code == 400
    assert res.json()["detail"] == "Model date has passed. Choose a custom date."


async def test_assign_rejects_blocked_activity(client: AsyncClient, today: date):
    tree = await _setup_tree(client, today, status="dead")
    res = await _assign(client, tree["id"])
    assert res.status_code == 400
    assert "Assign replacement first" in res.json()["detail"]

    res = await _assign(client, tree["id"], task_type="replacement")
    assert res.status_code == 201
    assert res.json()["due_date"] == today.isoformat()


async def test_assign_without_planting_date_needs_custom_date(client: AsyncClient, today: date):
    tree = await _setup_tree(client, today, planting_date=None)
    res = await _assign(client, tree["id"])
    assert res.status_code == 400

    res = await _assign(client, tree["id"], due_mode="manual")
    assert res.status_code == 422

    due = (today + timedelta(days=3)).isoformat()
    res = await _assign(client, tree["id"], due_mode="manual", due_date=due)
    assert res.status_code == 201
    assert res.json()["due_date"] == due
    assert res.json()["model_season"] is None


async def test_assign_requires_active_staff(client: AsyncClient, today: date):
    tree = await _setup_tree(client, today)
    res = await _assign(client, tree["id"], assignee_name="Nobody")
    assert res.status_code == 400


# ── Review workflow ───────────────────────────────────────────────────────────


async def test_submit_review_and_reopen(client: AsyncClient, today: date):
    tree = await _setup_tree(client, today)
    task = (await _assign(client, tree["id"])).json()

    res = await client.post(f"/api/v1/tasks/{task['id']}/submit", json={"notes": "", "tree_status": "healthy"})
    assert res.status_code == 400

    res = await client.post(
        f"/api/v1/tasks/{task['id']}/submit",
        json={"notes": "Cleared weed ring", "tree_status": "need watering"},
    )
    assert res.status_code == 200
    assert res.json()["status"] == "done"
    assert res.json()["review_state"] == "submitted"

    queue = (await client.get("/api/v1/tasks/review-queue", params={"project_id": tree["project_id"]})).json()
    assert [item["id"] for item in queue] == [task["id"]]
    assert queue[0]["tree_status"] == "healthy"
    assert queue[0]["project_id"] == tree["project_id"]

    res = await client.post(f"/api/v1/tasks/{task['id']}/review", json={"decision": "approve", "reviewer_name": "Uche Eze"})
    assert res.status_code == 200
    approved = res.json()
    assert approved["review_state"] == "approved"
    assert approved["reviewed_by"] == "Uche Eze"
    assert approved["completed_at"] is not None

    # Approval applies the reported condition to the tree
    assert (await client.get(f"/api/v1/trees/{tree['id']}")).json()["status"] == "need_watering"
    assert (await client.get("/api/v1/tasks/review-queue")).json() == []

    res = await client.post(f"/api/v1/tasks/{task['id']}/reopen", json={"reviewer_name": "Uche Eze", "reason": "Wrong tree"})
    assert res.status_code == 200
    assert res.json()["status"] == "open"
    assert res.json()["review_state"] == "none"
    assert res.json()["completed_at"] is None
    assert res.json()["review_notes"] == "Wrong tree"

    res = await client.post(f"/api/v1/tasks/{task['id']}/reopen", json={})
    assert res.status_code == 409

    events = (await client.get(f"/api/v1/trees/{tree['id']}/timeline")).json()
    assert [e["event_type"] for e in events] == [
        "reopened",
        "tree_status_changed",
        "approved",
        "submitted",
        "assigned",
    ]


async def test_reject_requires_note_and_reopens_pool(client: AsyncClient, today: date):
    tree = await _setup_tree(client, today)
    task = (await _assign(client, tree["id"], task_type="inspection")).json()
    await client.post(f"/api/v1/tasks/{task['id']}/submit", json={"notes": "Checked"})

    res = await client.post(f"/api/v1/tasks/{task['id']}/review", json={"decision": "reject"})
    assert res.status_code == 400
    assert res.json()["detail"] == "Write a rejection note before rejecting."

    res = await client.post(
        f"/api/v1/tasks/{task['id']}/review",
        json={"decision": "reject", "review_notes": "No photo", "reviewer_name": "Uche Eze"},
    )
    assert res.status_code == 200
    assert res.json()["review_state"] == "rejected"
    assert res.json()["status"] == "open"

    # A rejected task cannot be reviewed again until resubmitted
    res = await client.post(f"/api/v1/tasks/{task['id']}/review", json={"decision": "approve"})
    assert res.status_code == 409

    rows = (await client.get(f"/api/v1/projects/{tree['project_id']}/live-maintenance")).json()["rows"]
    inspection = next(r for r in rows if r["activity"] == "inspection")
    assert inspection["open_task_id"] == task["id"]
    assert inspection["done_count"] == 0


async def test_list_tasks_filters(client: AsyncClient, today: date):
    tree = await _setup_tree(client, today)
    await client.post("/api/v1/staff", json={"full_name": "Bayo Musa"})
    await _assign(client, tree["id"])
    await _assign(client, tree["id"], task_type="inspection", assignee_name="Bayo Musa")

    res = await client.get("/api/v1/tasks", params={"project_id": tree["project_id"]})
    assert len(res.json()) == 2

    res = await client.get("/api/v1/tasks", params={"assignee_name": "Bayo Musa"})
    assert [t["task_type"] for t in res.json()] == ["inspection"]

    # Names match the way the live view and staff lookup match them
    res = await client.get("/api/v1/tasks", params={"assignee_name": " ada obi "})
    assert [t["task_type"] for t in res.json()] == ["weeding"]
    assert res.json()[0]["assignee_name"] == "Ada Obi"

    res = await client.get(f"/api/v1/trees/{tree['id']}/tasks")
    assert len(res.json()) == 2


async def test_task_not_found(client: AsyncClient):
    res = await client.get("/api/v1/tasks/9999")
    assert res.status_code == 404
    res = await client.post("/api/v1/tasks/9999/review", json={"decision": "approve"})
    assert res.status_code == 404
