from datetime import date, timedelta

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.logs import PipelineRun
from app.tasks.maintenance_alerts import refresh_maintenance_alerts


async def _project_with_tree(client: AsyncClient, today: date, days_since_planting: int = 10, **tree_fields):
    project = (await client.post("/api/v1/projects", json={"name": "Sokoto Shelterbelt"})).json()
    payload = {
        "project_id": project["id"],
        "species": "Gmelina",
        "planting_date": (today - timedelta(days=days_since_planting)).isoformat(),
        "created_by": "Ada Obi",
    }
    payload.update(tree_fields)
    tree = (await client.post("/api/v1/trees", json=payload)).json()
    return project, tree


# ── Live maintenance ──────────────────────────────────────────────────────────


async def test_live_maintenance_rows_and_summary(client: AsyncClient, today: date):
    project, tree = await _project_with_tree(client, today)
    res = await client.get(f"/api/v1/projects/{project['id']}/live-maintenance")
    assert res.status_code == 200
    data = res.json()
    assert data["season_mode"] == "rainy"
    assert data["as_of"] == today.isoformat()
    assert len(data["sources"]) == 4

    rows = {row["activity"]: row for row in data["rows"]}
    assert set(rows) == {"watering", "weeding", "protection", "inspection", "replacement"}
    assert rows["watering"]["tone"] == "danger"
    assert rows["watering"]["indicator_text"] == "Not done, overdue by 10 days"
    assert rows["inspection"]["tone"] == "warning"
    assert rows["inspection"]["countdown_days"] == 4
    assert rows["weeding"]["indicator_text"] == "On schedule"
    assert rows["weeding"]["tree_age_days"] == 10
    assert rows["weeding"]["key"] == f"{tree['id']}-weeding"
    assert rows["replacement"]["block_reason"] == "replacement_not_applicable"

    # danger rows come first
    assert [r["tone"] for r in data["rows"]][:2] == ["danger", "danger"]
    assert data["summary"] == {"total": 5, "danger": 2, "warning": 1, "ok": 2, "info": 0, "due_soon": 1}


async def test_live_maintenance_season_override(client: AsyncClient, today: date):
    project, _ = await _project_with_tree(client, today)
    res = await client.get(f"/api/v1/projects/{project['id']}/live-maintenance", params={"season_mode": "dry"})
    data = res.json()
    assert data["season_mode"] == "dry"
    assert data["summary"]["danger"] == 3

    res = await client.get(f"/api/v1/projects/{project['id']}/live-maintenance", params={"season_mode": "harmattan"})
    assert res.status_code == 422


async def test_live_maintenance_uses_project_season(client: AsyncClient, today: date):
    project, _ = await _project_with_tree(client, today)
    await client.patch(f"/api/v1/projects/{project['id']}/settings", json={"season_mode": "dry"})
    data = (await client.get(f"/api/v1/projects/{project['id']}/live-maintenance")).json()
    assert data["season_mode"] == "dry"


async def test_live_maintenance_idle_replacement(client: AsyncClient, today: date):
    project, _ = await _project_with_tree(client, today)
    url = f"/api/v1/projects/{project['id']}/live-maintenance"
    data = (await client.get(url)).json()
    replacement = next(r for r in data["rows"] if r["activity"] == "replacement")
    assert replacement["blocked"] is True
    assert replacement["block_reason"] == "replacement_not_applicable"
    assert replacement["tone"] == "ok"
    assert replacement["rationale_text"]

    data = (await client.get(url, params={"include_idle_replacement": "false"})).json()
    assert "replacement" not in {r["activity"] for r in data["rows"]}
    assert data["summary"]["total"] == 4


async def test_live_maintenance_respects_maturity_pegs(client: AsyncClient, today: date):
    project, _ = await _project_with_tree(client, today, days_since_planting=1200)
    await client.put(
        f"/api/v1/projects/{project['id']}/species-maturity",
        json={"species_key": "gmelina", "maturity_years": 3},
    )
    data = (await client.get(f"/api/v1/projects/{project['id']}/live-maintenance")).json()
    assert len(data["rows"]) == 5
    for row in data["rows"]:
        if row["activity"] == "replacement":
            assert row["block_reason"] == "replacement_not_applicable"
            continue
        assert row["blocked"] is True
        assert row["block_reason"] == "lifecycle_complete"
        assert row["indicator_text"] == "Lifecycle complete (~3 years)"


async def test_live_maintenance_assignee_filter(client: AsyncClient, today: date):
    project, tree = await _project_with_tree(client, today)
    await client.post("/api/v1/trees", json={
        "project_id": project["id"],
        "planting_date": today.isoformat(),
        "created_by": "Bayo Musa",
    })
    data = (await client.get(
        f"/api/v1/projects/{project['id']}/live-maintenance", params={"assignee_name": "Ada Obi"}
    )).json()
    assert data["assignee_name"] == "Ada Obi"
    assert {row["tree_id"] for row in data["rows"]} == {tree["id"]}


async def test_live_maintenance_skips_pending_planting(client: AsyncClient, today: date):
    project, _ = await _project_with_tree(client, today, status="pending_planting")
    data = (await client.get(f"/api/v1/projects/{project['id']}/live-maintenance")).json()
    assert data["rows"] == []
    assert data["summary"]["total"] == 0


# ── Alerts ────────────────────────────────────────────────────────────────────


async def test_alerts_follow_danger_rows(client: AsyncClient, today: date):
    project, tree = await _project_with_tree(client, today)
    url = f"/api/v1/projects/{project['id']}/alerts"

    alerts = (await client.get(url, params={"refresh": "true"})).json()
    assert sorted(a["activity"] for a in alerts) == ["protection", "watering"]
    assert all(a["status"] == "open" for a in alerts)

    # Refreshing again does not duplicate open alerts
    alerts = (await client.get(url, params={"refresh": "true"})).json()
    assert len(alerts) == 2

    # A dead tree pauses routine work and needs replacement: every row is danger
    await client.patch(f"/api/v1/trees/{tree['id']}", json={"status": "dead"})
    alerts = (await client.get(url)).json()
    assert sorted(a["activity"] for a in alerts) == ["inspection", "protection", "replacement", "watering", "weeding"]
    watering = next(a for a in alerts if a["activity"] == "watering")
    assert watering["message"] == "Tree status 'Dead' requires replacement"

    # Back to pending planting: no rows, so every alert resolves
    await client.patch(f"/api/v1/trees/{tree['id']}", json={"status": "pending_planting"})
    assert (await client.get(url)).json() == []
    resolved = (await client.get(url, params={"status": "resolved"})).json()
    assert len(resolved) == 5
    assert all(a["resolved_at"] is not None for a in resolved)


async def test_alert_refresh_job_records_pipeline_run(client: AsyncClient, db: AsyncSession, today: date):
    project, _ = await _project_with_tree(client, today)
    await refresh_maintenance_alerts(ctx={})

    runs = (await db.execute(select(PipelineRun))).scalars().all()
    assert len(runs) == 1
    assert runs[0].pipeline_name == "maintenance_alerts"
    assert runs[0].status == "success"
    assert runs[0].records_processed == 1

    alerts = (await client.get(f"/api/v1/projects/{project['id']}/alerts")).json()
    assert len(alerts) == 2
