"""
Maintenance alert refresh.

Recomputes a project's schedule and reconciles the open alert set with the
danger rows: one open alert per (tree, activity) in danger, alerts for pairs
that are no longer in danger are resolved. Runs hourly from the worker, on
demand from the alerts endpoint and right after every review action.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.alert import MaintenanceAlert
from app.models.project import Project
from app.services.maintenance_intervals import Season, parse_season
from app.services.maintenance_schedule import Tone, build_schedule_rows
from app.services.project_service import load_project_snapshot

logger = logging.getLogger(__name__)


@dataclass
class AlertRefreshResult:
    project_id: int
    opened: int = 0
    updated: int = 0
    resolved: int = 0


async def refresh_project_alerts(
    db: AsyncSession,
    project: Project,
    today: date,
    season: Optional[Season] = None,
) -> AlertRefreshResult:
    season = parse_season(season or project.season_mode)
    snapshot = await load_project_snapshot(db, project.id)
    rows = build_schedule_rows(snapshot, season, today)
    danger_rows = {(row.tree_id, row.activity.value): row for row in rows if row.tone is Tone.danger}

    result = await db.execute(
        select(MaintenanceAlert).where(
            MaintenanceAlert.project_id == project.id,
            MaintenanceAlert.status == "open",
        )
    )
    open_alerts = {(a.tree_id, a.activity): a for a in result.scalars().all()}

    outcome = AlertRefreshResult(project_id=project.id)
    now = datetime.now(timezone.utc)

    for key, alert in open_alerts.items():
        row = danger_rows.get(key)
        if row is None:
            alert.status = "resolved"
            alert.resolved_at = now
            outcome.resolved += 1
            continue
        if alert.message != row.indicator_text or alert.due_date != row.effective_due_date:
            alert.message = row.indicator_text
            alert.detail = row.rationale_text
            alert.due_date = row.effective_due_date
            outcome.updated += 1

    for key, row in danger_rows.items():
        if key in open_alerts:
            continue
        db.add(MaintenanceAlert(
            project_id=project.id,
            tree_id=row.tree_id,
            activity=row.activity.value,
            tone=row.tone.value,
            message=row.indicator_text,
            detail=row.rationale_text,
            due_date=row.effective_due_date,
            status="open",
        ))
        outcome.opened += 1

    await db.commit()
    logger.info(
        "refresh_project_alerts: project %d (%s): %d opened, %d updated, %d resolved",
        project.id, season.value, outcome.opened, outcome.updated, outcome.resolved,
    )
    return outcome


async def list_project_alerts(
    db: AsyncSession, project_id: int, status: Optional[str] = None
) -> list[MaintenanceAlert]:
    q = select(MaintenanceAlert).where(MaintenanceAlert.project_id == project_id)
    if status:
        q = q.where(MaintenanceAlert.status == status)
    result = await db.execute(q.order_by(MaintenanceAlert.created_at.desc(), MaintenanceAlert.id.desc()))
    return list(result.scalars().all())
