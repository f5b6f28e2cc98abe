"""
ARQ maintenance alert task.

refresh_maintenance_alerts: runs hourly
    Recomputes every project's live maintenance schedule in the project's
    configured season and reconciles its open MaintenanceAlert set: danger
    rows open (or update) alerts, everything else resolves them.
"""
import logging
from datetime import date, datetime, timezone

from sqlalchemy import select

from app.db.session import AsyncSessionLocal
from app.models.logs import PipelineRun
from app.models.project import Project
from app.services.alerts import refresh_project_alerts

logger = logging.getLogger(__name__)


async def refresh_maintenance_alerts(ctx: dict) -> None:
    """Refresh maintenance alerts for every project."""
    logger.info("refresh_maintenance_alerts: starting")
    started_at = datetime.now(timezone.utc)
    today = date.today()
    records = 0
    opened = resolved = 0

    async with AsyncSessionLocal() as db:
        pipeline = PipelineRun(
            pipeline_name="maintenance_alerts",
            status="running",
            started_at=started_at,
        )
        db.add(pipeline)
        await db.commit()
        await db.refresh(pipeline)

        try:
            result = await db.execute(select(Project.id).order_by(Project.id))
            project_ids = list(result.scalars().all())

            for project_id in project_ids:
                try:
                    project = await db.get(Project, project_id)
                    outcome = await refresh_project_alerts(db, project, today)
                    opened += outcome.opened
                    resolved += outcome.resolved
                    records += 1
                except Exception as exc:
                    await db.rollback()
                    logger.warning("refresh_maintenance_alerts: failed for project %d: %s", project_id, exc)

            finished_at = datetime.now(timezone.utc)
            pipeline.status = "success"
            pipeline.finished_at = finished_at
            pipeline.duration_ms = int((finished_at - started_at).total_seconds() * 1000)
            pipeline.records_processed = records
            await db.commit()

        except Exception as exc:
            logger.exception("refresh_maintenance_alerts: unexpected error")
            finished_at = datetime.now(timezone.utc)
            pipeline.status = "failed"
            pipeline.finished_at = finished_at
            pipeline.duration_ms = int((finished_at - started_at).total_seconds() * 1000)
            pipeline.error_message = str(exc)
            await db.commit()
            raise

    logger.info(
        "refresh_maintenance_alerts: complete, %d projects (%d alerts opened, %d resolved)",
        records, opened, resolved,
    )
