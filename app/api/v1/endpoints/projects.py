from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import Today, get_db, resolve_season
from app.models.project import Project
from app.schemas.maintenance import (
    LiveMaintenanceResponse,
    LiveMaintenanceRow,
    LiveMaintenanceSummary,
    MaintenanceAlertRead,
    SourceLink,
)
from app.schemas.project import (
    ProjectCreate,
    ProjectRead,
    ProjectSettingsUpdate,
    SpeciesMaturityMapResponse,
    SpeciesMaturityRead,
    SpeciesMaturityUpsert,
)
from app.schemas.tree import TreeRead
from app.services import alerts as alert_service
from app.services import project_service, task_service
from app.services.maintenance_intervals import INTERVAL_SOURCES, Season
from app.services.maintenance_schedule import ScheduleRow

router = APIRouter(prefix="/projects", tags=["projects"])


# ── Projects ──────────────────────────────────────────────────────────────────


@router.get("", response_model=list[ProjectRead])
async def list_projects(db: AsyncSession = Depends(get_db)):
    return await project_service.list_projects(db)


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(data: ProjectCreate, db: AsyncSession = Depends(get_db)):
    return await project_service.create_project(db, data)


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(project_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_project(db, project_id)


@router.patch("/{project_id}/settings", response_model=ProjectRead)
async def update_project_settings(
    project_id: int, data: ProjectSettingsUpdate, db: AsyncSession = Depends(get_db)
):
    project = await _get_project(db, project_id)
    return await project_service.update_project_settings(db, project, data)


@router.get("/{project_id}/trees", response_model=list[TreeRead])
async def list_project_trees(
    project_id: int,
    status: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    await _get_project(db, project_id)
    return await task_service.list_trees(db, project_id, status)


# ── Species maturity ──────────────────────────────────────────────────────────


@router.get("/{project_id}/species-maturity", response_model=SpeciesMaturityMapResponse)
async def get_species_maturity(project_id: int, db: AsyncSession = Depends(get_db)):
    await _get_project(db, project_id)
    return await _maturity_response(db, project_id)


@router.put("/{project_id}/species-maturity", response_model=SpeciesMaturityMapResponse)
async def upsert_species_maturity(
    project_id: int, data: SpeciesMaturityUpsert, db: AsyncSession = Depends(get_db)
):
    await _get_project(db, project_id)
    await project_service.upsert_species_maturity(db, project_id, data)
    return await _maturity_response(db, project_id)


@router.delete("/{project_id}/species-maturity/{species_key}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_species_maturity(project_id: int, species_key: str, db: AsyncSession = Depends(get_db)):
    await _get_project(db, project_id)
    if not await project_service.delete_species_maturity(db, project_id, species_key):
        raise HTTPException(status_code=404, detail="Species maturity peg not found")


# ── Live maintenance ──────────────────────────────────────────────────────────


@router.get("/{project_id}/live-maintenance", response_model=LiveMaintenanceResponse)
async def live_maintenance(
    project_id: int,
    today: Today,
    season_mode: Optional[Season] = Query(default=None),
    assignee_name: Optional[str] = Query(default=None),
    include_idle_replacement: bool = Query(default=True),
    db: AsyncSession = Depends(get_db),
):
    project = await _get_project(db, project_id)
    season = resolve_season(season_mode, project.season_mode)
    assignee = (assignee_name or "").strip() or None
    rows, summary = await project_service.compute_live_maintenance(
        db,
        project_id,
        season,
        today,
        assignee_name=assignee,
        include_idle_replacement=include_idle_replacement,
    )
    return LiveMaintenanceResponse(
        project_id=project_id,
        season_mode=season,
        as_of=today,
        assignee_name=assignee,
        rows=[_row_to_schema(row) for row in rows],
        summary=LiveMaintenanceSummary(**asdict(summary)),
        sources=[SourceLink(**source) for source in INTERVAL_SOURCES],
    )


# ── Alerts ────────────────────────────────────────────────────────────────────


@router.get("/{project_id}/alerts", response_model=list[MaintenanceAlertRead])
async def list_alerts(
    project_id: int,
    today: Today,
    refresh: bool = Query(default=False),
    status: Optional[str] = Query(default="open", pattern="^(open|resolved)$"),
    db: AsyncSession = Depends(get_db),
):
    project = await _get_project(db, project_id)
    if refresh:
        await alert_service.refresh_project_alerts(db, project, today)
    return await alert_service.list_project_alerts(db, project_id, status)


# ── Helpers ───────────────────────────────────────────────────────────────────


async def _get_project(db: AsyncSession, project_id: int) -> Project:
    project = await project_service.get_project(db, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


async def _maturity_response(db: AsyncSession, project_id: int) -> SpeciesMaturityMapResponse:
    items = await project_service.list_species_maturity(db, project_id)
    return SpeciesMaturityMapResponse(
        project_id=project_id,
        map={item.species_key: item.maturity_years for item in items},
        items=[SpeciesMaturityRead.model_validate(item) for item in items],
    )


def _row_to_schema(row: ScheduleRow) -> LiveMaintenanceRow:
    return LiveMaintenanceRow(
        key=row.key,
        tree_id=row.tree_id,
        assignee=row.assignee,
        activity=row.activity.value,
        activity_label=row.activity_label,
        planting_date=row.planting_date,
        tree_age_days=row.tree_age_days,
        last_done_at=row.last_done_at,
        model_due_date=row.model_due_date,
        assigned_due_date=row.assigned_due_date,
        effective_due_date=row.effective_due_date,
        countdown_days=row.countdown_days,
        tone=row.tone.value,
        indicator_text=row.indicator_text,
        status_text=row.status_text,
        done_count=row.done_count,
        pending_count=row.pending_count,
        overdue_count=row.overdue_count,
        open_task_id=row.open_task_id,
        rationale_text=row.rationale_text,
        blocked=row.blocked,
        block_reason=row.block_reason.value if row.block_reason else None,
    )
