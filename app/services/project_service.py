from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.project import Project, SpeciesMaturity, StaffMember
from app.models.tree import MaintenanceTask, Tree
from app.schemas.project import ProjectCreate, ProjectSettingsUpdate, SpeciesMaturityUpsert, StaffCreate
from app.services.maintenance_schedule import (
    ScheduleRow,
    ScheduleSummary,
    build_schedule_rows,
    summarize_rows,
)
from app.services.schedule_snapshot import ScheduleSnapshot, TaskSnapshot, TreeSnapshot


async def get_project(db: AsyncSession, project_id: int) -> Optional[Project]:
    result = await db.execute(select(Project).where(Project.id == project_id))
    return result.scalar_one_or_none()


async def list_projects(db: AsyncSession) -> list[Project]:
    result = await db.execute(select(Project).order_by(Project.name))
    return list(result.scalars().all())


async def create_project(db: AsyncSession, data: ProjectCreate) -> Project:
    project = Project(
        name=data.name,
        location_text=data.location_text,
        sponsor=data.sponsor,
        season_mode=data.season_mode.value,
    )
    db.add(project)
    await db.commit()
    await db.refresh(project)
    return project


async def update_project_settings(db: AsyncSession, project: Project, data: ProjectSettingsUpdate) -> Project:
    for field, value in data.model_dump(exclude_unset=True, mode="json").items():
        if value is None and field in ("name", "season_mode"):
            continue
        setattr(project, field, value)
    await db.commit()
    await db.refresh(project)
    return project


# ── Staff ─────────────────────────────────────────────────────────────────────


async def list_staff(db: AsyncSession, include_inactive: bool = False) -> list[StaffMember]:
    q = select(StaffMember)
    if not include_inactive:
        q = q.where(StaffMember.is_active.is_(True))
    result = await db.execute(q.order_by(StaffMember.full_name))
    return list(result.scalars().all())


async def get_staff_by_name(db: AsyncSession, full_name: str) -> Optional[StaffMember]:
    result = await db.execute(
        select(StaffMember).where(func.lower(StaffMember.full_name) == full_name.strip().lower())
    )
    return result.scalar_one_or_none()


async def create_staff(db: AsyncSession, data: StaffCreate) -> StaffMember:
    member = StaffMember(full_name=data.full_name.strip(), role=data.role)
    db.add(member)
    await db.commit()
    await db.refresh(member)
    return member


# ── Species maturity ──────────────────────────────────────────────────────────


async def list_species_maturity(db: AsyncSession, project_id: int) -> list[SpeciesMaturity]:
    result = await db.execute(
        select(SpeciesMaturity)
        .where(SpeciesMaturity.project_id == project_id)
        .order_by(SpeciesMaturity.species_key)
    )
    return list(result.scalars().all())


async def get_maturity_map(db: AsyncSession, project_id: int) -> dict[str, int]:
    return {row.species_key: row.maturity_years for row in await list_species_maturity(db, project_id)}


async def upsert_species_maturity(
    db: AsyncSession, project_id: int, data: SpeciesMaturityUpsert
) -> SpeciesMaturity:
    peg = await db.scalar(
        select(SpeciesMaturity).where(
            SpeciesMaturity.project_id == project_id,
            SpeciesMaturity.species_key == data.species_key,
        )
    )
    if peg is None:
        peg = SpeciesMaturity(project_id=project_id, species_key=data.species_key)
        db.add(peg)
    peg.maturity_years = data.maturity_years
    peg.species_label = data.species_label or peg.species_label or data.species_key
    peg.updated_by = data.updated_by
    await db.commit()
    await db.refresh(peg)
    return peg


async def delete_species_maturity(db: AsyncSession, project_id: int, species_key: str) -> bool:
    peg = await db.scalar(
        select(SpeciesMaturity).where(
            SpeciesMaturity.project_id == project_id,
            SpeciesMaturity.species_key == species_key.strip().lower(),
        )
    )
    if peg is None:
        return False
    await db.delete(peg)
    await db.commit()
    return True


# ── Schedule snapshot ─────────────────────────────────────────────────────────


async def load_project_snapshot(db: AsyncSession, project_id: int) -> ScheduleSnapshot:
    """Read trees, tasks and maturity pegs of one project into an immutable snapshot."""
    trees_result = await db.execute(
        select(Tree).where(Tree.project_id == project_id).order_by(Tree.id)
    )
    tasks_result = await db.execute(
        select(MaintenanceTask)
        .join(Tree, MaintenanceTask.tree_id == Tree.id)
        .where(Tree.project_id == project_id)
        .order_by(MaintenanceTask.id)
    )
    return ScheduleSnapshot(
        trees=tuple(TreeSnapshot.from_orm(t) for t in trees_result.scalars().all()),
        tasks=tuple(TaskSnapshot.from_orm(t) for t in tasks_result.scalars().all()),
        maturity_map=await get_maturity_map(db, project_id),
    )


async def compute_live_maintenance(
    db: AsyncSession,
    project_id: int,
    season,
    today: date,
    assignee_name: Optional[str] = None,
    include_idle_replacement: bool = True,
) -> tuple[list[ScheduleRow], ScheduleSummary]:
    snapshot = await load_project_snapshot(db, project_id)
    rows = build_schedule_rows(
        snapshot,
        season,
        today,
        assignee_name=assignee_name,
        include_idle_replacement=include_idle_replacement,
    )
    return rows, summarize_rows(rows)
