from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import Today, get_db, resolve_season
from app.models.tree import Tree
from app.schemas.task import ModelDuePreview, TaskAssign, TaskRead
from app.schemas.tree import TaskEventRead, TreeCreate, TreeRead, TreeUpdate
from app.services import project_service, task_service
from app.services.maintenance_intervals import Activity, Season

router = APIRouter(prefix="/trees", tags=["trees"])


@router.post("", response_model=TreeRead, status_code=status.HTTP_201_CREATED)
async def create_tree(data: TreeCreate, db: AsyncSession = Depends(get_db)):
    if not await project_service.get_project(db, data.project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    return await task_service.create_tree(db, data)


@router.get("/{tree_id}", response_model=TreeRead)
async def get_tree(tree_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_tree(db, tree_id)


@router.patch("/{tree_id}", response_model=TreeRead)
async def update_tree(tree_id: int, data: TreeUpdate, today: Today, db: AsyncSession = Depends(get_db)):
    tree = await _get_tree(db, tree_id)
    return await task_service.update_tree(db, tree, data, today)


# ── Tasks ─────────────────────────────────────────────────────────────────────


@router.get("/{tree_id}/tasks", response_model=list[TaskRead])
async def list_tree_tasks(tree_id: int, db: AsyncSession = Depends(get_db)):
    await _get_tree(db, tree_id)
    return await task_service.list_tasks(db, tree_id=tree_id)


@router.post("/{tree_id}/tasks", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def assign_task(tree_id: int, data: TaskAssign, today: Today, db: AsyncSession = Depends(get_db)):
    tree = await _get_tree(db, tree_id)
    return await task_service.assign_task(db, tree, data, today)


@router.get("/{tree_id}/model-due", response_model=ModelDuePreview)
async def preview_model_due(
    tree_id: int,
    today: Today,
    task_type: Activity = Query(),
    season_mode: Optional[Season] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    tree = await _get_tree(db, tree_id)
    project = await project_service.get_project(db, tree.project_id)
    season = resolve_season(season_mode, project.season_mode if project else None)
    model = await task_service.resolve_model_due(db, tree, task_type, season, today)
    return ModelDuePreview(
        tree_id=tree.id,
        task_type=task_type.value,
        season_mode=season,
        as_of=today,
        due_date=model.due_date,
        is_past_due=model.due_date is not None and model.due_date < today,
        blocked=model.blocked,
        block_reason=model.block_reason.value if model.block_reason else None,
        detail=model.detail,
        first_days=model.intervals.first_days if model.intervals else None,
        repeat_days=model.intervals.repeat_days if model.intervals else None,
    )


# ── Timeline ──────────────────────────────────────────────────────────────────


@router.get("/{tree_id}/timeline", response_model=list[TaskEventRead])
async def tree_timeline(tree_id: int, db: AsyncSession = Depends(get_db)):
    await _get_tree(db, tree_id)
    return await task_service.list_tree_events(db, tree_id)


# ── Helpers ───────────────────────────────────────────────────────────────────


async def _get_tree(db: AsyncSession, tree_id: int) -> Tree:
    tree = await task_service.get_tree(db, tree_id)
    if not tree:
        raise HTTPException(status_code=404, detail="Tree not found")
    return tree
