from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import Today, get_db
from app.models.tree import MaintenanceTask
from app.schemas.task import ReviewQueueItem, TaskRead, TaskReopen, TaskReview, TaskSubmit
from app.services import task_service

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    project_id: Optional[int] = Query(default=None),
    assignee_name: Optional[str] = Query(default=None),
    status: Optional[str] = Query(default=None),
    review_state: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    return await task_service.list_tasks(
        db,
        project_id=project_id,
        assignee_name=assignee_name,
        status=status,
        review_state=review_state,
    )


@router.get("/review-queue", response_model=list[ReviewQueueItem])
async def review_queue(
    project_id: Optional[int] = Query(default=None), db: AsyncSession = Depends(get_db)
):
    items = []
    for task, tree in await task_service.review_queue(db, project_id):
        item = ReviewQueueItem.model_validate(task)
        items.append(item.model_copy(update={"tree_status": tree.status, "project_id": tree.project_id}))
    return items


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(task_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_task(db, task_id)


# ── Review workflow ───────────────────────────────────────────────────────────


@router.post("/{task_id}/submit", response_model=TaskRead)
async def submit_task(task_id: int, data: TaskSubmit, today: Today, db: AsyncSession = Depends(get_db)):
    task = await _get_task(db, task_id)
    return await task_service.submit(db, task, data, today)


@router.post("/{task_id}/review", response_model=TaskRead)
async def review_task(task_id: int, data: TaskReview, today: Today, db: AsyncSession = Depends(get_db)):
    task = await _get_task(db, task_id)
    return await task_service.review(db, task, data, today)


@router.post("/{task_id}/reopen", response_model=TaskRead)
async def reopen_task(task_id: int, data: TaskReopen, today: Today, db: AsyncSession = Depends(get_db)):
    task = await _get_task(db, task_id)
    return await task_service.reopen(db, task, data, today)


# ── Helpers ───────────────────────────────────────────────────────────────────


async def _get_task(db: AsyncSession, task_id: int) -> MaintenanceTask:
    task = await task_service.get_task(db, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task
