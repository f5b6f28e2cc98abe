"""
Task lifecycle persistence: assignment, submission, supervisor review, reopen.

Each action validates through services.task_review (or the schedule engine for
assignment), writes a TaskEvent for the tree timeline, commits, and then
refreshes the project's maintenance alerts so the danger set reflects the new
state right away.
"""
import logging
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AssignmentError
from app.models.logs import TaskEvent
from app.models.tree import MaintenanceTask, Tree
from app.schemas.task import TaskAssign, TaskReopen, TaskReview, TaskSubmit
from app.schemas.tree import TreeCreate, TreeUpdate
from app.services.alerts import refresh_project_alerts
from app.services.maintenance_intervals import Season
from app.services.maintenance_schedule import ModelDue, model_due_for
from app.services.project_service import get_maturity_map, get_project, get_staff_by_name
from app.services.schedule_snapshot import TaskSnapshot, TreeSnapshot
from app.services.task_review import (
    ReviewDecision,
    ReviewState,
    reopen_task,
    review_task,
    submit_task,
)

logger = logging.getLogger(__name__)


# ── Lookups ───────────────────────────────────────────────────────────────────


async def get_tree(db: AsyncSession, tree_id: int) -> Optional[Tree]:
    return await db.get(Tree, tree_id)


async def list_trees(db: AsyncSession, project_id: int, status: Optional[str] = None) -> list[Tree]:
    q = select(Tree).where(Tree.project_id == project_id)
    if status:
        q = q.where(Tree.status == status)
    result = await db.execute(q.order_by(Tree.id))
    return list(result.scalars().all())


async def get_task(db: AsyncSession, task_id: int) -> Optional[MaintenanceTask]:
    return await db.get(MaintenanceTask, task_id)


async def list_tasks(
    db: AsyncSession,
    project_id: Optional[int] = None,
    tree_id: Optional[int] = None,
    assignee_name: Optional[str] = None,
    status: Optional[str] = None,
    review_state: Optional[str] = None,
) -> list[MaintenanceTask]:
    q = select(MaintenanceTask).join(Tree, MaintenanceTask.tree_id == Tree.id)
    if project_id is not None:
        q = q.where(Tree.project_id == project_id)
    if tree_id is not None:
        q = q.where(MaintenanceTask.tree_id == tree_id)
    if assignee_name:
        q = q.where(func.lower(MaintenanceTask.assignee_name) == assignee_name.strip().lower())
    if status:
        q = q.where(MaintenanceTask.status == status)
    if review_state:
        q = q.where(MaintenanceTask.review_state == review_state)
    result = await db.execute(q.order_by(MaintenanceTask.due_date, MaintenanceTask.id))
    return list(result.scalars().all())


async def review_queue(db: AsyncSession, project_id: Optional[int] = None) -> list[tuple[MaintenanceTask, Tree]]:
    """Submitted tasks awaiting a supervisor decision, oldest submission first."""
    q = (
        select(MaintenanceTask, Tree)
        .join(Tree, MaintenanceTask.tree_id == Tree.id)
        .where(MaintenanceTask.review_state == ReviewState.submitted.value)
    )
    if project_id is not None:
        q = q.where(Tree.project_id == project_id)
    result = await db.execute(q.order_by(MaintenanceTask.submitted_at, MaintenanceTask.id))
    return [(task, tree) for task, tree in result.all()]


async def list_tree_events(db: AsyncSession, tree_id: int) -> list[TaskEvent]:
    result = await db.execute(
        select(TaskEvent)
        .where(TaskEvent.tree_id == tree_id)
        .order_by(TaskEvent.created_at.desc(), TaskEvent.id.desc())
    )
    return list(result.scalars().all())


# ── Trees ─────────────────────────────────────────────────────────────────────


async def create_tree(db: AsyncSession, data: TreeCreate) -> Tree:
    tree = Tree(**data.model_dump())
    db.add(tree)
    await db.commit()
    await db.refresh(tree)
    return tree


async def update_tree(db: AsyncSession, tree: Tree, data: TreeUpdate, today: date) -> Tree:
    changes = data.model_dump(exclude_unset=True)
    actor_name = changes.pop("actor_name", None)
    previous_status = tree.status
    for field, value in changes.items():
        if field == "status" and value is None:
            continue
        setattr(tree, field, value)

    if tree.status != previous_status:
        _record_status_change(db, tree, previous_status, actor_name, task_id=None)
    await db.commit()
    await db.refresh(tree)
    await _refresh_alerts(db, tree.project_id, today)
    return tree


# ── Assignment ────────────────────────────────────────────────────────────────


async def resolve_model_due(
    db: AsyncSession, tree: Tree, task_type, season: Season, today: date
) -> ModelDue:
    """Model due date for a new task on this tree, from its own task history."""
    tasks = await list_tasks(db, tree_id=tree.id)
    return model_due_for(
        TreeSnapshot.from_orm(tree),
        task_type,
        [TaskSnapshot.from_orm(t) for t in tasks],
        season,
        await get_maturity_map(db, tree.project_id),
        today,
    )


async def assign_task(db: AsyncSession, tree: Tree, data: TaskAssign, today: date) -> MaintenanceTask:
    assignee = await get_staff_by_name(db, data.assignee_name)
    if assignee is None or not assignee.is_active:
        raise AssignmentError(f"'{data.assignee_name}' is not an active staff member")

    if data.model_season is None:
        due_date = data.due_date
    else:
        model = await resolve_model_due(db, tree, data.task_type, data.model_season, today)
        if model.blocked:
            raise AssignmentError(model.detail)
        if model.due_date is None:
            raise AssignmentError("No model date available for this tree. Choose a custom date.")
        if model.due_date < today:
            raise AssignmentError("Model date has passed. Choose a custom date.")
        due_date = model.due_date

    task = MaintenanceTask(
        tree_id=tree.id,
        task_type=data.task_type.value,
        assignee_name=assignee.full_name,
        status="open",
        review_state=ReviewState.none.value,
        priority=data.priority,
        due_date=due_date,
        model_season=data.model_season.value if data.model_season else None,
        notes=data.notes,
    )
    db.add(task)
    await db.flush()
    db.add(TaskEvent(
        tree_id=tree.id,
        task_id=task.id,
        event_type="assigned",
        actor_name=assignee.full_name,
        notes=data.notes,
        details={"task_type": task.task_type, "due_mode": data.due_mode, "due_date": due_date.isoformat()},
    ))
    await db.commit()
    await db.refresh(task)
    logger.info(
        "assign_task: task %d (%s) on tree %d to %s, due %s",
        task.id, task.task_type, tree.id, task.assignee_name, due_date,
    )
    await _refresh_alerts(db, tree.project_id, today)
    return task


# ── Review workflow ───────────────────────────────────────────────────────────


async def submit(db: AsyncSession, task: MaintenanceTask, data: TaskSubmit, today: date) -> MaintenanceTask:
    submit_task(
        task,
        data.notes,
        datetime.now(timezone.utc),
        photo_url=data.photo_url,
        reported_tree_status=data.tree_status,
    )
    db.add(TaskEvent(
        tree_id=task.tree_id,
        task_id=task.id,
        event_type="submitted",
        actor_name=data.actor_name or task.assignee_name,
        notes=task.notes,
        details={"reported_tree_status": task.reported_tree_status, "photo_url": task.photo_url},
    ))
    await db.commit()
    await db.refresh(task)
    logger.info("submit: task %d submitted for review", task.id)
    tree = await get_tree(db, task.tree_id)
    await _refresh_alerts(db, tree.project_id, today)
    return task


async def review(db: AsyncSession, task: MaintenanceTask, data: TaskReview, today: date) -> MaintenanceTask:
    review_task(task, data.decision, data.reviewer_name, data.review_notes, datetime.now(timezone.utc))
    approved = data.decision is ReviewDecision.approve
    db.add(TaskEvent(
        tree_id=task.tree_id,
        task_id=task.id,
        event_type="approved" if approved else "rejected",
        actor_name=data.reviewer_name,
        notes=task.review_notes,
    ))

    tree = await get_tree(db, task.tree_id)
    if approved and task.reported_tree_status and task.reported_tree_status != tree.status:
        previous_status = tree.status
        tree.status = task.reported_tree_status
        _record_status_change(db, tree, previous_status, data.reviewer_name, task_id=task.id)

    await db.commit()
    await db.refresh(task)
    logger.info("review: task %d %s by %s", task.id, task.review_state, data.reviewer_name)
    await _refresh_alerts(db, tree.project_id, today, data.season_mode)
    return task


async def reopen(db: AsyncSession, task: MaintenanceTask, data: TaskReopen, today: date) -> MaintenanceTask:
    reopen_task(task, data.reviewer_name, data.reason, datetime.now(timezone.utc))
    db.add(TaskEvent(
        tree_id=task.tree_id,
        task_id=task.id,
        event_type="reopened",
        actor_name=data.reviewer_name,
        notes=task.review_notes,
    ))
    await db.commit()
    await db.refresh(task)
    logger.info("reopen: task %d reopened by %s", task.id, data.reviewer_name)
    tree = await get_tree(db, task.tree_id)
    await _refresh_alerts(db, tree.project_id, today)
    return task


# ── Helpers ───────────────────────────────────────────────────────────────────


def _record_status_change(
    db: AsyncSession, tree: Tree, previous: str, actor_name: Optional[str], task_id: Optional[int]
) -> None:
    db.add(TaskEvent(
        tree_id=tree.id,
        task_id=task_id,
        event_type="tree_status_changed",
        actor_name=actor_name,
        details={"from": previous, "to": tree.status},
    ))


async def _refresh_alerts(
    db: AsyncSession, project_id: int, today: date, season: Optional[Season] = None
) -> None:
    project = await get_project(db, project_id)
    if project is None:
        return
    await refresh_project_alerts(db, project, today, season)
