"""
Immutable input snapshot for the maintenance schedule engine.

Built once per request/job from the database (see project_service.load_project_snapshot)
and never mutated; a review action produces a new snapshot and a full recompute.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class TreeSnapshot:
    id: int
    status: Optional[str] = None
    species: Optional[str] = None
    planting_date: Optional[date] = None
    created_by: Optional[str] = None

    @classmethod
    def from_orm(cls, tree: Any) -> "TreeSnapshot":
        return cls(
            id=tree.id,
            status=tree.status,
            species=tree.species,
            planting_date=tree.planting_date,
            created_by=tree.created_by,
        )


@dataclass(frozen=True)
class TaskSnapshot:
    id: int
    tree_id: int
    task_type: str
    status: Optional[str] = None
    # None means the task predates review (legacy orders), see lifecycle.is_task_complete
    review_state: Optional[str] = None
    assignee_name: Optional[str] = None
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_orm(cls, task: Any) -> "TaskSnapshot":
        return cls(
            id=task.id,
            tree_id=task.tree_id,
            task_type=task.task_type,
            status=task.status,
            review_state=task.review_state,
            assignee_name=task.assignee_name,
            due_date=task.due_date,
            completed_at=task.completed_at,
            created_at=task.created_at,
        )


@dataclass(frozen=True)
class ScheduleSnapshot:
    trees: tuple[TreeSnapshot, ...] = ()
    tasks: tuple[TaskSnapshot, ...] = ()
    maturity_map: Mapping[str, int] = field(default_factory=dict)
