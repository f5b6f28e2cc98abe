"""
Lifecycle clock: task completion, cadence anchors and a tree's lifecycle start/age.

All functions take `today` explicitly; nothing here reads the wall clock.
"""
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable, Optional, Union

from app.services.maintenance_intervals import Activity, as_activity
from app.services.tree_condition import normalize_name

DateLike = Union[date, datetime, str, None]

COMPLETE_TASK_STATUSES = frozenset({"done", "completed", "closed"})
COMPLETE_REVIEW_STATES = frozenset({"none", "approved"})


@dataclass(frozen=True)
class LifecycleState:
    start_date: Optional[date]
    age_days: int
    # Anchor of the latest complete replacement, when one exists
    replacement_date: Optional[date] = None

    @property
    def has_start(self) -> bool:
        return self.start_date is not None

    @property
    def reset_by_replacement(self) -> bool:
        return self.replacement_date is not None and self.replacement_date == self.start_date


def is_task_complete(status: Optional[str], review_state: Optional[str]) -> bool:
    """
    A task counts as complete when its status is done-like and review allows it.

    review_state None means the task has no review concept (legacy orders) and
    is accepted as-is. A done task still awaiting review ('submitted') or
    'rejected' is not complete.
    """
    if normalize_name(status) not in COMPLETE_TASK_STATUSES:
        return False
    if review_state is None:
        return True
    return normalize_name(review_state or "none") in COMPLETE_REVIEW_STATES


def _to_datetime(value: DateLike) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value) if len(value) > 10 else date.fromisoformat(value)
        except ValueError:
            return None
    if isinstance(value, datetime):
        # Calendar arithmetic is timezone-naive on the server's local calendar
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.replace(tzinfo=None)
    return datetime.combine(value, time.min)


def to_date(value: DateLike) -> Optional[date]:
    parsed = _to_datetime(value)
    return parsed.date() if parsed else None


def task_anchor_value(task) -> DateLike:
    """First present of completed_at, due_date, created_at."""
    for value in (task.completed_at, task.due_date, task.created_at):
        if value:
            return value
    return None


def task_anchor_date(task) -> Optional[date]:
    return to_date(task_anchor_value(task))


def _sort_stamp(task) -> datetime:
    return _to_datetime(task_anchor_value(task)) or datetime.min


def latest_complete_task(tasks: Iterable, activity: Optional[Activity] = None):
    """Most recently completed task (by anchor), optionally restricted to one activity."""
    latest = None
    latest_stamp = None
    for task in tasks:
        if activity is not None and as_activity(task.task_type) is not activity:
            continue
        if not is_task_complete(task.status, task.review_state):
            continue
        stamp = _sort_stamp(task)
        if latest is None or stamp > latest_stamp:
            latest, latest_stamp = task, stamp
    return latest


def lifecycle_start_date(
    planting_date: Optional[date], replacement_date: Optional[date]
) -> Optional[date]:
    if planting_date and replacement_date:
        return replacement_date if replacement_date > planting_date else planting_date
    return replacement_date or planting_date


def age_in_days(start_date: Optional[date], today: date) -> int:
    if start_date is None:
        return 0
    return max((today - start_date).days, 0)


def lifecycle_state(tree, tasks: Iterable, today: date) -> LifecycleState:
    """
    Lifecycle start = later of planting date and latest complete replacement.

    `tasks` may contain other trees' tasks; only this tree's are considered.
    """
    own_tasks = [t for t in tasks if t.tree_id == tree.id]
    replacement = latest_complete_task(own_tasks, Activity.replacement)
    replacement_date = task_anchor_date(replacement) if replacement else None
    start = lifecycle_start_date(to_date(tree.planting_date), replacement_date)
    return LifecycleState(
        start_date=start,
        age_days=age_in_days(start, today),
        replacement_date=replacement_date,
    )
