"""
Supervisor review state machine for a single maintenance task.

    open ──submit──▶ submitted ──approve──▶ approved ──reopen──▶ open
                         │
                         └──reject──▶ rejected (back in the open pool, resubmittable)

Transitions mutate the task in place and raise TaskReviewError on an invalid
move. Completion (lifecycle.is_task_complete) follows from the resulting
status/review_state, so an approval anchors the next cadence and a reopen
makes the previous anchor stale. Callers recompute schedules from a fresh
snapshot after every transition.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from fastapi import status

from app.core.errors import TaskReviewError
from app.services.lifecycle import is_task_complete
from app.services.tree_condition import TreeStatus, normalize_name, normalize_tree_status


class TaskStatus(str, Enum):
    open = "open"
    pending = "pending"
    done = "done"
    completed = "completed"
    closed = "closed"


class ReviewState(str, Enum):
    none = "none"
    submitted = "submitted"
    approved = "approved"
    rejected = "rejected"


class ReviewDecision(str, Enum):
    approve = "approve"
    reject = "reject"


DEFAULT_APPROVAL_NOTE = "Approved by supervisor."
DEFAULT_REOPEN_REASON = "Reopened for correction."

_TREE_STATUS_VALUES = {s.value for s in TreeStatus}


def _review_state(task) -> str:
    return normalize_name(task.review_state or ReviewState.none.value)


def validate_reported_status(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    normalized = normalize_tree_status(value)
    if normalized not in _TREE_STATUS_VALUES:
        raise TaskReviewError(f"Unknown tree status '{value}'", status.HTTP_400_BAD_REQUEST)
    return normalized


def submit_task(
    task,
    notes: Optional[str],
    now: datetime,
    photo_url: Optional[str] = None,
    reported_tree_status: Optional[str] = None,
) -> None:
    """Field officer hands the task in for review."""
    if is_task_complete(task.status, task.review_state):
        raise TaskReviewError(f"Task #{task.id} is already complete")
    if _review_state(task) == ReviewState.submitted.value:
        raise TaskReviewError(f"Task #{task.id} is already awaiting review")
    cleaned = (notes or "").strip()
    if not cleaned:
        raise TaskReviewError("Add field notes before submission.", status.HTTP_400_BAD_REQUEST)

    task.reported_tree_status = validate_reported_status(reported_tree_status) or task.reported_tree_status
    task.notes = cleaned
    if photo_url:
        task.photo_url = photo_url
    task.status = TaskStatus.done.value
    task.review_state = ReviewState.submitted.value
    task.submitted_at = now
    task.review_notes = None


def approve_task(task, reviewer_name: str, review_notes: Optional[str], now: datetime) -> None:
    if _review_state(task) != ReviewState.submitted.value:
        raise TaskReviewError(f"Task #{task.id} has not been submitted for review")
    task.review_state = ReviewState.approved.value
    task.status = TaskStatus.done.value
    task.reviewed_by = reviewer_name
    task.reviewed_at = now
    task.review_notes = (review_notes or "").strip() or DEFAULT_APPROVAL_NOTE
    task.completed_at = task.submitted_at or now


def reject_task(task, reviewer_name: str, review_notes: Optional[str], now: datetime) -> None:
    cleaned = (review_notes or "").strip()
    if not cleaned:
        raise TaskReviewError("Write a rejection note before rejecting.", status.HTTP_400_BAD_REQUEST)
    if _review_state(task) != ReviewState.submitted.value:
        raise TaskReviewError(f"Task #{task.id} has not been submitted for review")
    task.review_state = ReviewState.rejected.value
    task.status = TaskStatus.open.value
    task.reviewed_by = reviewer_name
    task.reviewed_at = now
    task.review_notes = cleaned
    task.completed_at = None


def review_task(
    task,
    decision: ReviewDecision,
    reviewer_name: str,
    review_notes: Optional[str],
    now: datetime,
) -> None:
    if ReviewDecision(decision) is ReviewDecision.approve:
        approve_task(task, reviewer_name, review_notes, now)
    else:
        reject_task(task, reviewer_name, review_notes, now)


def reopen_task(task, reviewer_name: str, reason: Optional[str], now: datetime) -> None:
    """Supervisor pulls an approved task back into the open pool."""
    if _review_state(task) != ReviewState.approved.value:
        raise TaskReviewError(f"Only approved tasks can be reopened (task #{task.id} is '{_review_state(task)}')")
    task.status = TaskStatus.open.value
    task.review_state = ReviewState.none.value
    task.completed_at = None
    task.reviewed_by = reviewer_name
    task.reviewed_at = now
    task.review_notes = (reason or "").strip() or DEFAULT_REOPEN_REASON
