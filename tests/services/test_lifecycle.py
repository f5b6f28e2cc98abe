import time
from datetime import date, datetime, timezone

import pytest

from app.services.lifecycle import (
    age_in_days,
    is_task_complete,
    latest_complete_task,
    lifecycle_state,
    task_anchor_date,
)
from app.services.maintenance_intervals import Activity
from app.services.maintenance_schedule import build_schedule_rows
from app.services.schedule_snapshot import ScheduleSnapshot, TaskSnapshot, TreeSnapshot

TODAY = date(2024, 6, 1)


def _task(task_id, task_type="watering", tree_id=1, **kwargs) -> TaskSnapshot:
    return TaskSnapshot(id=task_id, tree_id=tree_id, task_type=task_type, **kwargs)


@pytest.mark.parametrize(
    "status, review_state, expected",
    [
        ("done", None, True),
        ("completed", "none", True),
        ("closed", "approved", True),
        ("Done", "Approved", True),
        ("done", "submitted", False),
        ("done", "rejected", False),
        ("open", "approved", False),
        ("pending", None, False),
        (None, None, False),
    ],
)
def test_is_task_complete(status, review_state, expected):
    assert is_task_complete(status, review_state) is expected


def test_anchor_prefers_completed_then_due_then_created():
    created = datetime(2024, 1, 1, 8, 0)
    assert task_anchor_date(_task(1, completed_at=datetime(2024, 3, 3), due_date=date(2024, 2, 2), created_at=created)) == date(2024, 3, 3)
    assert task_anchor_date(_task(2, due_date=date(2024, 2, 2), created_at=created)) == date(2024, 2, 2)
    assert task_anchor_date(_task(3, created_at=created)) == date(2024, 1, 1)
    assert task_anchor_date(_task(4)) is None


@pytest.fixture
def lagos_time(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "Africa/Lagos")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_anchor_uses_local_date_of_aware_timestamps(lagos_time):
    # 23:30 UTC is 00:30 the next day in Lagos (UTC+1)
    approved = datetime(2024, 6, 4, 23, 30, tzinfo=timezone.utc)
    assert task_anchor_date(_task(1, completed_at=approved)) == date(2024, 6, 5)
    assert task_anchor_date(_task(2, completed_at="2024-06-04T23:30:00+00:00")) == date(2024, 6, 5)

    # Naive timestamps are already local
    assert task_anchor_date(_task(3, completed_at=datetime(2024, 6, 4, 23, 30))) == date(2024, 6, 4)


def test_repeat_cadence_counts_from_local_approval_date(lagos_time):
    tree = TreeSnapshot(id=1, status="healthy", planting_date=date(2024, 5, 1))
    tasks = [
        _task(1, status="done", review_state="approved", completed_at=datetime(2024, 6, 4, 23, 30, tzinfo=timezone.utc)),
    ]
    today = date(2024, 6, 5)
    snapshot = ScheduleSnapshot(trees=(tree,), tasks=tuple(tasks), maturity_map={})
    row = next(r for r in build_schedule_rows(snapshot, "rainy", today) if r.activity is Activity.watering)
    assert row.last_done_at == today
    # Rainy watering for a young tree repeats every 14 days
    assert row.model_due_date == date(2024, 6, 19)
    assert row.countdown_days == 14


def test_latest_complete_task_skips_incomplete_and_other_activities():
    tasks = [
        _task(1, status="done", review_state="approved", completed_at=datetime(2024, 1, 10)),
        _task(2, status="done", review_state="rejected", completed_at=datetime(2024, 1, 20)),
        _task(3, task_type="weeding", status="done", review_state=None, completed_at=datetime(2024, 1, 30)),
    ]
    assert latest_complete_task(tasks, Activity.watering).id == 1
    assert latest_complete_task(tasks).id == 3
    assert latest_complete_task(tasks, Activity.protection) is None


def test_age_in_days():
    assert age_in_days(None, TODAY) == 0
    assert age_in_days(date(2024, 5, 22), TODAY) == 10
    assert age_in_days(date(2024, 6, 10), TODAY) == 0


def test_lifecycle_starts_at_planting_date():
    tree = TreeSnapshot(id=1, status="healthy", planting_date=date(2024, 5, 1))
    state = lifecycle_state(tree, [], TODAY)
    assert state.start_date == date(2024, 5, 1)
    assert state.age_days == 31
    assert state.replacement_date is None
    assert not state.reset_by_replacement


def test_later_completed_replacement_resets_lifecycle():
    tree = TreeSnapshot(id=1, status="healthy", planting_date=date(2023, 1, 1))
    tasks = [
        _task(1, "replacement", status="done", review_state="approved", completed_at=datetime(2024, 5, 1, 9)),
        # Other trees' history is ignored
        _task(2, "replacement", tree_id=2, status="done", review_state=None, completed_at=datetime(2024, 5, 25)),
    ]
    state = lifecycle_state(tree, tasks, TODAY)
    assert state.start_date == date(2024, 5, 1)
    assert state.age_days == 31
    assert state.reset_by_replacement


def test_replacement_before_planting_does_not_move_start():
    tree = TreeSnapshot(id=1, status="healthy", planting_date=date(2024, 4, 1))
    tasks = [_task(1, "replacement", status="done", review_state=None, due_date=date(2024, 3, 1))]
    state = lifecycle_state(tree, tasks, TODAY)
    assert state.start_date == date(2024, 4, 1)
    assert state.replacement_date == date(2024, 3, 1)
    assert not state.reset_by_replacement


def test_submitted_replacement_does_not_count():
    tree = TreeSnapshot(id=1, status="healthy", planting_date=None)
    tasks = [_task(1, "replacement", status="done", review_state="submitted", completed_at=datetime(2024, 5, 1))]
    state = lifecycle_state(tree, tasks, TODAY)
    assert state.start_date is None
    assert state.age_days == 0
    assert not state.has_start
