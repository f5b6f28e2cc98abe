"""
Maintenance schedule engine.

For every (tree, activity) pair derives the model due date (cadence from the
seasonal interval table), the assigned due date (earliest open task), the
effective due date, a countdown, a severity tone and the human-readable
indicator/status/rationale shown to supervisors.

Pure and synchronous: a function of (snapshot, season, today). It never reads the
clock, never touches the database and never raises for missing data; absent
dates or maturity pegs only change which branch a row takes. Rows are always
recomputed in full from a fresh snapshot; there is no incremental update path.
"""
import sys
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Mapping, Optional

from app.services.lifecycle import (
    LifecycleState,
    is_task_complete,
    latest_complete_task,
    lifecycle_state,
    task_anchor_date,
    to_date,
)
from app.services.maintenance_intervals import (
    ACTIVITY_ORDER,
    MAINTENANCE_MODEL,
    REPLACEMENT_RATIONALE,
    SEASON_LABEL,
    Activity,
    MaintenanceIntervals,
    Season,
    activity_label,
    as_activity,
    get_maintenance_intervals,
    parse_season,
)
from app.services.schedule_snapshot import ScheduleSnapshot, TreeSnapshot
from app.services.tree_condition import (
    TreeStatus,
    get_species_maturity_years,
    is_mature,
    needs_replacement,
    normalize_name,
    normalize_tree_status,
    tree_status_label,
)

DUE_SOON_DAYS = 7
ASSIGNED_DUE_SOON_DAYS = 3


class Tone(str, Enum):
    danger = "danger"
    warning = "warning"
    info = "info"
    ok = "ok"


TONE_RANK: dict[Tone, int] = {
    Tone.danger: 0,
    Tone.warning: 1,
    Tone.info: 2,
    Tone.ok: 3,
}


class BlockReason(str, Enum):
    replacement_required = "replacement_required"
    replacement_not_applicable = "replacement_not_applicable"
    lifecycle_complete = "lifecycle_complete"


# Inspection findings that force an immediate visit for one activity
URGENT_STATUS_ACTIVITY: dict[str, Activity] = {
    TreeStatus.need_watering.value: Activity.watering,
    TreeStatus.need_protection.value: Activity.protection,
}


@dataclass(frozen=True)
class ModelDue:
    due_date: Optional[date]
    detail: str
    blocked: bool
    block_reason: Optional[BlockReason] = None
    intervals: Optional[MaintenanceIntervals] = None


@dataclass(frozen=True)
class ScheduleRow:
    tree_id: int
    assignee: str
    activity: Activity
    activity_label: str
    planting_date: Optional[date]
    tree_age_days: Optional[int]
    last_done_at: Optional[date]
    model_due_date: Optional[date]
    assigned_due_date: Optional[date]
    effective_due_date: Optional[date]
    countdown_days: Optional[int]
    tone: Tone
    indicator_text: str
    status_text: str
    done_count: int
    pending_count: int
    overdue_count: int
    open_task_id: Optional[int]
    rationale_text: str
    blocked: bool = False
    block_reason: Optional[BlockReason] = None

    @property
    def key(self) -> str:
        return f"{self.tree_id}-{self.activity.value}"


@dataclass(frozen=True)
class ScheduleSummary:
    total: int = 0
    danger: int = 0
    warning: int = 0
    ok: int = 0
    info: int = 0
    due_soon: int = 0


@dataclass(frozen=True)
class _TreeContext:
    tree: TreeSnapshot
    status: str
    replacement_required: bool
    lifecycle: LifecycleState
    maturity_years: Optional[float]
    mature: bool


# ── Helpers ───────────────────────────────────────────────────────────────────


def _plural_days(n: int) -> str:
    return f"{n} day" if n == 1 else f"{n} days"


def _tree_context(tree: TreeSnapshot, tasks: Iterable, maturity_map: Mapping[str, int], today: date) -> _TreeContext:
    status = normalize_tree_status(tree.status)
    lifecycle = lifecycle_state(tree, tasks, today)
    years = get_species_maturity_years(tree.species, maturity_map)
    mature = lifecycle.has_start and is_mature(tree, lifecycle.age_days, maturity_map)
    return _TreeContext(
        tree=tree,
        status=status,
        replacement_required=needs_replacement(status),
        lifecycle=lifecycle,
        maturity_years=years,
        mature=mature,
    )


def _format_years(years: Optional[float]) -> str:
    if years is None:
        return "-"
    return str(int(years)) if float(years).is_integer() else str(years)


def _resolve_model_due(
    ctx: _TreeContext,
    activity: Activity,
    latest_done_date: Optional[date],
    season: Season,
    today: date,
) -> ModelDue:
    """Override policy first (replacement, maturity, urgent flags), then cadence."""
    status_label = tree_status_label(ctx.status)

    if ctx.replacement_required and activity is not Activity.replacement:
        return ModelDue(
            due_date=None,
            detail=(
                f"Tree status is '{status_label}'. Assign replacement first, "
                "then continue maintenance after replanting."
            ),
            blocked=True,
            block_reason=BlockReason.replacement_required,
        )

    if ctx.replacement_required:
        return ModelDue(
            due_date=today,
            detail=f"Tree status is '{status_label}'. Replacement is due immediately (today).",
            blocked=False,
        )

    if activity is Activity.replacement:
        return ModelDue(
            due_date=None,
            detail=f"Replacement is condition-triggered only. Current tree status is '{status_label}'.",
            blocked=True,
            block_reason=BlockReason.replacement_not_applicable,
        )

    if ctx.mature:
        return ModelDue(
            due_date=None,
            detail=(
                f"Tree reached self-sustaining stage (~{_format_years(ctx.maturity_years)} years). "
                "Model schedule is closed unless you use custom intervention."
            ),
            blocked=True,
            block_reason=BlockReason.lifecycle_complete,
        )

    intervals = get_maintenance_intervals(activity, ctx.lifecycle.age_days, season)
    label = MAINTENANCE_MODEL[activity].label
    season_label = SEASON_LABEL[season]

    if URGENT_STATUS_ACTIVITY.get(ctx.status) is activity:
        return ModelDue(
            due_date=today,
            detail=f"Inspection flagged '{status_label}'. {label} is due immediately (today).",
            blocked=False,
            intervals=intervals,
        )

    if latest_done_date:
        return ModelDue(
            due_date=latest_done_date + timedelta(days=intervals.repeat_days),
            detail=f"{label} model from last completed cycle (+{intervals.repeat_days} days, {season_label}).",
            blocked=False,
            intervals=intervals,
        )

    if ctx.lifecycle.start_date:
        return ModelDue(
            due_date=ctx.lifecycle.start_date + timedelta(days=intervals.first_days),
            detail=f"{label} model from lifecycle start (+{intervals.first_days} days, {season_label}).",
            blocked=False,
            intervals=intervals,
        )

    return ModelDue(
        due_date=None,
        detail="No planting date found; choose custom date or set planting date.",
        blocked=False,
        intervals=intervals,
    )


def _open_task_order(task) -> tuple:
    anchor = to_date(task.due_date or task.created_at)
    return (anchor is None, anchor or date.min, task.id)


def _is_overdue(task, today: date) -> bool:
    if is_task_complete(task.status, task.review_state):
        return False
    due = to_date(task.due_date)
    return due is not None and due < today


def _classify(
    ctx: _TreeContext,
    activity: Activity,
    active_task,
    countdown: Optional[int],
    done_count: int,
    pending_count: int,
) -> tuple[Tone, str, str]:
    """Tone, indicator and status text; first matching branch wins."""
    status_label = tree_status_label(ctx.status)
    task_text = None
    if active_task is not None:
        task_text = f"Task #{active_task.id} {active_task.status or 'pending'}"

    if ctx.replacement_required and activity is not Activity.replacement:
        status_text = f"Task #{active_task.id} paused until replacement" if active_task else "Paused until replacement/replant"
        return Tone.danger, f"Tree status '{status_label}' requires replacement", status_text

    if ctx.replacement_required:
        if active_task is None:
            return Tone.danger, "Replacement required immediately", "Assign replacement now"
        if countdown is not None and countdown < 0:
            return Tone.danger, f"Replacement overdue by {_plural_days(abs(countdown))}", task_text
        if countdown is not None and countdown <= ASSIGNED_DUE_SOON_DAYS:
            return Tone.warning, f"Replacement due in {_plural_days(countdown)}", task_text
        return Tone.warning, "Replacement assigned", task_text

    if activity is Activity.replacement:
        return Tone.ok, "Replacement not required", "Condition-triggered only"

    if URGENT_STATUS_ACTIVITY.get(ctx.status) is activity:
        flag = ctx.status.replace("_", " ")
        if active_task is None:
            return Tone.danger, f"Inspection flagged {flag}", "Action required"
        return Tone.warning, f"Inspection flagged {flag}", task_text

    if ctx.mature:
        years = _format_years(ctx.maturity_years)
        if pending_count > 0:
            return Tone.warning, f"Lifecycle complete (~{years} years), close pending tasks", "Self-sustaining stage reached"
        return Tone.ok, f"Lifecycle complete (~{years} years)", "Self-sustaining stage reached"

    if not ctx.lifecycle.has_start and active_task is None:
        return Tone.info, "Lifecycle start date missing", "Set planting date or replacement completion date"

    if active_task is not None:
        if countdown is not None and countdown < 0:
            return Tone.danger, f"Overdue by {_plural_days(abs(countdown))}", task_text
        if countdown is not None and countdown <= ASSIGNED_DUE_SOON_DAYS:
            return Tone.warning, f"Due in {_plural_days(countdown)}", task_text
        return Tone.warning, "Assigned and in progress", task_text

    if countdown is not None and countdown < 0:
        return Tone.danger, f"Not done, overdue by {_plural_days(abs(countdown))}", "No open task assigned"

    if countdown is not None and countdown <= DUE_SOON_DAYS:
        return Tone.warning, f"Due in {_plural_days(countdown)}", "Upcoming window"

    if done_count > 0:
        return Tone.ok, "Cycle completed", "Waiting for next cycle"

    return Tone.ok, "On schedule", "No open task"


def _rationale(ctx: _TreeContext, activity: Activity, model: ModelDue, season: Season) -> str:
    if model.blocked and activity is not Activity.replacement:
        return model.detail
    if activity is Activity.replacement:
        return REPLACEMENT_RATIONALE
    intervals = model.intervals or get_maintenance_intervals(activity, ctx.lifecycle.age_days, season)
    text = (
        f"{MAINTENANCE_MODEL[activity].rationale} {SEASON_LABEL[season]}: "
        f"first {intervals.first_days}d, repeat {intervals.repeat_days}d."
    )
    if ctx.lifecycle.replacement_date is not None:
        text += " Lifecycle reset from latest replacement completion."
    return text


def _build_row(
    ctx: _TreeContext,
    activity: Activity,
    bucket: list,
    season: Season,
    today: date,
) -> ScheduleRow:
    done_tasks = [t for t in bucket if is_task_complete(t.status, t.review_state)]
    open_tasks = [t for t in bucket if not is_task_complete(t.status, t.review_state)]
    overdue_count = sum(1 for t in open_tasks if _is_overdue(t, today))

    latest_done = latest_complete_task(done_tasks)
    latest_done_date = task_anchor_date(latest_done) if latest_done else None
    active_task = min(open_tasks, key=_open_task_order) if open_tasks else None

    model = _resolve_model_due(ctx, activity, latest_done_date, season, today)
    assigned_due = to_date(active_task.due_date) if active_task else None

    if model.due_date and assigned_due:
        effective_due = min(model.due_date, assigned_due)
    else:
        effective_due = model.due_date or assigned_due
    countdown = (effective_due - today).days if effective_due else None

    tone, indicator, status_text = _classify(
        ctx, activity, active_task, countdown, len(done_tasks), len(open_tasks)
    )

    return ScheduleRow(
        tree_id=ctx.tree.id,
        assignee=ctx.tree.created_by or "-",
        activity=activity,
        activity_label=MAINTENANCE_MODEL[activity].label,
        planting_date=to_date(ctx.tree.planting_date),
        tree_age_days=ctx.lifecycle.age_days if ctx.lifecycle.has_start else None,
        last_done_at=latest_done_date,
        model_due_date=model.due_date,
        assigned_due_date=assigned_due,
        effective_due_date=effective_due,
        countdown_days=countdown,
        tone=tone,
        indicator_text=indicator,
        status_text=status_text,
        done_count=len(done_tasks),
        pending_count=len(open_tasks),
        overdue_count=overdue_count,
        open_task_id=active_task.id if active_task else None,
        rationale_text=_rationale(ctx, activity, model, season),
        blocked=model.blocked,
        block_reason=model.block_reason,
    )


# ── Service functions ─────────────────────────────────────────────────────────


def model_due_for(
    tree: TreeSnapshot,
    activity,
    tasks: Iterable,
    season,
    maturity_map: Mapping[str, int],
    today: date,
) -> ModelDue:
    """
    Model due date for a single (tree, activity) pair, with the reason behind it.

    Used to preview/resolve the due date of a task being assigned. `tasks` may
    include other trees' tasks; only this tree's history is used.
    """
    season = parse_season(season)
    resolved = as_activity(activity)
    tasks = [t for t in tasks if t.tree_id == tree.id]
    ctx = _tree_context(tree, tasks, maturity_map, today)
    if resolved is None:
        intervals = get_maintenance_intervals(activity, ctx.lifecycle.age_days, season)
        start = ctx.lifecycle.start_date
        return ModelDue(
            due_date=start + timedelta(days=intervals.first_days) if start else None,
            detail=f"{activity_label(activity)} has no maintenance model; default cadence applied.",
            blocked=False,
            intervals=intervals,
        )
    latest = latest_complete_task(tasks, resolved)
    return _resolve_model_due(ctx, resolved, task_anchor_date(latest) if latest else None, season, today)


def row_sort_key(row: ScheduleRow) -> tuple:
    countdown = row.countdown_days if row.countdown_days is not None else sys.maxsize
    return (TONE_RANK[row.tone], countdown, row.tree_id, row.activity_label)


def sort_rows(rows: Iterable[ScheduleRow]) -> list[ScheduleRow]:
    return sorted(rows, key=row_sort_key)


def build_schedule_rows(
    snapshot: ScheduleSnapshot,
    season,
    today: date,
    assignee_name: Optional[str] = None,
    include_idle_replacement: bool = True,
) -> list[ScheduleRow]:
    """
    One row per (tree, activity), sorted for presentation.

    assignee_name scopes tasks to that assignee and trees to those the
    assignee created or holds at least one task on. Trees still pending
    planting produce no rows. Replacement rows for trees that do not need
    replacement are emitted blocked with the reason; clearing
    include_idle_replacement leaves them out.
    """
    season = parse_season(season)
    assignee_key = normalize_name(assignee_name)

    tasks = list(snapshot.tasks)
    if assignee_key:
        tasks = [t for t in tasks if normalize_name(t.assignee_name) == assignee_key]

    buckets: dict[tuple[int, Activity], list] = {}
    tasks_by_tree: dict[int, list] = {}
    for task in tasks:
        activity = as_activity(task.task_type)
        if activity is None:
            continue
        buckets.setdefault((task.tree_id, activity), []).append(task)
        tasks_by_tree.setdefault(task.tree_id, []).append(task)

    rows: list[ScheduleRow] = []
    for tree in snapshot.trees:
        if assignee_key:
            owner_match = normalize_name(tree.created_by) == assignee_key
            if not owner_match and tree.id not in tasks_by_tree:
                continue
        if normalize_tree_status(tree.status) == TreeStatus.pending_planting.value:
            continue

        ctx = _tree_context(tree, tasks_by_tree.get(tree.id, []), snapshot.maturity_map, today)
        for activity in ACTIVITY_ORDER:
            if activity is Activity.replacement and not ctx.replacement_required and not include_idle_replacement:
                continue
            rows.append(_build_row(ctx, activity, buckets.get((tree.id, activity), []), season, today))

    return sort_rows(rows)


def summarize_rows(rows: Iterable[ScheduleRow]) -> ScheduleSummary:
    counts = {tone: 0 for tone in Tone}
    total = 0
    due_soon = 0
    for row in rows:
        total += 1
        counts[row.tone] += 1
        if row.countdown_days is not None and 0 <= row.countdown_days <= DUE_SOON_DAYS:
            due_soon += 1
    return ScheduleSummary(
        total=total,
        danger=counts[Tone.danger],
        warning=counts[Tone.warning],
        ok=counts[Tone.ok],
        info=counts[Tone.info],
        due_soon=due_soon,
    )
