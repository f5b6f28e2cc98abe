from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from app.services.maintenance_intervals import Season


class LiveMaintenanceRow(BaseModel):
    key: str
    tree_id: int
    assignee: str
    activity: str
    activity_label: str
    planting_date: Optional[date] = None
    tree_age_days: Optional[int] = None
    last_done_at: Optional[date] = None
    model_due_date: Optional[date] = None
    assigned_due_date: Optional[date] = None
    effective_due_date: Optional[date] = None
    countdown_days: Optional[int] = None
    tone: str
    indicator_text: str
    status_text: str
    done_count: int
    pending_count: int
    overdue_count: int
    open_task_id: Optional[int] = None
    rationale_text: str
    blocked: bool
    block_reason: Optional[str] = None


class LiveMaintenanceSummary(BaseModel):
    total: int
    danger: int
    warning: int
    ok: int
    info: int
    due_soon: int


class SourceLink(BaseModel):
    label: str
    url: str


class LiveMaintenanceResponse(BaseModel):
    project_id: int
    season_mode: Season
    as_of: date
    assignee_name: Optional[str] = None
    rows: list[LiveMaintenanceRow]
    summary: LiveMaintenanceSummary
    sources: list[SourceLink]


class MaintenanceAlertRead(BaseModel):
    id: int
    project_id: int
    tree_id: int
    activity: str
    tone: str
    message: str
    detail: Optional[str] = None
    due_date: Optional[date] = None
    status: str
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
