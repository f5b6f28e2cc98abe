from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from app.services.maintenance_intervals import Activity, Season
from app.services.task_review import ReviewDecision


class TaskAssign(BaseModel):
    task_type: Activity
    assignee_name: str = Field(min_length=1, max_length=150)
    due_mode: Literal["model_rainy", "model_dry", "manual"] = "model_rainy"
    due_date: Optional[date] = None
    priority: Literal["low", "normal", "high"] = "normal"
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_manual_due_date(self) -> "TaskAssign":
        if self.due_mode == "manual" and self.due_date is None:
            raise ValueError("Select a custom due date when due_mode is 'manual'")
        return self

    @property
    def model_season(self) -> Optional[Season]:
        if self.due_mode == "model_rainy":
            return Season.rainy
        if self.due_mode == "model_dry":
            return Season.dry
        return None


class TaskSubmit(BaseModel):
    notes: str
    photo_url: Optional[str] = None
    tree_status: Optional[str] = None
    actor_name: Optional[str] = None


class TaskReview(BaseModel):
    decision: ReviewDecision
    reviewer_name: str = "supervisor"
    review_notes: Optional[str] = None
    season_mode: Optional[Season] = None


class TaskReopen(BaseModel):
    reviewer_name: str = "supervisor"
    reason: Optional[str] = None


class TaskRead(BaseModel):
    id: int
    tree_id: int
    task_type: str
    assignee_name: str
    status: str
    review_state: Optional[str] = None
    priority: str
    due_date: Optional[date] = None
    model_season: Optional[str] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = None
    reported_tree_status: Optional[str] = None
    review_notes: Optional[str] = None
    reviewed_by: Optional[str] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True, "protected_namespaces": ()}


class ReviewQueueItem(TaskRead):
    tree_status: Optional[str] = None
    project_id: Optional[int] = None


class ModelDuePreview(BaseModel):
    tree_id: int
    task_type: str
    season_mode: Season
    as_of: date
    due_date: Optional[date] = None
    is_past_due: bool
    blocked: bool
    block_reason: Optional[str] = None
    detail: str
    first_days: Optional[int] = None
    repeat_days: Optional[int] = None
