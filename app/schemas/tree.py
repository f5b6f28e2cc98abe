from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from app.services.tree_condition import TreeStatus, normalize_tree_status

_STATUS_VALUES = {s.value for s in TreeStatus}


def _validate_status(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    normalized = normalize_tree_status(v)
    if normalized not in _STATUS_VALUES:
        raise ValueError(f"Unknown tree status '{v}'")
    return normalized


class TreeCreate(BaseModel):
    project_id: int
    species: Optional[str] = None
    status: str = TreeStatus.healthy.value
    planting_date: Optional[date] = None
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lng: Optional[float] = Field(default=None, ge=-180, le=180)
    tree_height_m: Optional[float] = Field(default=None, ge=0, le=120)
    tree_origin: Literal["new_planting", "existing_inventory", "natural_regeneration"] = "new_planting"
    attribution_scope: Literal["full", "monitor_only"] = "full"
    count_in_planting_kpis: bool = True
    count_in_carbon_scope: bool = True
    created_by: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, v: Optional[str]) -> Optional[str]:
        return _validate_status(v)


class TreeUpdate(BaseModel):
    species: Optional[str] = None
    status: Optional[str] = None
    planting_date: Optional[date] = None
    tree_height_m: Optional[float] = Field(default=None, ge=0, le=120)
    notes: Optional[str] = None
    actor_name: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, v: Optional[str]) -> Optional[str]:
        return _validate_status(v)


class TreeRead(BaseModel):
    id: int
    project_id: int
    species: Optional[str] = None
    status: str
    planting_date: Optional[date] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    tree_height_m: Optional[float] = None
    tree_origin: str
    attribution_scope: str
    count_in_planting_kpis: bool
    count_in_carbon_scope: bool
    created_by: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskEventRead(BaseModel):
    id: int
    tree_id: int
    task_id: Optional[int] = None
    event_type: str
    actor_name: Optional[str] = None
    notes: Optional[str] = None
    details: Optional[dict] = None
    created_at: datetime

    model_config = {"from_attributes": True}
