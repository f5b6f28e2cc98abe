from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from app.services.maintenance_intervals import Season
from app.services.tree_condition import MAX_MATURITY_YEARS, MIN_MATURITY_YEARS


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    location_text: Optional[str] = None
    sponsor: Optional[str] = None
    season_mode: Season = Season.rainy


class ProjectSettingsUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    location_text: Optional[str] = None
    sponsor: Optional[str] = None
    season_mode: Optional[Season] = None


class ProjectRead(BaseModel):
    id: int
    name: str
    location_text: Optional[str] = None
    sponsor: Optional[str] = None
    season_mode: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SpeciesMaturityUpsert(BaseModel):
    species_key: str = Field(min_length=1, max_length=120)
    species_label: Optional[str] = None
    maturity_years: int = Field(ge=MIN_MATURITY_YEARS, le=MAX_MATURITY_YEARS)
    updated_by: Optional[str] = None

    @field_validator("species_key")
    @classmethod
    def normalize_key(cls, v: str) -> str:
        key = v.strip().lower()
        if not key:
            raise ValueError("species_key must not be blank")
        return key


class SpeciesMaturityRead(BaseModel):
    id: int
    project_id: int
    species_key: str
    species_label: Optional[str] = None
    maturity_years: int
    updated_by: Optional[str] = None
    updated_at: datetime

    model_config = {"from_attributes": True}


class SpeciesMaturityMapResponse(BaseModel):
    project_id: int
    map: dict[str, int]
    items: list[SpeciesMaturityRead]


class StaffCreate(BaseModel):
    full_name: str = Field(min_length=1, max_length=150)
    role: Literal["field_officer", "supervisor", "manager"] = "field_officer"


class StaffRead(BaseModel):
    id: int
    full_name: str
    role: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
