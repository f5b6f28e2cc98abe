from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Project(Base):
    __tablename__ = "green_projects"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200))
    location_text: Mapped[Optional[str]] = mapped_column(Text)
    sponsor: Mapped[Optional[str]] = mapped_column(String(200))
    season_mode: Mapped[str] = mapped_column(
        Enum("rainy", "dry", name="season_mode_enum"), default="rainy"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    trees: Mapped[list["Tree"]] = relationship(back_populates="project", cascade="all, delete-orphan")
    species_maturity: Mapped[list["SpeciesMaturity"]] = relationship(
        back_populates="project", cascade="all, delete-orphan"
    )
    alerts: Mapped[list["MaintenanceAlert"]] = relationship(back_populates="project", cascade="all, delete-orphan")


class SpeciesMaturity(Base):
    """Per-project maturity peg: normalized species name → self-sustaining age in years."""

    __tablename__ = "species_maturity"
    __table_args__ = (UniqueConstraint("project_id", "species_key", name="uq_species_maturity_project_species"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("green_projects.id", ondelete="CASCADE"), index=True)
    species_key: Mapped[str] = mapped_column(String(120))
    species_label: Mapped[Optional[str]] = mapped_column(String(200))
    maturity_years: Mapped[int] = mapped_column(Integer)
    updated_by: Mapped[Optional[str]] = mapped_column(String(150))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    project: Mapped["Project"] = relationship(back_populates="species_maturity")


class StaffMember(Base):
    __tablename__ = "green_staff"

    id: Mapped[int] = mapped_column(primary_key=True)
    full_name: Mapped[str] = mapped_column(String(150), unique=True, index=True)
    role: Mapped[str] = mapped_column(
        Enum("field_officer", "supervisor", "manager", name="staff_role_enum"), default="field_officer"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
