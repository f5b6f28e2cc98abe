from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Enum, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Tree(Base):
    __tablename__ = "green_trees"

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("green_projects.id", ondelete="CASCADE"), index=True)

    species: Mapped[Optional[str]] = mapped_column(String(200))
    # Normalized condition tag (see services.tree_condition); free text so legacy values survive import
    status: Mapped[str] = mapped_column(String(50), default="healthy")
    planting_date: Mapped[Optional[date]] = mapped_column(Date)

    lat: Mapped[Optional[float]] = mapped_column(Float)
    lng: Mapped[Optional[float]] = mapped_column(Float)
    tree_height_m: Mapped[Optional[float]] = mapped_column(Float)
    tree_origin: Mapped[str] = mapped_column(
        Enum("new_planting", "existing_inventory", "natural_regeneration", name="tree_origin_enum"),
        default="new_planting",
    )
    attribution_scope: Mapped[str] = mapped_column(
        Enum("full", "monitor_only", name="attribution_scope_enum"), default="full"
    )
    count_in_planting_kpis: Mapped[bool] = mapped_column(Boolean, default=True)
    count_in_carbon_scope: Mapped[bool] = mapped_column(Boolean, default=True)

    created_by: Mapped[Optional[str]] = mapped_column(String(150), index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    project: Mapped["Project"] = relationship(back_populates="trees")
    tasks: Mapped[list["MaintenanceTask"]] = relationship(back_populates="tree", cascade="all, delete-orphan")
    events: Mapped[list["TaskEvent"]] = relationship(back_populates="tree", cascade="all, delete-orphan")


class MaintenanceTask(Base):
    __tablename__ = "maintenance_tasks"

    id: Mapped[int] = mapped_column(primary_key=True)
    tree_id: Mapped[int] = mapped_column(ForeignKey("green_trees.id", ondelete="CASCADE"), index=True)

    task_type: Mapped[str] = mapped_column(
        Enum("watering", "weeding", "protection", "inspection", "replacement", name="maintenance_task_type_enum")
    )
    assignee_name: Mapped[str] = mapped_column(String(150), index=True)
    status: Mapped[str] = mapped_column(
        Enum("open", "pending", "done", "completed", "closed", name="maintenance_task_status_enum"),
        default="open",
    )
    # NULL = legacy task without a review step
    review_state: Mapped[Optional[str]] = mapped_column(
        Enum("none", "submitted", "approved", "rejected", name="task_review_state_enum"),
        default="none",
        nullable=True,
    )
    priority: Mapped[str] = mapped_column(
        Enum("low", "normal", "high", name="task_priority_enum"), default="normal"
    )

    due_date: Mapped[Optional[date]] = mapped_column(Date, index=True)
    model_season: Mapped[Optional[str]] = mapped_column(String(10))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    photo_url: Mapped[Optional[str]] = mapped_column(String(500))
    reported_tree_status: Mapped[Optional[str]] = mapped_column(String(50))

    review_notes: Mapped[Optional[str]] = mapped_column(Text)
    reviewed_by: Mapped[Optional[str]] = mapped_column(String(150))
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    tree: Mapped["Tree"] = relationship(back_populates="tasks")
    events: Mapped[list["TaskEvent"]] = relationship(back_populates="task")
