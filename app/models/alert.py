from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Date, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class MaintenanceAlert(Base):
    __tablename__ = "maintenance_alerts"

    id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("green_projects.id", ondelete="CASCADE"), index=True)
    tree_id: Mapped[int] = mapped_column(ForeignKey("green_trees.id", ondelete="CASCADE"), index=True)
    activity: Mapped[str] = mapped_column(
        Enum("watering", "weeding", "protection", "inspection", "replacement", name="alert_activity_enum")
    )
    tone: Mapped[str] = mapped_column(
        Enum("danger", "warning", "info", "ok", name="schedule_tone_enum"), default="danger"
    )
    message: Mapped[str] = mapped_column(String(300))
    detail: Mapped[Optional[str]] = mapped_column(Text)
    due_date: Mapped[Optional[date]] = mapped_column(Date)
    status: Mapped[str] = mapped_column(
        Enum("open", "resolved", name="alert_status_enum"), default="open", index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    project: Mapped["Project"] = relationship(back_populates="alerts")
