from app.models.project import Project, SpeciesMaturity, StaffMember
from app.models.tree import Tree, MaintenanceTask
from app.models.alert import MaintenanceAlert
from app.models.logs import TaskEvent, PipelineRun, ApiRequestLog

__all__ = [
    "Project",
    "SpeciesMaturity",
    "StaffMember",
    "Tree",
    "MaintenanceTask",
    "MaintenanceAlert",
    "TaskEvent",
    "PipelineRun",
    "ApiRequestLog",
]
