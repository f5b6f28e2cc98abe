"""
Seasonal maintenance interval table.

Maps (activity, tree age in days, season) to the number of days before the first
cycle and between repeat cycles. Rules are age-banded and season-aware.
Total: every activity/age/season combination resolves to an interval pair.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Activity(str, Enum):
    watering = "watering"
    weeding = "weeding"
    protection = "protection"
    inspection = "inspection"
    replacement = "replacement"


class Season(str, Enum):
    rainy = "rainy"
    dry = "dry"


# Presentation order of a tree's activities
ACTIVITY_ORDER: list[Activity] = list(Activity)

SEASON_LABEL: dict[Season, str] = {
    Season.rainy: "Rainy Season",
    Season.dry: "Dry Season",
}


@dataclass(frozen=True)
class MaintenanceModel:
    label: str
    rationale: str


MAINTENANCE_MODEL: dict[Activity, MaintenanceModel] = {
    Activity.watering: MaintenanceModel(
        "Watering",
        "Early establishment needs frequent moisture checks; interval increases as trees establish.",
    ),
    Activity.weeding: MaintenanceModel(
        "Weeding",
        "Heavy control in years 1-2, then reduced cycle once canopy suppression improves.",
    ),
    Activity.protection: MaintenanceModel(
        "Protection",
        "Protection checks should be continuous, with tighter monitoring in dry-season risk windows.",
    ),
    Activity.inspection: MaintenanceModel(
        "Inspection",
        "Early fortnight check, then monthly in establishment period, then quarterly supervision.",
    ),
    Activity.replacement: MaintenanceModel(
        "Replacement",
        "Initial refill around week 6-8 with later mortality checks in follow-up cycles.",
    ),
}

REPLACEMENT_RATIONALE = (
    "Replacement is condition-triggered (dead/damaged/removed/needs replacement), "
    "not a routine cyclical task."
)

# References behind the interval table, surfaced alongside live maintenance rows
INTERVAL_SOURCES: list[dict[str, str]] = [
    {
        "label": "FAO - Forest restoration monitoring and maintenance sequence",
        "url": "https://www.fao.org/sustainable-forest-management-toolbox/modules/forest-restoration/en",
    },
    {
        "label": "FAO - Post-planting operations (watering, protection, replacement)",
        "url": "https://www.fao.org/4/u2247e/u2247e0a.htm",
    },
    {
        "label": "FAO - Savanna plantation field maintenance practices (Nigeria-relevant context)",
        "url": "https://www.fao.org/4/93269e/93269e03.htm",
    },
    {
        "label": "NiMet seasonal outlook context for local onset/dry-period planning",
        "url": "https://www.nimet.gov.ng/news?id=94",
    },
]


@dataclass(frozen=True)
class MaintenanceIntervals:
    first_days: int
    repeat_days: int


@dataclass(frozen=True)
class IntervalRule:
    activity: Activity
    season: Season
    below_age_days: Optional[int]   # None = applies to any remaining age
    first_days: int
    repeat_days: int


DEFAULT_INTERVALS = MaintenanceIntervals(first_days=30, repeat_days=90)


# ── Rule table ────────────────────────────────────────────────────────────────
# Rules for one (activity, season) are ordered youngest band first; the first
# rule whose band contains the tree's age wins.

_RULES: list[IntervalRule] = [
    # ── Watering ──────────────────────────────────────────────────────────────
    IntervalRule(Activity.watering, Season.rainy, 90, 0, 14),
    IntervalRule(Activity.watering, Season.rainy, None, 0, 21),
    IntervalRule(Activity.watering, Season.dry, 90, 0, 5),
    IntervalRule(Activity.watering, Season.dry, None, 0, 7),

    # ── Weeding ───────────────────────────────────────────────────────────────
    IntervalRule(Activity.weeding, Season.rainy, 365, 21, 45),
    IntervalRule(Activity.weeding, Season.rainy, 730, 30, 90),
    IntervalRule(Activity.weeding, Season.rainy, None, 30, 150),
    IntervalRule(Activity.weeding, Season.dry, 365, 35, 90),
    IntervalRule(Activity.weeding, Season.dry, 730, 45, 150),
    IntervalRule(Activity.weeding, Season.dry, None, 45, 210),

    # ── Protection ────────────────────────────────────────────────────────────
    IntervalRule(Activity.protection, Season.rainy, None, 0, 45),
    IntervalRule(Activity.protection, Season.dry, None, 0, 21),

    # ── Inspection ────────────────────────────────────────────────────────────
    IntervalRule(Activity.inspection, Season.rainy, 180, 14, 30),
    IntervalRule(Activity.inspection, Season.rainy, None, 14, 90),
    IntervalRule(Activity.inspection, Season.dry, 180, 7, 21),
    IntervalRule(Activity.inspection, Season.dry, None, 7, 60),

    # ── Replacement ───────────────────────────────────────────────────────────
    IntervalRule(Activity.replacement, Season.rainy, None, 42, 180),
    IntervalRule(Activity.replacement, Season.dry, None, 56, 210),
]


# ── Service functions ─────────────────────────────────────────────────────────

def as_activity(value) -> Optional[Activity]:
    """Normalize a task type string to an Activity, or None if it is not one."""
    if isinstance(value, Activity):
        return value
    key = (value or "").strip().lower()
    try:
        return Activity(key)
    except ValueError:
        return None


def parse_season(value) -> Season:
    """
    Strict season parsing for caller-side validation.

    Raises ValueError for anything outside rainy/dry; the engine never guesses.
    """
    if isinstance(value, Season):
        return value
    key = (value or "").strip().lower() if isinstance(value, str) else value
    try:
        return Season(key)
    except ValueError:
        raise ValueError(f"Invalid season {value!r}; expected 'rainy' or 'dry'") from None


def activity_label(activity) -> str:
    resolved = as_activity(activity)
    if resolved is None:
        parts = [p for p in str(activity or "").split("_") if p]
        return " ".join(p[:1].upper() + p[1:] for p in parts) or "Task"
    return MAINTENANCE_MODEL[resolved].label


def get_maintenance_intervals(activity, age_days: int, season) -> MaintenanceIntervals:
    """
    Returns the first/repeat interval pair for an activity at a given tree age.

    Unknown activities fall back to DEFAULT_INTERVALS. Negative ages are treated
    as zero. The season must already be valid (see parse_season).
    """
    resolved = as_activity(activity)
    if resolved is None:
        return DEFAULT_INTERVALS
    season = parse_season(season)
    age = max(age_days or 0, 0)
    for rule in _RULES:
        if rule.activity is not resolved or rule.season is not season:
            continue
        if rule.below_age_days is None or age < rule.below_age_days:
            return MaintenanceIntervals(rule.first_days, rule.repeat_days)
    return DEFAULT_INTERVALS
