"""
Tree condition rules: status normalization, the replacement trigger and the maturity gate.
"""
import math
from enum import Enum
from typing import Mapping, Optional


class TreeStatus(str, Enum):
    healthy = "healthy"
    alive = "alive"
    dead = "dead"
    damaged = "damaged"
    removed = "removed"
    need_watering = "need_watering"
    need_protection = "need_protection"
    need_replacement = "need_replacement"
    disease = "disease"
    pending_planting = "pending_planting"


HEALTHY_STATUSES = frozenset({TreeStatus.healthy.value, TreeStatus.alive.value})

REPLACEMENT_TRIGGER_STATUSES = frozenset({
    TreeStatus.dead.value,
    TreeStatus.damaged.value,
    TreeStatus.removed.value,
    TreeStatus.need_replacement.value,
})

_STATUS_ALIASES: dict[str, str] = {
    "deseas": "disease",
    "diseased": "disease",
    "needreplacement": "need_replacement",
    "needsreplacement": "need_replacement",
    "needs_replacement": "need_replacement",
}

MIN_MATURITY_YEARS = 1
MAX_MATURITY_YEARS = 15
DAYS_PER_MATURITY_YEAR = 365


def normalize_name(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def normalize_tree_status(value: Optional[str]) -> str:
    """
    Lower-case, collapse '-' and ' ' to '_', fold known aliases.

    Empty input means 'healthy'. Unknown statuses pass through normalized so
    legacy values never break a schedule computation.
    """
    raw = normalize_name(value).replace("-", "_").replace(" ", "_")
    raw = _STATUS_ALIASES.get(raw, raw)
    return raw or TreeStatus.healthy.value


def tree_status_label(value: Optional[str]) -> str:
    parts = [p for p in normalize_tree_status(value).split("_") if p]
    return " ".join(p[:1].upper() + p[1:] for p in parts) or "Unknown"


def needs_replacement(status: Optional[str]) -> bool:
    return normalize_tree_status(status) in REPLACEMENT_TRIGGER_STATUSES


def get_species_maturity_years(
    species: Optional[str], maturity_map: Mapping[str, int]
) -> Optional[int]:
    """Configured maturity age for a species, or None when no ceiling is pegged."""
    key = normalize_name(species)
    if not key:
        return None
    years = maturity_map.get(key)
    if isinstance(years, bool) or not isinstance(years, (int, float)):
        return None
    if not math.isfinite(years) or years <= 0:
        return None
    return years


def is_mature(tree, age_days: int, maturity_map: Mapping[str, int]) -> bool:
    """
    True once a living tree has reached its species' self-sustaining age.

    A mature tree closes the routine schedule for every activity except replacement.
    """
    if normalize_tree_status(tree.status) not in HEALTHY_STATUSES:
        return False
    years = get_species_maturity_years(tree.species, maturity_map)
    if years is None:
        return False
    return age_days >= years * DAYS_PER_MATURITY_YEAR
