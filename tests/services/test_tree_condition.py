import pytest

from app.services.schedule_snapshot import TreeSnapshot
from app.services.tree_condition import (
    get_species_maturity_years,
    is_mature,
    needs_replacement,
    normalize_tree_status,
    tree_status_label,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Healthy", "healthy"),
        ("need-watering", "need_watering"),
        ("Need Protection", "need_protection"),
        ("deseas", "disease"),
        ("Diseased", "disease"),
        ("NeedReplacement", "need_replacement"),
        ("needs replacement", "need_replacement"),
        ("", "healthy"),
        (None, "healthy"),
        ("Unknown-Thing", "unknown_thing"),
    ],
)
def test_normalize_tree_status(raw, expected):
    assert normalize_tree_status(raw) == expected


@pytest.mark.parametrize("status", ["dead", "Damaged", "removed", "needs-replacement"])
def test_replacement_trigger_statuses(status):
    assert needs_replacement(status) is True


@pytest.mark.parametrize("status", ["healthy", "alive", "disease", "need_watering", None])
def test_statuses_that_do_not_trigger_replacement(status):
    assert needs_replacement(status) is False


def test_tree_status_label():
    assert tree_status_label("need_replacement") == "Need Replacement"


def test_species_maturity_lookup_is_normalized():
    pegs = {"gmelina": 3}
    assert get_species_maturity_years(" Gmelina ", pegs) == 3
    assert get_species_maturity_years("teak", pegs) is None
    assert get_species_maturity_years(None, pegs) is None


@pytest.mark.parametrize("bad_value", [0, -2, True, "3", float("nan")])
def test_invalid_maturity_pegs_are_ignored(bad_value):
    assert get_species_maturity_years("gmelina", {"gmelina": bad_value}) is None


def test_fractional_maturity_peg_is_kept():
    assert get_species_maturity_years("neem", {"neem": 2.5}) == 2.5


def test_is_mature_requires_living_status_and_age():
    pegs = {"gmelina": 3}
    healthy = TreeSnapshot(id=1, status="healthy", species="Gmelina")
    damaged = TreeSnapshot(id=2, status="damaged", species="Gmelina")
    unpegged = TreeSnapshot(id=3, status="alive", species="Teak")

    assert is_mature(healthy, 1200, pegs) is True
    assert is_mature(healthy, 3 * 365, pegs) is True
    assert is_mature(healthy, 3 * 365 - 1, pegs) is False
    assert is_mature(damaged, 1200, pegs) is False
    assert is_mature(unpegged, 5000, pegs) is False
