"""
Tests for stock balance aggregation.
"""
import pytest

from intermaint.models import (
    ADDITION,
    DISBURSEMENT,
    EQUIPMENT_DEDUCTION,
    RETURN,
    TRANSFER,
    Item,
    Permission,
    PermissionLine,
    Snapshot,
)
from intermaint.services.balances import BalanceFilters, compute_balances, permission_matches, signed_qty


def _item(item_id, group=""):
    return Item(id=item_id, name=item_id, unit="قطعة", group=group)


def _perm(perm_type, date, *lines, posted=True, created_at=""):
    return Permission(
        number=f"{perm_type}-{date}",
        type=perm_type,
        date=date,
        lines=[PermissionLine(item_id=i, qty=q) for i, q in lines],
        posted=posted,
        created_at=created_at,
    )


@pytest.fixture
def snap():
    return Snapshot(items=[_item("A", "tools"), _item("B", "tools"), _item("C", "office")])


def test_addition_minus_disbursement(snap):
    """Q in and R out leaves Q - R; untouched items stay at 0."""
    snap.permissions = [
        _perm(ADDITION, "2024-01-01", ("A", 10)),
        _perm(DISBURSEMENT, "2024-01-05", ("A", 3)),
    ]
    assert compute_balances(snap) == {"A": 7, "B": 0, "C": 0}


@pytest.mark.parametrize(
    "perm_type, expected",
    [
        (ADDITION, 5),
        (RETURN, 5),
        (TRANSFER, -5),
        (EQUIPMENT_DEDUCTION, -5),
        (DISBURSEMENT, -5),
        ("إذن غير معروف", 0),
    ],
)
def test_sign_rule_per_type(snap, perm_type, expected):
    snap.permissions = [_perm(perm_type, "2024-01-01", ("A", 5))]
    assert compute_balances(snap)["A"] == expected
    assert signed_qty(perm_type, 5) == expected


def test_unposted_permissions_are_ignored(snap):
    snap.permissions = [_perm(ADDITION, "2024-01-01", ("A", 10), posted=False)]
    assert compute_balances(snap)["A"] == 0


def test_dangling_item_id_is_reported(snap):
    """Lines for ids that are no longer items still produce a balance."""
    snap.permissions = [
        _perm(ADDITION, "2024-01-01", ("GONE", 4)),
        _perm(TRANSFER, "2024-01-02", ("GONE", 1)),
    ]
    balances = compute_balances(snap)
    assert balances["GONE"] == 3
    assert set(balances) == {"A", "B", "C", "GONE"}


@pytest.mark.parametrize("bad_qty", ["abc", None, "", float("nan")])
def test_non_numeric_qty_counts_as_zero(snap, bad_qty):
    snap.permissions = [
        _perm(ADDITION, "2024-01-01", ("A", 10)),
        _perm(ADDITION, "2024-01-02", ("A", bad_qty)),
    ]
    assert compute_balances(snap)["A"] == 10


def test_numeric_string_qty_is_used(snap):
    snap.permissions = [_perm(ADDITION, "2024-01-01", ("A", "12"))]
    assert compute_balances(snap)["A"] == 12


class TestOutputFilters:
    """item_id / group narrow the result, not the scan."""

    def test_item_id_returns_single_entry(self, snap):
        snap.permissions = [_perm(ADDITION, "2024-01-01", ("A", 2), ("B", 3))]
        assert compute_balances(snap, BalanceFilters(item_id="B")) == {"B": 3}

    def test_item_id_wins_over_group(self, snap):
        snap.permissions = [_perm(ADDITION, "2024-01-01", ("C", 2))]
        out = compute_balances(snap, BalanceFilters(item_id="C", group="tools"))
        assert out == {"C": 2}

    def test_unknown_item_id_reports_zero(self, snap):
        assert compute_balances(snap, BalanceFilters(item_id="nope")) == {"nope": 0}

    def test_group_returns_current_items_of_group(self, snap):
        snap.permissions = [_perm(ADDITION, "2024-01-01", ("A", 1), ("C", 1), ("GONE", 1))]
        assert compute_balances(snap, BalanceFilters(group="tools")) == {"A": 1, "B": 0}

    def test_empty_strings_mean_no_filter(self, snap):
        snap.permissions = [_perm(ADDITION, "2024-01-01", ("A", 1))]
        assert compute_balances(snap, BalanceFilters()) == compute_balances(snap)


class TestScanFilters:
    def test_perm_type_exact_match(self, snap):
        snap.permissions = [
            _perm(ADDITION, "2024-01-01", ("A", 10)),
            _perm(DISBURSEMENT, "2024-01-02", ("A", 4)),
        ]
        assert compute_balances(snap, BalanceFilters(perm_type=DISBURSEMENT))["A"] == -4

    def test_date_bounds_are_inclusive(self, snap):
        snap.permissions = [
            _perm(ADDITION, "2023-12-31", ("A", 1000)),
            _perm(ADDITION, "2024-01-01", ("A", 10)),
            _perm(ADDITION, "2024-01-05", ("A", 1)),
            _perm(ADDITION, "2024-01-06", ("A", 100)),
        ]
        f = BalanceFilters(from_date="2024-01-01", to_date="2024-01-05")
        assert compute_balances(snap, f)["A"] == 11

    def test_timestamp_dates_compare_by_day(self, snap):
        snap.permissions = [_perm(ADDITION, "2024-01-05T18:30:00", ("A", 1))]
        assert compute_balances(snap, BalanceFilters(to_date="2024-01-05"))["A"] == 1

    def test_offset_timestamp_keeps_its_written_day(self, snap):
        snap.permissions = [_perm(ADDITION, "2024-01-05T00:30:00+03:00", ("A", 1))]
        assert compute_balances(snap, BalanceFilters(from_date="2024-01-05"))["A"] == 1
        assert compute_balances(snap, BalanceFilters(to_date="2024-01-04"))["A"] == 0

    def test_malformed_bound_excludes_nothing_by_default(self, snap):
        snap.permissions = [_perm(ADDITION, "2024-01-01", ("A", 5))]
        f = BalanceFilters(from_date="not-a-date", to_date="31/12/2023")
        assert compute_balances(snap, f)["A"] == 5

    def test_malformed_bound_excludes_in_strict_mode(self, snap):
        snap.permissions = [_perm(ADDITION, "2024-01-01", ("A", 5))]
        f = BalanceFilters(from_date="not-a-date", strict_dates=True)
        assert compute_balances(snap, f)["A"] == 0

    def test_undated_permission_and_bounds(self, snap):
        p = _perm(ADDITION, "", ("A", 5))
        assert permission_matches(p, BalanceFilters(from_date="2024-01-01"))
        assert not permission_matches(p, BalanceFilters(from_date="2024-01-01", strict_dates=True))

    def test_strict_mode_keeps_valid_dates(self, snap):
        snap.permissions = [_perm(ADDITION, "2024-01-03", ("A", 5))]
        f = BalanceFilters(from_date="2024-01-01", to_date="2024-01-31", strict_dates=True)
        assert compute_balances(snap, f)["A"] == 5


def test_recomputation_is_pure(snap):
    snap.permissions = [
        _perm(ADDITION, "2024-01-01", ("A", 10), ("GONE", 2)),
        _perm(TRANSFER, "2024-01-03", ("B", 1)),
    ]
    before = snap.to_dict()
    f = BalanceFilters(from_date="2024-01-01", group="tools")
    assert compute_balances(snap, f) == compute_balances(snap, f)
    assert compute_balances(snap) == compute_balances(snap)
    assert snap.to_dict() == before
