from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from loguru import logger

from intermaint.models import PERMISSION_SIGNS, Permission, Snapshot
from intermaint.utils import parse_day, parse_timestamp, to_qty


@dataclass(frozen=True)
class BalanceFilters:
    """
    Optional filters for balances and item cards. Empty strings count as not set.

    from_date / to_date / perm_type select which permissions are scanned.
    item_id / group only narrow the returned mapping (item_id wins when both are set).
    """

    from_date: str = ""
    to_date: str = ""
    perm_type: str = ""
    item_id: str = ""
    group: str = ""
    strict_dates: bool = False


@dataclass
class ItemCardRow:
    header: str
    qty_in: float
    qty_out: float
    desc: str
    perm_number: str
    date: str
    balance: float = 0.0

    @property
    def narrative(self) -> str:
        return self.desc or self.header

    def to_dict(self) -> dict:
        return {
            "header": self.header,
            "in": self.qty_in,
            "out": self.qty_out,
            "desc": self.desc,
            "permNumber": self.perm_number,
            "date": self.date,
            "balance": self.balance,
        }


@dataclass
class ItemCard:
    item_id: str
    rows: list[ItemCardRow] = field(default_factory=list)
    balance: float = 0.0


def _bound_excludes(perm_day: Optional[date], bound: str, *, strict: bool, before: bool) -> bool:
    """
    True when the permission falls outside one date bound.

    An unreadable bound or permission date compares false both ways, so by default
    it never excludes anything; strict mode excludes instead.
    """
    bound_day = parse_day(bound)
    if bound_day is None or perm_day is None:
        return strict
    return perm_day < bound_day if before else perm_day > bound_day


def permission_matches(p: Permission, filters: Optional[BalanceFilters] = None) -> bool:
    """Scan-side filter shared by balances and item cards: posted, type, date range."""
    if not p.posted:
        return False
    if filters is None:
        return True
    if filters.perm_type and p.type != filters.perm_type:
        return False
    if filters.from_date or filters.to_date:
        perm_day = parse_day(p.date)
        if filters.from_date and _bound_excludes(perm_day, filters.from_date, strict=filters.strict_dates, before=True):
            return False
        if filters.to_date and _bound_excludes(perm_day, filters.to_date, strict=filters.strict_dates, before=False):
            return False
    return True


def signed_qty(perm_type: str, qty) -> float:
    """Quantity delta a line contributes to its item's balance."""
    return PERMISSION_SIGNS.get(perm_type, 0) * to_qty(qty)


def compute_balances(snapshot: Snapshot, filters: Optional[BalanceFilters] = None) -> dict[str, float]:
    """
    Net signed quantity per item id over the posted permissions that pass the filters.

    Every current item starts at 0. Ids that only appear on permission lines (deleted
    items) are reported too. Never raises: bad quantities count as 0.
    """
    balances: dict[str, float] = {it.id: 0.0 for it in snapshot.items}

    for p in snapshot.permissions:
        if not permission_matches(p, filters):
            continue
        for line in p.lines:
            if line.item_id not in balances:
                balances[line.item_id] = 0.0
            balances[line.item_id] += signed_qty(p.type, line.qty)

    if filters is not None and filters.item_id:
        return {filters.item_id: balances.get(filters.item_id, 0.0)}
    if filters is not None and filters.group:
        return {it.id: balances.get(it.id, 0.0) for it in snapshot.items if it.group == filters.group}
    return balances


def _chronology_key(p: Permission) -> tuple[bool, datetime]:
    ts = parse_timestamp(p.date or p.created_at)
    # Unreadable dates go last; sorted() keeps container order among equal keys.
    return (ts is None, ts or datetime.min)


def get_item_card(snapshot: Snapshot, item_id: str, filters: Optional[BalanceFilters] = None) -> ItemCard:
    """
    Chronological ledger for one item with a running balance.

    Addition and return lines are inbound; every other type is outbound.
    Output-side filters (item_id, group) are ignored here.
    """
    perms = [p for p in snapshot.permissions if permission_matches(p, filters) and p.has_item(item_id)]
    perms = sorted(perms, key=_chronology_key)

    card = ItemCard(item_id=item_id)
    running = 0.0
    for p in perms:
        for line in p.lines:
            if line.item_id != item_id:
                continue
            qty = to_qty(line.qty)
            row = ItemCardRow(
                header=p.type,
                qty_in=qty if p.is_inbound else 0.0,
                qty_out=0.0 if p.is_inbound else qty,
                desc=line.desc or "",
                perm_number=p.number,
                date=p.date or p.created_at,
            )
            running += row.qty_in - row.qty_out
            row.balance = running
            card.rows.append(row)

    card.balance = running
    logger.debug(f"Item card {item_id}: {len(card.rows)} rows, balance {card.balance}")
    return card
