from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

# Permission (document) types, stored verbatim in the snapshot.
ADDITION = "إذن إضافة"
TRANSFER = "إذن تحويل"
EQUIPMENT_DEDUCTION = "إذن خصم معدة"
DISBURSEMENT = "إذن صرف"
RETURN = "إذن ارتجاع"

PERMISSION_TYPES = [ADDITION, TRANSFER, EQUIPMENT_DEDUCTION, DISBURSEMENT, RETURN]

PERMISSION_TYPE_LABELS = {
    ADDITION: "Addition",
    TRANSFER: "Transfer",
    EQUIPMENT_DEDUCTION: "Equipment deduction",
    DISBURSEMENT: "Disbursement",
    RETURN: "Return",
}

# Balance sign per type; types not listed here do not move balances.
PERMISSION_SIGNS = {
    ADDITION: 1,
    RETURN: 1,
    TRANSFER: -1,
    EQUIPMENT_DEDUCTION: -1,
    DISBURSEMENT: -1,
}

INBOUND_TYPES = frozenset({ADDITION, RETURN})

DEFAULT_ITEM_TYPE = "مستهلكات"
MAX_PERMISSION_LINES = 25


def _text(v: Any) -> str:
    return "" if v is None else str(v)


@dataclass
class Item:
    id: str
    name: str
    unit: str
    type: str = DEFAULT_ITEM_TYPE
    group: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "Item":
        return cls(
            id=_text(d.get("id")),
            name=_text(d.get("name")),
            unit=_text(d.get("unit")),
            type=_text(d.get("type")),
            group=_text(d.get("group")),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "unit": self.unit, "type": self.type, "group": self.group}


@dataclass
class Warehouse:
    id: str
    name: str
    desc: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "Warehouse":
        return cls(id=_text(d.get("id")), name=_text(d.get("name")), desc=_text(d.get("desc")))

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "desc": self.desc}


@dataclass
class PermissionLine:
    item_id: str
    qty: Any  # numeric on entry; whatever a restored snapshot held otherwise
    unit: str = ""
    desc: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "PermissionLine":
        return cls(
            item_id=_text(d.get("itemId")),
            qty=d.get("qty"),
            unit=_text(d.get("unit")),
            desc=_text(d.get("desc")),
        )

    def to_dict(self) -> dict:
        return {"itemId": self.item_id, "unit": self.unit, "qty": self.qty, "desc": self.desc}


@dataclass
class Permission:
    number: str
    type: str
    lines: list[PermissionLine]
    date: str = ""
    store_name: str = ""
    from_store: str = ""
    to_store: str = ""
    sub_number: str = ""
    posted: bool = False
    posted_at: Optional[str] = None
    id: str = ""
    created_at: str = ""

    @property
    def is_inbound(self) -> bool:
        return self.type in INBOUND_TYPES

    def has_item(self, item_id: str) -> bool:
        return any(line.item_id == item_id for line in self.lines)

    @classmethod
    def from_dict(cls, d: dict) -> "Permission":
        raw_lines = d.get("lines")
        lines = [PermissionLine.from_dict(ln) for ln in raw_lines if isinstance(ln, dict)] if isinstance(raw_lines, list) else []
        return cls(
            id=_text(d.get("id")),
            number=_text(d.get("number")),
            type=_text(d.get("type")),
            store_name=_text(d.get("store")),
            from_store=_text(d.get("from")),
            to_store=_text(d.get("to")),
            date=_text(d.get("date")),
            sub_number=_text(d.get("subNumber")),
            posted=bool(d.get("posted", False)),
            posted_at=d.get("postedAt"),
            lines=lines,
            created_at=_text(d.get("createdAt")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "number": self.number,
            "type": self.type,
            "store": self.store_name,
            "from": self.from_store,
            "to": self.to_store,
            "date": self.date,
            "subNumber": self.sub_number,
            "posted": self.posted,
            "postedAt": self.posted_at,
            "lines": [ln.to_dict() for ln in self.lines],
            "createdAt": self.created_at,
        }


@dataclass
class Snapshot:
    items: list[Item] = field(default_factory=list)
    warehouses: list[Warehouse] = field(default_factory=list)
    permissions: list[Permission] = field(default_factory=list)

    def find_item(self, item_id: str) -> Optional[Item]:
        return next((it for it in self.items if it.id == item_id), None)

    def find_warehouse(self, warehouse_id: str) -> Optional[Warehouse]:
        return next((w for w in self.warehouses if w.id == warehouse_id), None)

    def find_permission(self, perm_id: str) -> Optional[Permission]:
        return next((p for p in self.permissions if p.id == perm_id), None)

    def default_warehouse_name(self) -> str:
        return self.warehouses[0].name if self.warehouses else ""

    @classmethod
    def from_dict(cls, d: dict) -> "Snapshot":
        return cls(
            items=[Item.from_dict(it) for it in d.get("items") or [] if isinstance(it, dict)],
            warehouses=[Warehouse.from_dict(w) for w in d.get("warehouses") or [] if isinstance(w, dict)],
            permissions=[Permission.from_dict(p) for p in d.get("permissions") or [] if isinstance(p, dict)],
        )

    def to_dict(self) -> dict:
        return {
            "items": [it.to_dict() for it in self.items],
            "warehouses": [w.to_dict() for w in self.warehouses],
            "permissions": [p.to_dict() for p in self.permissions],
        }


@dataclass
class ItemPatch:
    """Fields left as None are not touched."""

    name: Optional[str] = None
    unit: Optional[str] = None
    type: Optional[str] = None
    group: Optional[str] = None


@dataclass
class PermissionPatch:
    """Fields left as None are not touched."""

    number: Optional[str] = None
    type: Optional[str] = None
    store_name: Optional[str] = None
    from_store: Optional[str] = None
    to_store: Optional[str] = None
    date: Optional[str] = None
    sub_number: Optional[str] = None
    posted: Optional[bool] = None
    posted_at: Optional[str] = None
    lines: Optional[list[PermissionLine]] = None
