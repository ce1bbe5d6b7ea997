from __future__ import annotations

from dataclasses import fields, replace
from typing import TYPE_CHECKING, Iterable, Optional

from loguru import logger

from intermaint.errors import ValidationError
from intermaint.models import (
    ADDITION,
    DEFAULT_ITEM_TYPE,
    MAX_PERMISSION_LINES,
    Item,
    ItemPatch,
    Permission,
    PermissionLine,
    PermissionPatch,
    Snapshot,
    Warehouse,
)
from intermaint.utils import iso_now, iso_today, new_id, to_qty

if TYPE_CHECKING:
    from intermaint.services.store import Store


UNKNOWN_ITEM_LABEL = "Unknown item"


def _clean(v: Optional[str]) -> str:
    return "" if v is None else str(v).strip()


def _merge(target, patch) -> list[str]:
    # Copies every non-None patch field onto target; returns the names that were set.
    changed = []
    for f in fields(patch):
        value = getattr(patch, f.name)
        if value is not None:
            setattr(target, f.name, value)
            changed.append(f.name)
    return changed


# -------------------------
# Items
# -------------------------

def item_label(snapshot: Snapshot, item_id: str) -> str:
    """Display name for an item id; deleted items resolve to a placeholder, never an error."""
    it = snapshot.find_item(item_id)
    if it is None:
        return f"{UNKNOWN_ITEM_LABEL} ({item_id})"
    return it.name


def item_choice_labels(snapshot: Snapshot, extra_ids: Iterable[str] = ()) -> dict[str, str]:
    """Unique display label per item id, for pickers; duplicate names get the id appended."""
    names = [it.name for it in snapshot.items]
    labels = {}
    for it in snapshot.items:
        labels[it.id] = it.name if names.count(it.name) == 1 else f"{it.name} ({it.id})"
    for item_id in extra_ids:
        labels.setdefault(item_id, item_label(snapshot, item_id))
    return labels


def list_groups(snapshot: Snapshot) -> list[str]:
    seen: list[str] = []
    for it in snapshot.items:
        if it.group and it.group not in seen:
            seen.append(it.group)
    return seen


def add_item(
    store: "Store",
    *,
    name: str,
    unit: str,
    item_type: str = DEFAULT_ITEM_TYPE,
    group: str = "",
    initial_qty: float = 0,
) -> Item:
    name = _clean(name)
    unit = _clean(unit)
    if not name or not unit:
        raise ValidationError("Item name and unit are required.")

    snap = store.snapshot
    item = Item(
        id=new_id("it", (it.id for it in snap.items)),
        name=name,
        unit=unit,
        type=_clean(item_type),
        group=_clean(group),
    )
    snap.items.append(item)
    store.save()
    logger.info(f"Added item {item.id} ({item.name})")

    if to_qty(initial_qty) > 0:
        record_opening_balance(store, item, to_qty(initial_qty))
    return item


def record_opening_balance(store: "Store", item: Item, qty: float) -> Permission:
    """
    Opening stock for a new item: one posted addition into the first warehouse.
    """
    wh = store.snapshot.default_warehouse_name()
    return add_permission(
        store,
        Permission(
            number=f"INIT_{item.id}",
            type=ADDITION,
            store_name=wh,
            from_store="",
            to_store=wh,
            date=iso_today(),
            sub_number="",
            lines=[PermissionLine(item_id=item.id, unit=item.unit, qty=qty)],
            posted=True,
            posted_at=iso_now(),
        ),
    )


def edit_item(store: "Store", item_id: str, patch: ItemPatch) -> None:
    it = store.snapshot.find_item(item_id)
    if it is None:
        logger.debug(f"edit_item: no item {item_id}, nothing to do")
        return
    values = {f.name: getattr(patch, f.name) for f in fields(patch)}
    patch = ItemPatch(**{k: None if v is None else _clean(v) for k, v in values.items()})
    if patch.name == "":
        raise ValidationError("Item name cannot be blank.")
    if patch.unit == "":
        raise ValidationError("Item unit cannot be blank.")

    changed = _merge(it, patch)
    store.save()
    logger.info(f"Edited item {item_id}: {', '.join(changed) or 'no fields'}")


def remove_item(store: "Store", item_id: str) -> None:
    # Permission lines keep the id; balances still report it.
    snap = store.snapshot
    before = len(snap.items)
    snap.items = [it for it in snap.items if it.id != item_id]
    store.save()
    if len(snap.items) != before:
        logger.info(f"Removed item {item_id}")


# -------------------------
# Warehouses
# -------------------------

def add_warehouse(store: "Store", *, name: str, desc: str = "") -> Warehouse:
    name = _clean(name)
    if not name:
        raise ValidationError("Warehouse / supplier name is required.")

    snap = store.snapshot
    wh = Warehouse(id=new_id("wh", (w.id for w in snap.warehouses)), name=name, desc=_clean(desc))
    snap.warehouses.append(wh)
    store.save()
    logger.info(f"Added warehouse {wh.id} ({wh.name})")
    return wh


def remove_warehouse(store: "Store", warehouse_id: str) -> None:
    # Permissions reference warehouses by name and are left as they are.
    snap = store.snapshot
    snap.warehouses = [w for w in snap.warehouses if w.id != warehouse_id]
    store.save()
    logger.info(f"Removed warehouse {warehouse_id}")


# -------------------------
# Permissions
# -------------------------

def validate_lines(lines: Optional[Iterable[PermissionLine]]) -> list[PermissionLine]:
    lines = list(lines or [])
    if not lines:
        raise ValidationError("Add at least one line.")
    if len(lines) > MAX_PERMISSION_LINES:
        raise ValidationError(f"A permission can have at most {MAX_PERMISSION_LINES} lines (got {len(lines)}).")

    checked = []
    for n, line in enumerate(lines, start=1):
        if not _clean(line.item_id):
            raise ValidationError(f"Line {n}: select an item.")
        qty = to_qty(line.qty)
        if qty <= 0:
            raise ValidationError(f"Line {n}: quantity must be greater than zero.")
        checked.append(replace(line, item_id=_clean(line.item_id), qty=qty))
    return checked


def add_permission(store: "Store", permission: Permission) -> Permission:
    lines = validate_lines(permission.lines)

    snap = store.snapshot
    p = replace(
        permission,
        id=new_id("perm", (pp.id for pp in snap.permissions)),
        lines=lines,
        created_at=iso_now(),
    )
    snap.permissions.append(p)
    store.save()
    logger.info(f"Added permission {p.id} no={p.number!r} type={p.type} lines={len(p.lines)} posted={p.posted}")
    return p


def post_permission(
    store: "Store",
    *,
    number: str,
    perm_type: str,
    lines: list[PermissionLine],
    store_name: str = "",
    from_store: str = "",
    to_store: str = "",
    date: Optional[str] = None,
    sub_number: str = "",
) -> Permission:
    """
    Entry-form flow: the permission is created already posted.
    Each line's unit is taken from its item; the date defaults to today.
    """
    snap = store.snapshot
    filled = []
    for line in validate_lines(lines):
        it = snap.find_item(line.item_id)
        filled.append(replace(line, unit=it.unit if it else line.unit))

    return add_permission(
        store,
        Permission(
            number=_clean(number),
            type=perm_type,
            store_name=_clean(store_name),
            from_store=_clean(from_store),
            to_store=_clean(to_store),
            date=_clean(date) or iso_today(),
            sub_number=_clean(sub_number),
            lines=filled,
            posted=True,
            posted_at=iso_now(),
        ),
    )


def update_permission(store: "Store", perm_id: str, patch: PermissionPatch) -> Optional[Permission]:
    """
    Merges the patch onto the stored permission. Returns None when the id is unknown.
    """
    p = store.snapshot.find_permission(perm_id)
    if p is None:
        logger.warning(f"update_permission: no permission {perm_id}")
        return None

    if patch.lines is not None:
        patch = replace(patch, lines=validate_lines(patch.lines))

    changed = _merge(p, patch)
    store.save()
    logger.info(f"Updated permission {perm_id}: {', '.join(changed) or 'no fields'}")
    return p


def delete_permission(store: "Store", perm_id: str) -> None:
    snap = store.snapshot
    before = len(snap.permissions)
    snap.permissions = [p for p in snap.permissions if p.id != perm_id]
    store.save()
    if len(snap.permissions) != before:
        logger.info(f"Deleted permission {perm_id}")


def search_permissions(
    snapshot: Snapshot,
    *,
    number: str = "",
    perm_type: str = "",
    item_text: str = "",
) -> list[Permission]:
    number = _clean(number)
    item_text = _clean(item_text).lower()

    results = list(snapshot.permissions)
    if number:
        results = [p for p in results if p.number and number in p.number]
    if perm_type:
        results = [p for p in results if p.type == perm_type]
    if item_text:
        names = {it.id: it.name.lower() for it in snapshot.items}
        results = [
            p for p in results
            if any(ln.item_id in names and item_text in names[ln.item_id] for ln in p.lines)
        ]
    return results
