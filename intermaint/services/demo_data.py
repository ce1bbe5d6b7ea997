from __future__ import annotations

import random
from datetime import date, timedelta
from typing import TYPE_CHECKING

from loguru import logger

from intermaint.models import (
    ADDITION,
    DISBURSEMENT,
    EQUIPMENT_DEDUCTION,
    RETURN,
    TRANSFER,
    Item,
    PermissionLine,
    Snapshot,
    Warehouse,
)
from intermaint.services.entities import add_item, post_permission
from intermaint.utils import new_id

if TYPE_CHECKING:
    from intermaint.services.store import Store


DEFAULT_ITEMS = [
    # (name, unit, type, group)
    ("مسمار", "قطعة", "مستهلكات", "مكتبي"),
    ("مفتاح ربط", "قطعة", "عدة", "عدة"),
]
DEFAULT_WAREHOUSES = [
    ("المخزن الرئيسي", "المخزن المركزي"),
    ("مورد خارجي", "مورد"),
]

DEMO_ITEMS = [
    ("قفاز عمل", "زوج", "مستهلكات", "سلامة"),
    ("خوذة", "قطعة", "عدة", "سلامة"),
    ("زيت محرك", "لتر", "مستهلكات", "صيانة"),
    ("فلتر هواء", "قطعة", "قطع غيار", "صيانة"),
]


def seed_snapshot() -> Snapshot:
    items: list[Item] = []
    for name, unit, item_type, group in DEFAULT_ITEMS:
        items.append(Item(id=new_id("it", (i.id for i in items)), name=name, unit=unit, type=item_type, group=group))

    warehouses: list[Warehouse] = []
    for name, desc in DEFAULT_WAREHOUSES:
        warehouses.append(Warehouse(id=new_id("wh", (w.id for w in warehouses)), name=name, desc=desc))

    return Snapshot(items=items, warehouses=warehouses, permissions=[])


def reset_store(store: "Store") -> None:
    store.snapshot = seed_snapshot()
    store.save()
    logger.info("Store reset to seed data")


def load_demo_data(store: "Store", *, seed: int = 7, days: int = 30) -> int:
    """
    Adds demo items and a month of posted permissions. Returns the number of permissions created.
    """
    rng = random.Random(seed)
    snap = store.snapshot
    existing = {it.name for it in snap.items}
    for name, unit, item_type, group in DEMO_ITEMS:
        if name not in existing:
            add_item(store, name=name, unit=unit, item_type=item_type, group=group)

    main_store = snap.default_warehouse_name()
    supplier = snap.warehouses[1].name if len(snap.warehouses) > 1 else main_store
    start = date.today() - timedelta(days=days)

    created = 0
    for i, it in enumerate(snap.items):
        post_permission(
            store,
            number=f"DEMO-A-{i + 1:03d}",
            perm_type=ADDITION,
            store_name=main_store,
            from_store=supplier,
            to_store=main_store,
            date=start.isoformat(),
            lines=[PermissionLine(item_id=it.id, qty=rng.randint(40, 120), desc="رصيد افتتاحي")],
        )
        created += 1

    movement_types = [DISBURSEMENT, TRANSFER, EQUIPMENT_DEDUCTION, RETURN]
    for n in range(days // 2):
        picks = rng.sample(snap.items, k=min(3, len(snap.items)))
        perm_type = rng.choice(movement_types)
        post_permission(
            store,
            number=f"DEMO-{n + 1:03d}",
            perm_type=perm_type,
            store_name=main_store,
            from_store=main_store,
            to_store="",
            date=(start + timedelta(days=2 * n + 1)).isoformat(),
            lines=[PermissionLine(item_id=it.id, qty=rng.randint(1, 10)) for it in picks],
        )
        created += 1

    logger.info(f"Loaded demo data: {created} permissions")
    return created
