from __future__ import annotations

import io
from dataclasses import dataclass
from typing import IO, TYPE_CHECKING, Union

import pandas as pd
from loguru import logger

from intermaint.errors import ValidationError
from intermaint.models import DEFAULT_ITEM_TYPE
from intermaint.services.entities import add_item
from intermaint.utils import to_qty

if TYPE_CHECKING:
    from intermaint.services.store import Store

REQUIRED_COLUMNS = ("name", "unit")


@dataclass
class ImportResult:
    added: int = 0
    skipped: int = 0
    opening_permissions: int = 0


def _read_csv(source: Union[str, bytes, IO]) -> pd.DataFrame:
    if isinstance(source, bytes):
        try:
            source = source.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ValidationError("The file is not UTF-8 encoded CSV.") from e
    if isinstance(source, str):
        source = io.StringIO(source)
    try:
        return pd.read_csv(source, dtype=str, keep_default_na=False, skip_blank_lines=True)
    except pd.errors.EmptyDataError as e:
        raise ValidationError("The file is empty.") from e


def import_items_csv(store: "Store", source: Union[str, bytes, IO]) -> ImportResult:
    """
    Items from a CSV with columns name, unit and optionally type, group, initial_qty.

    Names that already exist (exact match) are skipped, not updated. A positive
    initial_qty records an opening addition into the first warehouse.
    """
    df = _read_csv(source)
    df.columns = [str(c).replace('"', "").strip().lower() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValidationError("CSV must contain at least the columns: name, unit")

    def cell(row, col: str) -> str:
        if col not in row or pd.isna(row[col]):
            return ""
        return str(row[col]).strip()

    result = ImportResult()
    for _, r in df.iterrows():
        name = cell(r, "name")
        if not name:
            continue
        if not cell(r, "unit") or any(it.name == name for it in store.snapshot.items):
            result.skipped += 1
            continue

        initial_qty = to_qty(cell(r, "initial_qty"))
        add_item(
            store,
            name=name,
            unit=cell(r, "unit"),
            item_type=cell(r, "type") or DEFAULT_ITEM_TYPE,
            group=cell(r, "group"),
            initial_qty=initial_qty,
        )
        result.added += 1
        if initial_qty > 0:
            result.opening_permissions += 1

    logger.info(
        f"CSV import: {result.added} added, {result.skipped} skipped, "
        f"{result.opening_permissions} opening permissions"
    )
    return result
