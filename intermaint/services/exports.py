from __future__ import annotations

import html
from typing import Optional

import pandas as pd

from intermaint.models import Snapshot
from intermaint.services.balances import BalanceFilters, ItemCard, compute_balances

STOCK_COLUMNS = ["Item", "Unit", "Group", "Type", "Balance"]
CARD_COLUMNS = ["Narrative", "In", "Out", "Balance after", "Permission no.", "Date"]


def stock_balance_frame(snapshot: Snapshot, filters: Optional[BalanceFilters] = None) -> pd.DataFrame:
    """
    Stock balance table: current items only, sorted by name, narrowed by the group / item filters.
    """
    balances = compute_balances(snapshot, filters)
    rows = []
    for it in sorted(snapshot.items, key=lambda i: i.name):
        if filters is not None and filters.group and it.group != filters.group:
            continue
        if filters is not None and filters.item_id and it.id != filters.item_id:
            continue
        rows.append([it.name, it.unit, it.group or "", it.type, balances.get(it.id, 0.0)])
    return pd.DataFrame(rows, columns=STOCK_COLUMNS)


def item_card_frame(card: ItemCard) -> pd.DataFrame:
    rows = [[r.narrative, r.qty_in, r.qty_out, r.balance, r.perm_number, r.date] for r in card.rows]
    return pd.DataFrame(rows, columns=CARD_COLUMNS)


def frame_to_csv_bytes(df: pd.DataFrame, footer: Optional[str] = None) -> bytes:
    # BOM so Excel picks up UTF-8 (Arabic names).
    text = df.to_csv(index=False, lineterminator="\n")
    if footer:
        text += footer + "\n"
    return text.encode("utf-8-sig")


def item_card_csv(card: ItemCard) -> bytes:
    return frame_to_csv_bytes(item_card_frame(card), footer=f"Current balance: {card.balance:g}")


def frame_to_print_html(df: pd.DataFrame, title: str) -> str:
    """Standalone right-to-left HTML page, meant to be opened and printed to PDF."""
    table = df.to_html(index=False, border=0, escape=True)
    return (
        '<html dir="rtl"><head><meta charset="utf-8">'
        f"<title>{html.escape(title)}</title><style>"
        "body{font-family:Arial,Helvetica,sans-serif;direction:rtl;padding:20px}"
        "table{width:100%;border-collapse:collapse} th,td{border:1px solid #333;padding:6px;text-align:right}"
        "</style></head><body>"
        f"<h3>{html.escape(title)}</h3>{table}"
        "<script>window.onload=function(){window.print();}</script>"
        "</body></html>"
    )
