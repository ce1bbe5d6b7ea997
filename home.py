from __future__ import annotations

import streamlit as st

from intermaint.config import get_settings
from intermaint.errors import CorruptStore
from intermaint.services.balances import compute_balances
from intermaint.services.store import get_store

st.set_page_config(page_title="Intermaint Inventory", page_icon="📦", layout="wide")

st.title("📦 Intermaint · Items, Warehouses & Permissions")
st.caption("Balances are always recomputed from posted permissions: additions and returns in; transfers, deductions and disbursements out.")

settings = get_settings()
try:
    store = get_store(settings.db_path, settings.storage_key)
except CorruptStore as e:
    st.error(str(e))
    st.page_link("pages/7_🧪_Data_Management.py", label="Go to Data Management", icon="🧪")
    st.stop()
snap = store.snapshot

with st.sidebar:
    st.subheader("Environment")
    st.write(f"**Data directory:** `{settings.data_dir}`")
    st.write(f"**Database:** `{settings.db_path.name}`")
    st.write(f"**Strict date filters:** `{settings.strict_dates}`")

balances = compute_balances(snap)
posted = [p for p in snap.permissions if p.posted]

c1, c2, c3, c4 = st.columns(4)
c1.metric("Items", f"{len(snap.items)}")
c2.metric("Warehouses / suppliers", f"{len(snap.warehouses)}")
c3.metric("Posted permissions", f"{len(posted)}")
c4.metric("Items at or below zero", f"{sum(1 for it in snap.items if balances.get(it.id, 0) <= 0)}")

st.info(
    "Use the left sidebar navigation. Register items and warehouses first, then post permissions from **Permission Entry**. "
    "**Data Management** handles CSV import, backups and demo data.",
    icon="ℹ️",
)
