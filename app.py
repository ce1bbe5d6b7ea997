from __future__ import annotations

import streamlit as st

st.set_page_config(page_title="Intermaint Inventory", page_icon="📦", layout="wide")

pages = [
    st.Page("home.py", title="Home", icon="🏠"),
    st.Page("pages/1_🧾_Permission_Entry.py", title="Permission Entry", icon="🧾"),
    st.Page("pages/2_🏷️_Items.py", title="Items", icon="🏷️"),
    st.Page("pages/3_🏬_Warehouses.py", title="Warehouses & Suppliers", icon="🏬"),
    st.Page("pages/4_🔎_Permissions.py", title="Permissions", icon="🔎"),
    st.Page("pages/5_📊_Stock_Balance.py", title="Stock Balance", icon="📊"),
    st.Page("pages/6_🗂️_Item_Card.py", title="Item Card", icon="🗂️"),
    st.Page("pages/7_🧪_Data_Management.py", title="Data Management", icon="🧪"),
]

st.navigation(pages).run()
