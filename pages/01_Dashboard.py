# =============================================================================
# 01_Dashboard.py - Back-office dashboard
# =============================================================================
"""
Dashboard - counters and record tables for the current data source.

Every table is loaded through fetch_page_data, so a locked or switched data
source takes effect on the next rerun. Live pages with no backend show an
error, never demo data.
"""
from __future__ import annotations
import streamlit as st

from marina_core.errors import handle_error
from marina_core.logging import get_logger
from marina_core.ui.layout import bootstrap_page
from marina_core.ui.tables import records_frame, stats_frame

logger = get_logger(__name__)

runtime = bootstrap_page("Dashboard", "Occupancy, revenue and open work", "📊")

# =============================================================================
# KPI CARDS
# =============================================================================
stats_page = runtime.fetch_page("dashboard")
if stats_page.error is not None:
    handle_error(stats_page.error, user_message="Dashboard statistics could not be loaded")
    stats = {}
else:
    stats = stats_page.data

if stats:
    berths = stats.get("berths", {})
    financial = stats.get("financial", {})
    work_orders = stats.get("workOrders", {})
    contracts = stats.get("contracts", {})

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Active contracts", contracts.get("active", 0), f"{contracts.get('pending', 0)} pending", delta_color="off")
    c2.metric("Berths occupied", f"{berths.get('occupied', 0)}/{berths.get('total', 0)}")
    c3.metric("Monthly revenue", f"£{financial.get('monthlyRevenue', 0):,.0f}")
    c4.metric("Open work orders", work_orders.get("inProgress", 0) + work_orders.get("pending", 0))

    with st.expander("All counters", expanded=False):
        st.dataframe(stats_frame(stats), use_container_width=True, hide_index=True)

# =============================================================================
# RECORD TABLES
# =============================================================================
TABS = [
    ("contracts", "📄 Contracts"),
    ("invoices", "💷 Invoices"),
    ("boats", "⛵ Boats"),
    ("berths", "⚓ Berths"),
    ("work_orders", "🔧 Work Orders"),
]

for (data_type, _), tab in zip(TABS, st.tabs([label for _, label in TABS])):
    with tab:
        page = runtime.fetch_page(data_type)
        if page.error is not None:
            handle_error(page.error, user_message=f"{data_type.replace('_', ' ').title()} unavailable")
            continue
        frame = records_frame(data_type, page.data)
        st.caption(f"{len(frame)} records" + (" - demo data" if page.is_demo else ""))
        st.dataframe(frame, use_container_width=True, hide_index=True)
