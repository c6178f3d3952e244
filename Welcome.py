from __future__ import annotations
import streamlit as st

from marina_core.errors import handle_error
from marina_core.ui.layout import bootstrap_page

# ============================================================================
# PAGE CONFIGURATION
# ============================================================================
runtime = bootstrap_page(
    "Marina Office",
    "Contracts, invoices, boats, berths and work orders in one place",
    "⚓",
)

mode = runtime.mode_store.get_config()
connectivity = runtime.prober.get_status_display()
sync = runtime.orchestrator.get_status_display()

# ============================================================================
# AT A GLANCE
# ============================================================================
col1, col2, col3 = st.columns(3)
col1.metric("Data source", mode["label"])
col2.metric(
    "Backend",
    connectivity["status"].title(),
    delta=f"{connectivity['latency_ms']:.0f} ms" if connectivity["latency_ms"] is not None else None,
    delta_color="off",
)
col3.metric("Last sync", sync["last_sync"][11:19] if sync["last_sync"] else "Never")
st.caption(mode["description"])

# ============================================================================
# OVERVIEW
# ============================================================================
page = runtime.fetch_page("overview")
if page.error is not None:
    handle_error(page.error, user_message="Marina overview is unavailable")
else:
    summary = page.data.get("summary", {})
    st.subheader("Marina overview" + (" (demo data)" if page.is_demo else ""))
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Boats", summary.get("totalBoats", 0))
    c2.metric("Berths", summary.get("totalBerths", 0))
    c3.metric("Occupancy", f"{summary.get('occupancyRate', 0):.0f}%")
    c4.metric("Monthly revenue", f"£{summary.get('monthlyRevenue', 0):,.0f}")

activity = runtime.fetch_page("activity")
if activity.ok and activity.data:
    st.subheader("Recent activity")
    for item in activity.data:
        st.markdown(f"- **{item.get('title')}** - {item.get('description')}")

st.info("Use the sidebar to open the dashboard, the sync status board or the settings.")
