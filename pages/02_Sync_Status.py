# =============================================================================
# 02_Sync_Status.py - Connectivity and feed status
# =============================================================================
"""
Sync Status - connectivity state, last tick and the three refreshed feeds
(status, pending operations, notifications).
"""
from __future__ import annotations
import streamlit as st

from marina_core.errors import ErrorContext
from marina_core.offline import Feed
from marina_core.ui.layout import bootstrap_page
from marina_core.ui.tables import notifications_frame, operations_frame

runtime = bootstrap_page("Sync Status", "Backend connectivity and office synchronisation", "🔄")

# =============================================================================
# ACTIONS
# =============================================================================
col1, col2, col3 = st.columns([1, 1, 2])
with col1:
    if st.button("🔄 Sync now", use_container_width=True):
        with ErrorContext("Manual sync"):
            tick = runtime.sync_now()
            if tick.success:
                st.toast("Sync completed")
with col2:
    if st.button("📡 Check connection", use_container_width=True):
        with ErrorContext("Connection check"):
            snapshot = runtime.check_connection()
            st.toast(f"Backend is {snapshot.state.value}")
with col3:
    st.button("↻ Refresh view", use_container_width=False)

# =============================================================================
# CONNECTIVITY
# =============================================================================
connectivity = runtime.prober.get_status_display()
sync = runtime.orchestrator.get_status_display()

c1, c2, c3, c4 = st.columns(4)
c1.metric("Connectivity", connectivity["status"].title() + (" (simulated)" if connectivity["simulated"] else ""))
c2.metric("Failed checks", connectivity["failures"])
c3.metric("Check interval", f"{connectivity['check_interval']:g}s")
c4.metric("Sync", "Suspended" if sync["suspended"] else ("Running" if sync["is_syncing"] else "Idle"))

if connectivity["error"]:
    st.caption(f"Last probe error: {connectivity['error']}")

# =============================================================================
# FEEDS
# =============================================================================
tick = runtime.orchestrator.last_result
if tick is None:
    st.info("No sync has completed yet. Press **Sync now** to refresh the feeds.")
else:
    st.caption(
        f"Last sync {tick.last_sync:%Y-%m-%d %H:%M:%S}"
        f" - next sync {tick.next_sync:%H:%M:%S}"
        + (" - manual" if tick.manual else "")
    )

    status_tab, ops_tab, notif_tab = st.tabs(["📈 Status", "📋 Pending operations", "🔔 Notifications"])

    with status_tab:
        result = tick.result_for(Feed.STATUS)
        if not result.succeeded:
            st.warning(f"Status feed {result.outcome.value}: {result.message}")
        st.json(result.payload)

    with ops_tab:
        result = tick.result_for(Feed.OPERATIONS)
        if not result.succeeded:
            st.warning(f"Operations feed {result.outcome.value}: {result.message}")
        st.dataframe(operations_frame(result.payload), use_container_width=True, hide_index=True)

    with notif_tab:
        result = tick.result_for(Feed.NOTIFICATIONS)
        if not result.succeeded:
            st.warning(f"Notifications feed {result.outcome.value}: {result.message}")
        st.dataframe(notifications_frame(result.payload), use_container_width=True, hide_index=True)
