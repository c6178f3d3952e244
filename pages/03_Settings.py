# =============================================================================
# 03_Settings.py - Data source, lock, connection frequency, offline simulation
# =============================================================================
from __future__ import annotations
import streamlit as st

from marina_core.datasource import DataSourceMode, ForcedMode
from marina_core.errors import ErrorContext
from marina_core.logging import set_debug
from marina_core.state import ALLOWED_INTERVALS
from marina_core.ui.layout import bootstrap_page

runtime = bootstrap_page("Settings", "Where data comes from and how often the backend is checked", "⚙️")
store = runtime.mode_store

FORCED_LABELS = {
    ForcedMode.NONE: "Unlocked",
    ForcedMode.MOCK: "Lock to demo data",
    ForcedMode.DATABASE: "Lock to production data",
}
FREQUENCY_LABELS = {5: "5 seconds", 10: "10 seconds", 30: "30 seconds", 60: "1 minute", 300: "5 minutes"}

# =============================================================================
# DATA SOURCE
# =============================================================================
st.subheader("📦 Data source")
config = store.get_config()
st.markdown(f"**{config['label']}** - {config['description']}")

mode_choice = st.radio(
    "Serve data from",
    list(DataSourceMode),
    index=list(DataSourceMode).index(store.get_mode()),
    format_func=lambda m: "Demo data" if m is DataSourceMode.MOCK else "Production database",
    horizontal=True,
    disabled=store.is_locked,
    help="Disabled while a lock is applied" if store.is_locked else None,
)
if mode_choice is not store.get_mode():
    with ErrorContext(f"Switching data source to {mode_choice.value}") as ctx:
        store.set_mode(mode_choice)
    if not ctx.failed:
        st.rerun()

forced_choice = st.selectbox(
    "Lock",
    list(ForcedMode),
    index=list(ForcedMode).index(store.get_forced_mode()),
    format_func=FORCED_LABELS.get,
)
if forced_choice is not store.get_forced_mode():
    with ErrorContext(f"Applying lock {forced_choice.value}") as ctx:
        store.set_forced_mode(forced_choice)
    if not ctx.failed:
        st.rerun()

st.divider()

# =============================================================================
# CONNECTIVITY
# =============================================================================
st.subheader("📡 Connectivity")
current_interval = runtime.settings.get_interval_seconds()
interval = st.select_slider(
    "Connection check frequency",
    options=list(ALLOWED_INTERVALS),
    value=current_interval,
    format_func=FREQUENCY_LABELS.get,
)
if interval != current_interval:
    with ErrorContext("Updating connection frequency"):
        runtime.settings.set_interval_seconds(interval)

simulated = st.toggle(
    "Simulate offline",
    value=runtime.simulation.is_simulated_offline(),
    help="Reports the backend as offline regardless of the real connection",
)
if simulated != runtime.simulation.is_simulated_offline():
    with ErrorContext("Updating offline simulation"):
        runtime.simulation.set_simulated_offline(simulated)

st.divider()

# =============================================================================
# RESET / DEBUG
# =============================================================================
col1, col2 = st.columns(2)
with col1:
    if st.button("♻️ Reset all settings", type="secondary"):
        with ErrorContext("Resetting settings") as ctx:
            store.reset()
        if not ctx.failed:
            st.rerun()
with col2:
    st.session_state["debug_mode"] = st.checkbox(
        "Show error details and debug logs",
        value=st.session_state.get("debug_mode", False),
    )
    set_debug(st.session_state["debug_mode"])
