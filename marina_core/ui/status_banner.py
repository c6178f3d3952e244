# =============================================================================
# marina_core/ui/status_banner.py
# Connectivity / sync / lock banners shared by every page
# =============================================================================

from __future__ import annotations
import streamlit as st

from marina_core.offline.snapshots import ConnectivityState
from marina_core.offline.status_board import Banner, StatusView
from marina_core.ui.theme import status_pill

CONNECTIVITY_PILLS = {
    ConnectivityState.ONLINE: ("Online", "success"),
    ConnectivityState.OFFLINE: ("Offline", "error"),
    ConnectivityState.UNKNOWN: ("Checking...", "info"),
}

_RENDERERS = {
    "success": st.success,
    "info": st.info,
    "warning": st.warning,
    "error": st.error,
}


def render_banner(banner: Banner) -> None:
    render = _RENDERERS.get(banner.level, st.info)
    text = f"**{banner.title}**"
    if banner.message:
        text += f" - {banner.message}"
    render(text, icon=banner.icon)


def render_status_banners(view: StatusView) -> None:
    """Render every banner the current status calls for."""
    for banner in view.banners:
        render_banner(banner)


def render_sidebar_status(view: StatusView) -> None:
    """Compact connectivity / mode summary for the sidebar."""
    label, level = CONNECTIVITY_PILLS[view.connectivity]
    if view.simulated and view.connectivity is ConnectivityState.OFFLINE:
        label, level = "Offline (simulated)", "warning"

    with st.sidebar:
        st.markdown("### ⚓ Marina Office")
        st.markdown(status_pill(label, level), unsafe_allow_html=True)
        st.caption(view.mode_label + (" 🔒" if view.is_locked else ""))
        if view.last_checked_at:
            st.caption(f"Last check: {view.last_checked_at:%H:%M:%S}")
        if view.is_syncing:
            st.caption("🔄 Sync in progress...")
        elif view.last_tick:
            st.caption(f"Last sync: {view.last_tick.last_sync:%H:%M:%S}")
