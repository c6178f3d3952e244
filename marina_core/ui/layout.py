# =============================================================================
# marina_core/ui/layout.py
# Common page bootstrap
# =============================================================================

from __future__ import annotations
import streamlit as st

from marina_core.logging import setup_logging
from marina_core.runtime import MarinaRuntime, get_runtime
from marina_core.ui.status_banner import render_sidebar_status, render_status_banners
from marina_core.ui.theme import apply_css, header


@st.cache_resource
def _init_logging() -> bool:
    setup_logging()
    return True


def bootstrap_page(title: str, subtitle: str, icon: str) -> MarinaRuntime:
    """
    Configure the page, start the runtime and draw the status chrome.

    Must be the first Streamlit call of a page script.
    """
    st.set_page_config(
        page_title=f"{title} - Marina Office",
        page_icon=icon,
        layout="wide",
    )
    _init_logging()
    apply_css()

    runtime = get_runtime()
    view = runtime.board.view()

    render_sidebar_status(view)
    header(title, subtitle, icon)
    render_status_banners(view)
    return runtime
