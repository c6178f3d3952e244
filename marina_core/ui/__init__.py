# =============================================================================
# marina_core/ui/__init__.py
# Streamlit rendering helpers
# =============================================================================

from marina_core.ui.tables import (
    operations_frame,
    notifications_frame,
    records_frame,
    stats_frame,
)

__all__ = [
    "operations_frame",
    "notifications_frame",
    "records_frame",
    "stats_frame",
]
