# =============================================================================
# marina_core/datasource/__init__.py
# Data source selection, providers and page fetching
# =============================================================================

from marina_core.datasource.modes import DataSourceMode, ForcedMode
from marina_core.datasource.mode_store import (
    ModeStore,
    MODE_KEY,
    FORCED_MODE_KEY,
    DEFAULT_MODE,
)
from marina_core.datasource.providers import (
    DataProvider,
    MockDataProvider,
    DatabaseDataProvider,
    create_provider,
)
from marina_core.datasource.fetch import PageData, fetch_page_data

__all__ = [
    "DataSourceMode",
    "ForcedMode",
    "ModeStore",
    "MODE_KEY",
    "FORCED_MODE_KEY",
    "DEFAULT_MODE",
    "DataProvider",
    "MockDataProvider",
    "DatabaseDataProvider",
    "create_provider",
    "PageData",
    "fetch_page_data",
]
