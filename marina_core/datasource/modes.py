# =============================================================================
# marina_core/datasource/modes.py
# Data source selection enums
# =============================================================================

from enum import Enum
from typing import Optional


class DataSourceMode(Enum):
    """Where reads and writes go."""
    MOCK = "mock"               # Static demo dataset
    DATABASE = "database"       # Live backend

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["DataSourceMode"]:
        """Decode a persisted value, tolerating the JSON-quoted form."""
        if raw is None:
            return None
        value = raw.strip().strip('"')
        for member in cls:
            if member.value == value:
                return member
        return None


class ForcedMode(Enum):
    """Operator lock pinning the data source."""
    NONE = "none"
    MOCK = "mock"
    DATABASE = "database"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["ForcedMode"]:
        if raw is None:
            return None
        value = raw.strip().strip('"')
        for member in cls:
            if member.value == value:
                return member
        return None

    @property
    def pinned_mode(self) -> Optional[DataSourceMode]:
        """The data source this lock pins, or None when unlocked."""
        if self is ForcedMode.NONE:
            return None
        return DataSourceMode(self.value)
