# =============================================================================
# marina_core/errors/__init__.py
# Centralized Error Handling for the Marina Back Office
# =============================================================================

from .exceptions import (
    ErrorKind,
    MarinaError,
    LockedError,
    ProviderError,
    ProbeTimeout,
    AggregateSyncFailure,
    InvalidSettingError,
    ConfigurationError,
)

from .handlers import (
    handle_error,
    ErrorContext,
)

__all__ = [
    # Exceptions
    "ErrorKind",
    "MarinaError",
    "LockedError",
    "ProviderError",
    "ProbeTimeout",
    "AggregateSyncFailure",
    "InvalidSettingError",
    "ConfigurationError",
    # Handlers
    "handle_error",
    "ErrorContext",
]
