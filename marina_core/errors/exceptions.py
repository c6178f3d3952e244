# =============================================================================
# marina_core/errors/exceptions.py
# Custom Exception Hierarchy for the Marina Back Office
# =============================================================================

from enum import Enum
from typing import Optional, Dict, Any


class ErrorKind(Enum):
    """Classification attached to provider and feed failures."""
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    INVALID = "invalid"
    TIMEOUT = "timeout"
    UNEXPECTED = "unexpected"


class MarinaError(Exception):
    """
    Base exception for all marina back-office errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "MODE_001")
        details: Additional context as a dictionary
        recoverable: Whether the error can be recovered from
    """

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "MARINA_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# DATA SOURCE EXCEPTIONS
# =============================================================================

class LockedError(MarinaError):
    """Raised when the data source is changed while a forced mode pins it"""

    kind = ErrorKind.INVALID

    def __init__(
        self,
        message: str,
        forced_mode: Optional[str] = None,
        attempted_mode: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if forced_mode:
            details["forced_mode"] = forced_mode
        if attempted_mode:
            details["attempted_mode"] = attempted_mode

        super().__init__(
            message=message,
            code="MODE_001",
            details=details,
            **kwargs,
        )


class ProviderError(MarinaError):
    """Raised by a data provider when a read or write cannot be served"""

    CODES = {
        ErrorKind.NOT_FOUND: "PROV_001",
        ErrorKind.UNAVAILABLE: "PROV_002",
        ErrorKind.INVALID: "PROV_003",
    }

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNAVAILABLE,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        if kind not in self.CODES:
            raise ValueError(f"ProviderError does not accept kind {kind!r}")

        details = kwargs.pop("details", {})
        if endpoint:
            details["endpoint"] = endpoint
        if status_code is not None:
            details["status_code"] = status_code

        super().__init__(
            message=message,
            code=self.CODES[kind],
            details=details,
            **kwargs,
        )
        self.kind = kind


# =============================================================================
# CONNECTIVITY / SYNC EXCEPTIONS
# =============================================================================

class ProbeTimeout(MarinaError):
    """Raised when a probe or feed call exceeds its timeout"""

    kind = ErrorKind.TIMEOUT

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if endpoint:
            details["endpoint"] = endpoint
        if timeout is not None:
            details["timeout"] = timeout

        super().__init__(
            message=message,
            code="NET_001",
            details=details,
            **kwargs,
        )


class AggregateSyncFailure(MarinaError):
    """Every feed of a sync tick failed"""

    kind = ErrorKind.UNAVAILABLE

    def __init__(
        self,
        message: str = "All feeds failed - system may be offline",
        feeds: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if feeds:
            details["feeds"] = feeds

        super().__init__(
            message=message,
            code="SYNC_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# SETTINGS / CONFIGURATION EXCEPTIONS
# =============================================================================

class InvalidSettingError(MarinaError):
    """Raised when an operator setting is given an unsupported value"""

    kind = ErrorKind.INVALID

    def __init__(
        self,
        message: str,
        setting: Optional[str] = None,
        value: Any = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if setting:
            details["setting"] = setting
        if value is not None:
            details["value"] = value

        super().__init__(
            message=message,
            code="SET_001",
            details=details,
            **kwargs,
        )


class ConfigurationError(MarinaError):
    """Raised when configuration is invalid or missing"""

    kind = ErrorKind.INVALID

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )
