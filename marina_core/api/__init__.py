"""
Backend API access for the marina back office.
"""
from .client import (
    APIConfig,
    MarinaAPIClient,
    get_api_client,
    NO_CACHE_HEADERS,
    SYNC_STATUS_ENDPOINT,
    SYNC_OPERATIONS_ENDPOINT,
    SYNC_NOTIFICATIONS_ENDPOINT,
    MARINA_OVERVIEW_ENDPOINT,
    USER_PROFILE_ENDPOINT,
)

__all__ = [
    "APIConfig",
    "MarinaAPIClient",
    "get_api_client",
    "NO_CACHE_HEADERS",
    "SYNC_STATUS_ENDPOINT",
    "SYNC_OPERATIONS_ENDPOINT",
    "SYNC_NOTIFICATIONS_ENDPOINT",
    "MARINA_OVERVIEW_ENDPOINT",
    "USER_PROFILE_ENDPOINT",
]
