"""
Marina backend API client
Async JSON-over-HTTP access to the back-office REST endpoints.
"""
from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from marina_core.errors import ErrorKind, ProbeTimeout, ProviderError
from marina_core.logging import get_logger

logger = get_logger(__name__)

SYNC_STATUS_ENDPOINT = "/api/sync/status"
SYNC_OPERATIONS_ENDPOINT = "/api/sync/operations"
SYNC_NOTIFICATIONS_ENDPOINT = "/api/sync/notifications"
MARINA_OVERVIEW_ENDPOINT = "/api/reports/marina-overview"
USER_PROFILE_ENDPOINT = "/api/user/profile"

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@dataclass
class APIConfig:
    """Configuration for the backend connection"""
    api_name: str = "marina-backend"
    base_url: str = "http://localhost:3000"
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: float = 8.0


class MarinaAPIClient:
    """
    Thin async wrapper over ``httpx.AsyncClient``.

    Every request is cache-busted and every failure is mapped onto the
    provider error taxonomy, so callers only ever see ``ProviderError`` or
    ``ProbeTimeout``.
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or APIConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.request_count = 0

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            headers.update(self.config.headers)
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _cache_buster() -> Dict[str, str]:
        return {
            "t": str(int(time.time() * 1000)),
            "v": f"{random.random():.10f}",
        }

    async def _make_request(
        self,
        endpoint: str,
        method: str = "GET",
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make an HTTP request and decode the JSON body.

        Raises:
            ProbeTimeout: the request exceeded the configured timeout
            ProviderError: transport failure, non-2xx status or bad JSON
        """
        query = self._cache_buster()
        if params:
            query.update(params)

        self.request_count += 1
        logger.debug(f"{method} {endpoint}")
        try:
            response = await self._get_client().request(
                method,
                endpoint,
                params=query,
                json=data,
                headers=NO_CACHE_HEADERS,
            )
        except httpx.TimeoutException as e:
            raise ProbeTimeout(
                f"{self.config.api_name} request timed out",
                endpoint=endpoint,
                timeout=self.config.timeout,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"{self.config.api_name} unreachable: {e}",
                kind=ErrorKind.UNAVAILABLE,
                endpoint=endpoint,
            ) from e

        if response.status_code == 404:
            raise ProviderError(
                f"{endpoint} not found",
                kind=ErrorKind.NOT_FOUND,
                endpoint=endpoint,
                status_code=404,
            )
        if 400 <= response.status_code < 500:
            raise ProviderError(
                f"{endpoint} rejected the request (HTTP {response.status_code})",
                kind=ErrorKind.INVALID,
                endpoint=endpoint,
                status_code=response.status_code,
            )
        if not response.is_success:
            raise ProviderError(
                f"{endpoint} failed (HTTP {response.status_code})",
                kind=ErrorKind.UNAVAILABLE,
                endpoint=endpoint,
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                f"{endpoint} returned malformed JSON",
                kind=ErrorKind.INVALID,
                endpoint=endpoint,
                status_code=response.status_code,
            ) from e

    async def get_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._make_request(endpoint, params=params)

    async def put_json(self, endpoint: str, body: Dict[str, Any]) -> Any:
        return await self._make_request(endpoint, method="PUT", data=body)

    # =========================================================================
    # SYNC FEEDS
    # =========================================================================

    @staticmethod
    def _unwrap(payload: Any, key: str, endpoint: str, expect_list: bool = False) -> Any:
        """Validate a ``{success, <key>}`` envelope and return ``payload[key]``."""
        if not isinstance(payload, dict):
            raise ProviderError(
                f"{endpoint} returned an unexpected body",
                kind=ErrorKind.INVALID,
                endpoint=endpoint,
            )
        if not payload.get("success"):
            raise ProviderError(
                payload.get("error") or f"{endpoint} reported failure",
                kind=ErrorKind.UNAVAILABLE,
                endpoint=endpoint,
            )
        value = payload.get(key)
        expected = list if expect_list else dict
        if not isinstance(value, expected):
            raise ProviderError(
                f"{endpoint} response is missing '{key}'",
                kind=ErrorKind.INVALID,
                endpoint=endpoint,
            )
        return value

    async def fetch_sync_status(self) -> Dict[str, Any]:
        payload = await self.get_json(SYNC_STATUS_ENDPOINT)
        return self._unwrap(payload, "data", SYNC_STATUS_ENDPOINT)

    async def fetch_operations(self) -> List[Dict[str, Any]]:
        payload = await self.get_json(SYNC_OPERATIONS_ENDPOINT)
        return self._unwrap(payload, "operations", SYNC_OPERATIONS_ENDPOINT, expect_list=True)

    async def fetch_notifications(self) -> List[Dict[str, Any]]:
        payload = await self.get_json(SYNC_NOTIFICATIONS_ENDPOINT)
        return self._unwrap(payload, "notifications", SYNC_NOTIFICATIONS_ENDPOINT, expect_list=True)


# Singleton accessor
_api_client: Optional[MarinaAPIClient] = None


def get_api_client() -> MarinaAPIClient:
    """
    Get the shared MarinaAPIClient used when no client is injected.

    Returns:
        MarinaAPIClient singleton
    """
    global _api_client
    if _api_client is None:
        _api_client = MarinaAPIClient()
    return _api_client
