"""HTTP client for the Home Assistant REST API."""

from __future__ import annotations

from typing import Any

import aiohttp

from ..errors import (
    HassAuthError,
    HassConnectionError,
    HassResponseError,
    HassTimeout,
)


class HassHttpClient:
    """HTTP client wrapper for Home Assistant REST endpoints.

    Every request carries the bearer token. Non-2xx responses raise
    HassResponseError (HassAuthError for 401).
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str,
        *,
        token: str,
        timeout: float = 10.0,
    ) -> None:
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _auth_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        what: str,
        *,
        json: Any = None,
    ) -> Any:
        url = self._url(path)
        try:
            async with self._session.request(
                method,
                url,
                headers=self._auth_headers(),
                json=json,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                if resp.status == 401:
                    raise HassAuthError(f"{what} rejected: invalid access token")
                if resp.status >= 400:
                    raise HassResponseError(
                        resp.status, f"{what} failed with status {resp.status}"
                    )
                try:
                    return await resp.json(content_type=None)
                except ValueError as err:
                    raise HassResponseError(
                        resp.status, f"{what} returned invalid JSON"
                    ) from err
        except TimeoutError as err:
            raise HassTimeout(f"{what} timed out") from err
        except aiohttp.ClientError as err:
            raise HassConnectionError(f"{what} failed: {err}") from err

    async def fetch_api_info(self) -> dict[str, Any]:
        """Fetch {version, message} from /api.

        Doubles as the reachability and credential probe.
        """
        data = await self._request("GET", "/api", "API probe")
        if not isinstance(data, dict):
            raise HassResponseError(200, "API probe returned a non-object body")
        return data

    async def fetch_states(self) -> list[dict[str, Any]]:
        """Fetch all entity states from /api/states."""
        data = await self._request("GET", "/api/states", "States request")
        if not isinstance(data, list):
            raise HassResponseError(200, "States request returned a non-list body")
        return data

    async def call_service(
        self, domain: str, service: str, data: dict[str, Any] | None = None
    ) -> Any:
        """POST service data to /api/services/{domain}/{service}."""
        return await self._request(
            "POST",
            f"/api/services/{domain}/{service}",
            f"Service call {domain}.{service}",
            json=data or {},
        )
