"""Dual-transport connection to a Home Assistant instance.

The connection owns one aiohttp session for the REST API and one WebSocket for
the command API. Commands sent over the socket are correlated with their
result frames by an integer id, so any number of them may be in flight at
once. Operations that have a REST equivalent fall back to HTTP whenever the
socket is not authenticated.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import Any

import aiohttp

from .errors import (
    HassAuthTimeout,
    HassClientError,
    HassCommandError,
    HassConnectionError,
    HassNotConnectedError,
    HassTimeout,
)
from .protocol import (
    MSG_AUTH_INVALID,
    MSG_AUTH_OK,
    MSG_AUTH_REQUIRED,
    MSG_RESULT,
    build_auth,
    build_command,
    parse_auth_invalid,
    parse_result_error,
    parse_result_id,
)
from .transport.http import HassHttpClient
from .transport.ws_client import HassWsClient, HassWsMessageType

_LOGGER = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_AUTH_TIMEOUT = 10.0
DEFAULT_HTTP_TIMEOUT = 10.0


@dataclass(frozen=True, slots=True)
class ConnectionConfig:
    """Where and how to reach Home Assistant.

    Attributes:
        host: REST base URL, e.g. http://localhost:8123
        token: Long-lived access token
        socket_url: WebSocket URL, e.g. ws://localhost:8123/api/websocket
        request_timeout: Seconds to wait for a command's result frame
        auth_timeout: Seconds to wait for auth_ok/auth_invalid
        http_timeout: Total timeout for each REST request
    """

    host: str
    token: str
    socket_url: str
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    auth_timeout: float = DEFAULT_AUTH_TIMEOUT
    http_timeout: float = DEFAULT_HTTP_TIMEOUT


@dataclass(frozen=True, slots=True)
class ConnectionResult:
    """Outcome of connect(); failures carry a description instead of raising."""

    success: bool
    error: str | None = None


class HomeAssistantConnection:
    """HTTP + WebSocket client for Home Assistant.

    Usage:
        connection = HomeAssistantConnection(config)
        result = await connection.connect()
        if result.success:
            states = await connection.get_states()
        await connection.close()
    """

    def __init__(
        self,
        config: ConnectionConfig,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.config = config

        # HTTP
        self._session = session
        self._owns_session = session is None
        self._http: HassHttpClient | None = None

        # WebSocket
        self._ws: HassWsClient | None = None
        self._listen_task: asyncio.Task[None] | None = None
        self._auth_future: asyncio.Future[ConnectionResult] | None = None
        self._connected = False
        # Serializes connect/disconnect so overlapping calls cannot swap sockets
        self._lock = asyncio.Lock()

        # Request correlation
        self._next_id = 1
        self._pending: dict[int, asyncio.Future[Any]] = {}

    # -------------------------------------------------------------------------
    # Public API: Connection Management
    # -------------------------------------------------------------------------

    @property
    def is_connected(self) -> bool:
        """Check if the socket is open and authenticated."""
        return self._connected

    async def connect(self) -> ConnectionResult:
        """Probe the REST API, then open and authenticate the socket.

        Returns:
            ConnectionResult; never raises for transport or auth failures.
        """
        async with self._lock:
            return await self._connect()

    async def _connect(self) -> ConnectionResult:
        host = self.config.host
        try:
            await self._get_http().fetch_api_info()
        except HassClientError as err:
            _LOGGER.warning("[%s] HTTP probe failed: %s", host, err)
            return ConnectionResult(False, f"HTTP probe failed: {err}")

        # Reconnect drops whatever socket is left from a previous session
        await self._teardown_socket()

        ws_client = HassWsClient()
        try:
            await ws_client.connect(self.config.socket_url)
        except HassClientError as err:
            _LOGGER.warning("[%s] WebSocket connection failed: %s", host, err)
            return ConnectionResult(False, str(err))

        _LOGGER.debug("[%s] WebSocket open, authenticating", host)
        self._ws = ws_client
        auth_future: asyncio.Future[ConnectionResult] = (
            asyncio.get_running_loop().create_future()
        )
        self._auth_future = auth_future
        self._listen_task = asyncio.create_task(self._listen(ws_client))

        try:
            await ws_client.send_json(build_auth(self.config.token))
        except HassClientError as err:
            self._settle_auth(ConnectionResult(False, str(err)))

        try:
            result = await asyncio.wait_for(
                asyncio.shield(auth_future), timeout=self.config.auth_timeout
            )
        except TimeoutError:
            timeout_err = HassAuthTimeout(
                f"No authentication response within {self.config.auth_timeout}s"
            )
            _LOGGER.error("[%s] %s", host, timeout_err)
            result = ConnectionResult(False, str(timeout_err))
        finally:
            self._auth_future = None

        if result.success:
            _LOGGER.info("[%s] Connected to Home Assistant", host)
        else:
            await self._teardown_socket()
        return result

    async def disconnect(self) -> None:
        """Close the socket. Safe to call when already disconnected.

        The HTTP session stays open so REST fallbacks keep working.
        """
        async with self._lock:
            if self._ws is not None:
                _LOGGER.info("[%s] Disconnecting", self.config.host)
            await self._teardown_socket()

    async def close(self) -> None:
        """Disconnect and release the HTTP session if this connection owns it."""
        await self.disconnect()
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
        self._http = None

    async def get_version(self) -> str:
        """Return the Home Assistant version reported by /api."""
        try:
            info = await self._get_http().fetch_api_info()
        except HassClientError as err:
            raise HassClientError(
                f"Failed to get Home Assistant version: {err}"
            ) from err
        return str(info.get("version", ""))

    # -------------------------------------------------------------------------
    # Public API: Commands
    # -------------------------------------------------------------------------

    async def send_message(
        self, msg_type: str, payload: dict[str, Any] | None = None
    ) -> Any:
        """Send a command frame and wait for its result.

        Raises:
            HassNotConnectedError: If the socket is not authenticated
            HassTimeout: If no result arrives within request_timeout
            HassCommandError: If Home Assistant reports success=false
            HassConnectionError: If the socket drops while waiting
        """
        if self._ws is None or not self._connected:
            raise HassNotConnectedError("Not connected to Home Assistant")

        msg_id = self._next_id
        self._next_id += 1

        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending[msg_id] = future
        try:
            await self._ws.send_json(
                build_command(msg_id=msg_id, msg_type=msg_type, payload=payload)
            )
            return await asyncio.wait_for(future, timeout=self.config.request_timeout)
        except TimeoutError as err:
            _LOGGER.warning(
                "[%s] Request %d (%s) timed out", self.config.host, msg_id, msg_type
            )
            raise HassTimeout(f"Request timeout for message type {msg_type}") from err
        finally:
            self._pending.pop(msg_id, None)

    async def get_states(self) -> list[dict[str, Any]]:
        """Return all entity states, over the socket when possible."""
        try:
            if self.is_connected:
                states = await self.send_message("get_states")
            else:
                states = await self._get_http().fetch_states()
        except HassClientError as err:
            raise HassClientError(f"Failed to get entity states: {err}") from err
        return list(states or [])

    async def call_service(
        self, domain: str, service: str, data: dict[str, Any] | None = None
    ) -> Any:
        """Call a Home Assistant service, over the socket when possible."""
        service_data = data or {}
        try:
            if self.is_connected:
                return await self.send_message(
                    "call_service",
                    {"domain": domain, "service": service, "service_data": service_data},
                )
            return await self._get_http().call_service(domain, service, service_data)
        except HassClientError as err:
            raise HassClientError(
                f"Failed to call service {domain}.{service}: {err}"
            ) from err

    # -------------------------------------------------------------------------
    # Internal: Socket Lifecycle
    # -------------------------------------------------------------------------

    def _get_http(self) -> HassHttpClient:
        if self._http is None:
            if self._session is None:
                self._session = aiohttp.ClientSession()
            self._http = HassHttpClient(
                self._session,
                self.config.host,
                token=self.config.token,
                timeout=self.config.http_timeout,
            )
        return self._http

    async def _teardown_socket(self) -> None:
        """Stop the listener, close the socket and fail outstanding requests."""
        self._connected = False

        task, self._listen_task = self._listen_task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        ws, self._ws = self._ws, None
        if ws is not None:
            try:
                await asyncio.wait_for(ws.close(), timeout=2.0)
            except TimeoutError:
                _LOGGER.warning("[%s] WebSocket close timed out", self.config.host)

        self._handle_socket_lost("Connection to Home Assistant closed")

    def _settle_auth(self, result: ConnectionResult) -> None:
        future = self._auth_future
        if future is not None and not future.done():
            future.set_result(result)

    def _fail_pending(self, reason: str) -> None:
        pending, self._pending = self._pending, {}
        for future in pending.values():
            if not future.done():
                future.set_exception(HassConnectionError(reason))

    def _handle_socket_lost(self, reason: str) -> None:
        self._connected = False
        self._settle_auth(ConnectionResult(False, reason))
        self._fail_pending(reason)

    # -------------------------------------------------------------------------
    # Internal: Message Listener
    # -------------------------------------------------------------------------

    async def _listen(self, ws_client: HassWsClient) -> None:
        """Dispatch incoming frames until the socket closes."""
        host = self.config.host
        try:
            async for msg in ws_client:
                if msg.type is HassWsMessageType.TEXT:
                    if msg.frame is None:
                        _LOGGER.warning("[%s] Invalid message: %.200s", host, msg.data)
                        continue
                    self._handle_message(msg.frame)

                elif msg.type is HassWsMessageType.CLOSED:
                    _LOGGER.info("[%s] WebSocket closed by Home Assistant", host)
                    self._handle_socket_lost("WebSocket closed by Home Assistant")
                    break

                elif msg.type is HassWsMessageType.ERROR:
                    _LOGGER.error("[%s] WebSocket error", host)
                    self._handle_socket_lost("WebSocket error")
                    break

        except asyncio.CancelledError:
            _LOGGER.debug("[%s] Listener cancelled", host)
            raise

    def _handle_message(self, data: dict[str, Any]) -> None:
        msg_type = data.get("type")

        if msg_type == MSG_RESULT:
            self._handle_result(data)
        elif msg_type == MSG_AUTH_OK:
            self._connected = True
            _LOGGER.debug(
                "[%s] Authenticated (Home Assistant %s)",
                self.config.host,
                data.get("ha_version", "unknown"),
            )
            self._settle_auth(ConnectionResult(True))
        elif msg_type == MSG_AUTH_INVALID:
            self._connected = False
            reason = parse_auth_invalid(data)
            _LOGGER.error("[%s] Authentication rejected: %s", self.config.host, reason)
            self._settle_auth(ConnectionResult(False, f"Authentication failed: {reason}"))
        elif msg_type == MSG_AUTH_REQUIRED:
            _LOGGER.debug("[%s] Server requested authentication", self.config.host)
        else:
            _LOGGER.debug("[%s] Unhandled message type: %s", self.config.host, msg_type)

    def _handle_result(self, data: dict[str, Any]) -> None:
        msg_id = parse_result_id(data)
        if msg_id is None:
            _LOGGER.warning("[%s] Result frame without id", self.config.host)
            return

        # pop() makes the first matching frame (or the timeout) the only winner
        future = self._pending.pop(msg_id, None)
        if future is None or future.done():
            _LOGGER.debug("[%s] Ignoring result for id %d", self.config.host, msg_id)
            return

        if data.get("success"):
            future.set_result(data.get("result"))
        else:
            message, code = parse_result_error(data)
            future.set_exception(HassCommandError(message, code))
