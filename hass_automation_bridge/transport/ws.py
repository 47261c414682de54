"""WebSocket helpers for the Home Assistant API socket."""

from __future__ import annotations

import asyncio

import websockets
from websockets.asyncio.client import ClientConnection
from websockets.exceptions import (
    InvalidHandshake,
    InvalidURI,
    WebSocketException,
)

from ..errors import (
    HassConnectionError,
    HassHandshakeError,
    HassTimeout,
)


async def connect_websocket(
    url: str,
    *,
    ping_interval: int | None = 20,
    timeout: float = 15.0,
) -> ClientConnection:
    """Connect to a WebSocket endpoint.

    Args:
        url: Full socket URL, e.g. ws://localhost:8123/api/websocket
        ping_interval: Interval for ping frames
        timeout: Connection timeout
    """
    try:
        return await asyncio.wait_for(
            websockets.connect(
                url,
                ping_interval=ping_interval,
                close_timeout=5,
                max_size=None,
            ),
            timeout=timeout,
        )
    except TimeoutError as err:
        raise HassTimeout(f"WebSocket connection to {url} timed out") from err
    except (InvalidHandshake, InvalidURI) as err:
        raise HassHandshakeError(f"WebSocket handshake failed for {url}") from err
    except (OSError, WebSocketException) as err:
        raise HassConnectionError(f"WebSocket connection failed: {url}") from err
