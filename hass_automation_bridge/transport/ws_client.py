"""WebSocket client wrapper for the Home Assistant API socket."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from websockets.asyncio.client import ClientConnection
from websockets.exceptions import ConnectionClosed

from ..errors import HassConnectionError
from .ws import connect_websocket

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class HassWsMessageType(Enum):
    """Normalized WebSocket message types."""

    TEXT = "text"
    CLOSED = "closed"
    ERROR = "error"


@dataclass(frozen=True)
class HassWsMessage:
    """Normalized WebSocket message.

    TEXT messages carry the raw text in ``data`` and, when it decodes to a JSON
    object, that object in ``frame``. ``frame`` is None for text that is not a
    Home Assistant frame.
    """

    type: HassWsMessageType
    data: str | None = None
    frame: dict[str, Any] | None = None


class HassWsClient:
    """Wrapper around websockets library for the Home Assistant socket."""

    def __init__(self) -> None:
        self._ws: ClientConnection | None = None

    async def connect(
        self,
        url: str,
        *,
        ping_interval: int | None = 20,
        timeout: float = 15.0,
    ) -> None:
        """Connect to the Home Assistant websocket."""
        self._ws = await connect_websocket(
            url,
            ping_interval=ping_interval,
            timeout=timeout,
        )

    async def close(self) -> None:
        """Close the websocket connection."""
        if self._ws is not None:
            await self._ws.close()

    async def send_json(self, payload: dict[str, Any]) -> None:
        """Send a JSON payload to the websocket."""
        if self._ws is None:
            raise HassConnectionError("WebSocket is not connected")
        try:
            await self._ws.send(json.dumps(payload))
        except ConnectionClosed as err:
            raise HassConnectionError("WebSocket closed while sending") from err

    def __aiter__(self) -> AsyncIterator[HassWsMessage]:
        if self._ws is None:
            raise HassConnectionError("WebSocket is not connected")
        return self._iter_messages()

    async def _iter_messages(self) -> AsyncIterator[HassWsMessage]:
        if self._ws is None:
            raise HassConnectionError("WebSocket is not connected")

        try:
            async for msg in self._ws:
                if isinstance(msg, bytes):
                    continue
                for message in self.decode_text(str(msg)):
                    yield message
        except ConnectionClosed:
            yield HassWsMessage(type=HassWsMessageType.CLOSED)
        except Exception:
            yield HassWsMessage(type=HassWsMessageType.ERROR)
        else:
            # Normal iteration completion means the peer closed gracefully.
            yield HassWsMessage(type=HassWsMessageType.CLOSED)

    @staticmethod
    def decode_text(raw: str) -> list[HassWsMessage]:
        """Split one text frame into TEXT messages.

        Home Assistant may coalesce several frames into a JSON array; each
        object becomes its own message. Anything else yields a single message
        with ``frame`` set to None.
        """
        try:
            payload = json.loads(raw)
        except ValueError:
            return [HassWsMessage(HassWsMessageType.TEXT, raw)]

        if isinstance(payload, dict):
            return [HassWsMessage(HassWsMessageType.TEXT, raw, payload)]
        if (
            isinstance(payload, list)
            and payload
            and all(isinstance(item, dict) for item in payload)
        ):
            return [HassWsMessage(HassWsMessageType.TEXT, raw, item) for item in payload]
        return [HassWsMessage(HassWsMessageType.TEXT, raw)]
