"""Transport layer for the Home Assistant bridge.

Components:
- http: aiohttp client for the REST API
- ws: WebSocket connection setup
- ws_client: WebSocket message iteration
"""

from .http import HassHttpClient
from .ws import connect_websocket
from .ws_client import HassWsClient, HassWsMessage, HassWsMessageType

__all__ = [
    "HassHttpClient",
    "HassWsClient",
    "HassWsMessage",
    "HassWsMessageType",
    "connect_websocket",
]
