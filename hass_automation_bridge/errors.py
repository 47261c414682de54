"""Client error types for Home Assistant interactions."""

from __future__ import annotations


class HassClientError(Exception):
    """Base error for Home Assistant client failures."""


class HassTimeout(HassClientError):
    """Timeout while communicating with Home Assistant."""


class HassAuthTimeout(HassTimeout):
    """No auth_ok/auth_invalid frame arrived within the auth window."""


class HassConnectionError(HassClientError):
    """Network connection to Home Assistant failed."""


class HassNotConnectedError(HassConnectionError):
    """Operation requires an authenticated WebSocket."""


class HassHandshakeError(HassClientError):
    """WebSocket handshake failed."""


class HassAuthError(HassClientError):
    """Home Assistant rejected the access token."""


class HassResponseError(HassClientError):
    """HTTP response error from Home Assistant."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status


class HassCommandError(HassClientError):
    """Result frame reported success=false."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code
