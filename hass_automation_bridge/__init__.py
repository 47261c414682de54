"""Bridge exposing Home Assistant automation management to tool clients."""

__version__ = "0.1.0"

from .automation import AutomationConfig, AutomationService, ServiceResult
from .connection import ConnectionConfig, ConnectionResult, HomeAssistantConnection
from .errors import (
    HassAuthError,
    HassAuthTimeout,
    HassClientError,
    HassCommandError,
    HassConnectionError,
    HassHandshakeError,
    HassNotConnectedError,
    HassResponseError,
    HassTimeout,
)
from .protocol import build_auth, build_command
from .tool import AutomationTool, ToolResult

__all__ = [
    "AutomationConfig",
    "AutomationService",
    "AutomationTool",
    "ConnectionConfig",
    "ConnectionResult",
    "HassAuthError",
    "HassAuthTimeout",
    "HassClientError",
    "HassCommandError",
    "HassConnectionError",
    "HassHandshakeError",
    "HassNotConnectedError",
    "HassResponseError",
    "HassTimeout",
    "HomeAssistantConnection",
    "ServiceResult",
    "ToolResult",
    "__version__",
    "build_auth",
    "build_command",
]
