"""aiohttp front-end routing tool requests to the automation tool.

Routes:
- POST /mcp        {"tool": "automation", ...args} -> tool result
- GET  /mcp/tools  tool manifests
- GET  /health     connection status and Home Assistant version
"""

from __future__ import annotations

import json
import logging
from typing import Any

from aiohttp import web

from .automation import AutomationService
from .connection import HomeAssistantConnection
from .errors import HassClientError
from .tool import AutomationTool

_LOGGER = logging.getLogger(__name__)

CONNECTION_KEY: web.AppKey[HomeAssistantConnection] = web.AppKey(
    "connection", HomeAssistantConnection
)
TOOLS_KEY: web.AppKey[dict[str, AutomationTool]] = web.AppKey("tools", dict)


async def handle_mcp(request: web.Request) -> web.Response:
    try:
        body = await request.json()
    except json.JSONDecodeError:
        return web.json_response(
            {"success": False, "error": "Request body must be JSON"}, status=400
        )
    if not isinstance(body, dict):
        return web.json_response(
            {"success": False, "error": "Request body must be a JSON object"},
            status=400,
        )

    tool_name = body.pop("tool", None)
    tool = request.app[TOOLS_KEY].get(tool_name) if isinstance(tool_name, str) else None
    if tool is None:
        return web.json_response(
            {"success": False, "error": f"Unknown tool: {tool_name}"}, status=400
        )

    try:
        result = await tool.handle(body)
    except Exception as err:
        _LOGGER.exception("Tool %s raised: %s", tool_name, err)
        return web.json_response({"success": False, "error": str(err)}, status=500)
    return web.json_response(result.to_dict())


async def handle_tools(request: web.Request) -> web.Response:
    tools = request.app[TOOLS_KEY]
    return web.json_response({"tools": [tool.manifest() for tool in tools.values()]})


async def handle_health(request: web.Request) -> web.Response:
    connection = request.app[CONNECTION_KEY]
    try:
        if not connection.is_connected:
            await connection.connect()
        version = await connection.get_version()
    except HassClientError as err:
        return web.json_response({"status": "error", "message": str(err)}, status=500)

    payload: dict[str, Any] = {
        "status": "ok",
        "homeAssistant": {"connected": connection.is_connected, "version": version},
    }
    return web.json_response(payload)


async def _connect_on_startup(app: web.Application) -> None:
    connection = app[CONNECTION_KEY]
    result = await connection.connect()
    if result.success:
        _LOGGER.info("Connected to Home Assistant")
    else:
        _LOGGER.error("Failed to connect to Home Assistant: %s", result.error)


async def _close_on_cleanup(app: web.Application) -> None:
    await app[CONNECTION_KEY].close()


def create_app(
    connection: HomeAssistantConnection, *, connect_on_startup: bool = True
) -> web.Application:
    """Build the bridge application around an existing connection."""
    tool = AutomationTool(AutomationService(connection))

    app = web.Application()
    app[CONNECTION_KEY] = connection
    app[TOOLS_KEY] = {tool.name: tool}
    app.router.add_post("/mcp", handle_mcp)
    app.router.add_get("/mcp/tools", handle_tools)
    app.router.add_get("/health", handle_health)

    if connect_on_startup:
        app.on_startup.append(_connect_on_startup)
    app.on_cleanup.append(_close_on_cleanup)
    return app
