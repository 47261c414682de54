"""In-process stand-in for a Home Assistant instance.

Serves the REST endpoints and the command WebSocket the bridge talks to, with
knobs for the failure modes the tests need (silent auth, HTML on /api,
dropped commands, server-side socket close).
"""

from __future__ import annotations

import copy
import json
import re
from typing import Any

from aiohttp import WSMsgType, web

VALID_TOKEN = "mock_token"
HA_VERSION = "2023.3.0"


def _default_entities() -> dict[str, dict[str, Any]]:
    return {
        "light.living_room": {
            "entity_id": "light.living_room",
            "state": "off",
            "attributes": {"friendly_name": "Living Room Light", "supported_features": 0},
        },
        "switch.kitchen": {
            "entity_id": "switch.kitchen",
            "state": "on",
            "attributes": {"friendly_name": "Kitchen Switch", "supported_features": 0},
        },
        "binary_sensor.motion": {
            "entity_id": "binary_sensor.motion",
            "state": "off",
            "attributes": {"friendly_name": "Motion Sensor", "device_class": "motion"},
        },
    }


def _default_automations() -> dict[str, dict[str, Any]]:
    return {
        "automation.night_light": {
            "id": "automation.night_light",
            "alias": "Night Light",
            "description": "Turn on lights at sunset",
            "trigger": [{"platform": "sun", "event": "sunset", "offset": "+00:30:00"}],
            "condition": [],
            "action": [
                {
                    "service": "light.turn_on",
                    "target": {"entity_id": "light.living_room"},
                }
            ],
            "mode": "single",
        }
    }


def automation_id_for(alias: str) -> str:
    """Id the mock assigns to a newly created automation."""
    return "automation." + re.sub(r"\s+", "_", alias.lower())


class MockHomeAssistant:
    """Mock Home Assistant REST + WebSocket server."""

    def __init__(self, *, valid_token: str = VALID_TOKEN) -> None:
        self.valid_token = valid_token
        # Filled in once the server is listening
        self.base_url = ""
        self.socket_url = ""
        # Token accepted on the socket; differs from valid_token to force auth_invalid
        self.socket_token = valid_token
        self.silent_auth = False
        # Answer /api with an HTML page, like a proxy or an unrelated web server
        self.html_api = False
        self.ignored_types: set[str] = set()

        self.entities = _default_entities()
        self.automations = _default_automations()
        self.service_calls: list[tuple[str, str, dict[str, Any]]] = []
        self.ws_commands: list[dict[str, Any]] = []
        self.http_requests: list[str] = []

        self._sockets: list[web.WebSocketResponse] = []
        self.app = self._build_app()

    def _build_app(self) -> web.Application:
        app = web.Application(middlewares=[self._auth_middleware])
        app.router.add_get("/api", self._api)
        app.router.add_get("/api/states", self._states)
        app.router.add_post("/api/services/{domain}/{service}", self._call_service)
        app.router.add_get("/api/websocket", self._websocket)
        app.on_shutdown.append(self._shutdown)
        return app

    # ------------------------------------------------------------------ HTTP

    @web.middleware
    async def _auth_middleware(self, request: web.Request, handler: Any) -> Any:
        if request.path != "/api/websocket":
            self.http_requests.append(f"{request.method} {request.path}")
            token = request.headers.get("Authorization", "").removeprefix("Bearer ")
            if token != self.valid_token:
                return web.json_response({"message": "Unauthorized"}, status=401)
        return await handler(request)

    async def _api(self, request: web.Request) -> web.Response:
        if self.html_api:
            return web.Response(text="<html>not hass</html>", content_type="text/html")
        return web.json_response({"message": "API running.", "version": HA_VERSION})

    async def _states(self, request: web.Request) -> web.Response:
        return web.json_response(list(self.entities.values()))

    async def _call_service(self, request: web.Request) -> web.Response:
        domain = request.match_info["domain"]
        service = request.match_info["service"]
        data = await request.json()
        self._apply_service(domain, service, data)
        return web.json_response({"success": True})

    def _apply_service(self, domain: str, service: str, data: dict[str, Any]) -> None:
        self.service_calls.append((domain, service, copy.deepcopy(data)))
        if domain == "light" and service in ("turn_on", "turn_off"):
            entity_ids = data.get("entity_id")
            if isinstance(entity_ids, str):
                entity_ids = [entity_ids]
            for entity_id in entity_ids or []:
                entity = self.entities.get(entity_id)
                if entity is not None:
                    entity["state"] = "on" if service == "turn_on" else "off"

    # ------------------------------------------------------------- WebSocket

    async def _websocket(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        self._sockets.append(ws)
        await ws.send_json({"type": "auth_required", "ha_version": HA_VERSION})

        async for msg in ws:
            if msg.type is not WSMsgType.TEXT:
                continue
            reply = self._handle_frame(json.loads(msg.data))
            if reply is not None:
                await ws.send_json(reply)

        self._sockets.remove(ws)
        return ws

    def _handle_frame(self, data: dict[str, Any]) -> dict[str, Any] | None:
        msg_type = data.get("type")

        if msg_type == "auth":
            if self.silent_auth:
                return None
            if data.get("access_token") == self.socket_token:
                return {"type": "auth_ok", "ha_version": HA_VERSION}
            return {"type": "auth_invalid", "message": "Invalid token"}

        self.ws_commands.append(data)
        if msg_type in self.ignored_types:
            return None

        msg_id = data.get("id")
        if msg_type == "get_states":
            return _result(msg_id, list(self.entities.values()))
        if msg_type == "config/automation/list":
            return _result(msg_id, list(self.automations.values()))
        if msg_type == "config/automation/config":
            config = data.get("config") or {}
            automation_id = data.get("automation_id") or automation_id_for(
                config.get("alias", "")
            )
            self.automations[automation_id] = {**config, "id": automation_id}
            return _result(msg_id, None)
        if msg_type == "config/automation/delete":
            automation_id = data.get("automation_id")
            if automation_id not in self.automations:
                return _error(msg_id, "not_found", "Automation not found")
            del self.automations[automation_id]
            return _result(msg_id, None)
        if msg_type == "call_service":
            self._apply_service(
                data["domain"], data["service"], data.get("service_data") or {}
            )
            return _result(msg_id, {"context": {"id": f"ctx-{msg_id}"}})
        return _error(msg_id, "unknown_command", "Unknown command.")

    async def close_sockets(self) -> None:
        """Close every open client socket from the server side."""
        for ws in list(self._sockets):
            await ws.close()

    async def _shutdown(self, app: web.Application) -> None:
        await self.close_sockets()


def _result(msg_id: Any, result: Any) -> dict[str, Any]:
    return {"id": msg_id, "type": "result", "success": True, "result": result}


def _error(msg_id: Any, code: str, message: str) -> dict[str, Any]:
    return {
        "id": msg_id,
        "type": "result",
        "success": False,
        "error": {"code": code, "message": message},
    }
