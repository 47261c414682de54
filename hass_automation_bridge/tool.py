"""Tool adapter exposing automation management to tool-invocation clients."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .automation import AUTOMATION_MODES, AutomationConfig, AutomationService, ServiceResult

_LOGGER = logging.getLogger(__name__)

TOOL_NAME = "automation"
ACTIONS: tuple[str, ...] = ("list", "create", "update", "delete", "trigger", "toggle")

_NEEDS_ID = frozenset({"update", "delete", "trigger", "toggle"})
_NEEDS_CONFIG = frozenset({"create", "update"})


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Uniform tool response."""

    success: bool
    automations: list[dict[str, Any]] | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success}
        if self.automations is not None:
            data["automations"] = self.automations
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_service_result(cls, result: ServiceResult) -> ToolResult:
        return cls(success=result.success, error=result.error)


class AutomationTool:
    """Validate tool requests and dispatch them to AutomationService."""

    def __init__(self, service: AutomationService) -> None:
        self._service = service

    @property
    def name(self) -> str:
        return TOOL_NAME

    def manifest(self) -> dict[str, Any]:
        """Return the tool description advertised at /mcp/tools."""
        return {
            "name": TOOL_NAME,
            "description": "Manages Home Assistant automations",
            "parameters": {
                "type": "object",
                "properties": {
                    "action": {
                        "type": "string",
                        "enum": list(ACTIONS),
                        "description": "Action to perform",
                    },
                    "automation_id": {
                        "type": "string",
                        "description": (
                            "ID of the automation "
                            "(required for update, delete, trigger, toggle)"
                        ),
                    },
                    "config": {
                        "type": "object",
                        "description": "Automation configuration (required for create, update)",
                        "properties": {
                            "alias": {"type": "string"},
                            "description": {"type": "string"},
                            "trigger": {"type": "array"},
                            "condition": {"type": "array"},
                            "action": {"type": "array"},
                            "mode": {"type": "string", "enum": sorted(AUTOMATION_MODES)},
                        },
                        "required": ["alias", "trigger", "action"],
                    },
                },
                "required": ["action"],
            },
        }

    async def handle(self, request: Mapping[str, Any]) -> ToolResult:
        """Run one tool request. Never raises."""
        action = request.get("action")
        try:
            return await self._dispatch(action, request)
        except Exception as err:  # tool boundary: every failure becomes a result
            _LOGGER.warning("Automation tool action %s failed: %s", action, err)
            return ToolResult(False, error=str(err))

    async def _dispatch(self, action: Any, request: Mapping[str, Any]) -> ToolResult:
        if action not in ACTIONS:
            return ToolResult(False, error=f"Invalid action: {action}")

        automation_id = request.get("automation_id")
        raw_config = request.get("config")

        if action in _NEEDS_ID and not automation_id:
            return ToolResult(False, error="Missing automation_id parameter")
        if action in _NEEDS_CONFIG and not raw_config:
            return ToolResult(False, error="Missing config parameter")
        if raw_config is not None and not isinstance(raw_config, Mapping):
            return ToolResult(False, error="config must be an object")

        if action == "list":
            automations = await self._service.get_automations()
            return ToolResult(True, automations=automations)
        if action == "create":
            result = await self._service.create_automation(
                AutomationConfig.from_dict(raw_config)
            )
        elif action == "update":
            result = await self._service.update_automation(
                automation_id, AutomationConfig.from_dict(raw_config)
            )
        elif action == "delete":
            result = await self._service.delete_automation(automation_id)
        elif action == "trigger":
            result = await self._service.trigger_automation(automation_id)
        else:
            result = await self._service.toggle_automation(automation_id)
        return ToolResult.from_service_result(result)
