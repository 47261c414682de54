"""Automation management on top of HomeAssistantConnection.

Automation configs are forwarded to Home Assistant untouched. Nothing here
evaluates triggers, conditions or actions.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .errors import HassClientError, HassNotConnectedError

if TYPE_CHECKING:
    from .connection import HomeAssistantConnection

_LOGGER = logging.getLogger(__name__)

AUTOMATION_MODES: frozenset[str] = frozenset({"single", "parallel", "queued", "restart"})

_KNOWN_FIELDS = (
    "id",
    "alias",
    "description",
    "trigger",
    "condition",
    "action",
    "mode",
    "max",
)


@dataclass(slots=True)
class AutomationConfig:
    """Automation configuration as Home Assistant stores it.

    Named fields cover the common keys; anything else lives in ``extra`` and
    is sent back verbatim so platform-specific options survive a round trip.
    """

    alias: str | None = None
    description: str | None = None
    trigger: list[dict[str, Any]] = field(default_factory=list)
    condition: list[dict[str, Any]] = field(default_factory=list)
    action: list[dict[str, Any]] = field(default_factory=list)
    mode: str | None = None
    max: int | None = None
    id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AutomationConfig:
        """Build a config from a Home Assistant automation object."""
        return cls(
            alias=data.get("alias"),
            description=data.get("description"),
            trigger=list(data.get("trigger") or []),
            condition=list(data.get("condition") or []),
            action=list(data.get("action") or []),
            mode=data.get("mode"),
            max=data.get("max"),
            id=data.get("id"),
            extra={k: v for k, v in data.items() if k not in _KNOWN_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire shape, omitting unset optional keys."""
        data: dict[str, Any] = dict(self.extra)
        if self.id is not None:
            data["id"] = self.id
        if self.alias is not None:
            data["alias"] = self.alias
        if self.description is not None:
            data["description"] = self.description
        data["trigger"] = list(self.trigger)
        if self.condition:
            data["condition"] = list(self.condition)
        data["action"] = list(self.action)
        if self.mode is not None:
            data["mode"] = self.mode
        if self.max is not None:
            data["max"] = self.max
        return data


@dataclass(frozen=True, slots=True)
class ServiceResult:
    """Outcome of a mutating automation operation."""

    success: bool
    error: str | None = None


class AutomationService:
    """Stateless facade mapping automation operations onto the connection."""

    def __init__(self, connection: HomeAssistantConnection) -> None:
        self._connection = connection

    def _check_connection(self) -> None:
        if not self._connection.is_connected:
            raise HassNotConnectedError("Not connected to Home Assistant")

    async def get_automations(self) -> list[dict[str, Any]]:
        """List all automations.

        Raises:
            HassNotConnectedError: If the socket is not authenticated
            HassClientError: If Home Assistant fails the request
        """
        self._check_connection()
        try:
            automations = await self._connection.send_message("config/automation/list")
        except HassClientError as err:
            raise HassClientError(f"Failed to get automations: {err}") from err
        return list(automations or [])

    async def create_automation(
        self, config: AutomationConfig | Mapping[str, Any]
    ) -> ServiceResult:
        self._check_connection()
        try:
            await self._connection.send_message(
                "config/automation/config", {"config": _as_wire(config)}
            )
        except HassClientError as err:
            _LOGGER.warning("Create automation failed: %s", err)
            return ServiceResult(False, f"Failed to create automation: {err}")
        return ServiceResult(True)

    async def update_automation(
        self, automation_id: str, config: AutomationConfig | Mapping[str, Any]
    ) -> ServiceResult:
        self._check_connection()
        try:
            await self._connection.send_message(
                "config/automation/config",
                {"automation_id": automation_id, "config": _as_wire(config)},
            )
        except HassClientError as err:
            _LOGGER.warning("Update of %s failed: %s", automation_id, err)
            return ServiceResult(
                False, f"Failed to update automation {automation_id}: {err}"
            )
        return ServiceResult(True)

    async def delete_automation(self, automation_id: str) -> ServiceResult:
        self._check_connection()
        try:
            await self._connection.send_message(
                "config/automation/delete", {"automation_id": automation_id}
            )
        except HassClientError as err:
            _LOGGER.warning("Delete of %s failed: %s", automation_id, err)
            return ServiceResult(
                False, f"Failed to delete automation {automation_id}: {err}"
            )
        return ServiceResult(True)

    async def trigger_automation(self, automation_id: str) -> ServiceResult:
        """Run an automation's actions now."""
        return await self._call_automation_service("trigger", automation_id)

    async def toggle_automation(self, automation_id: str) -> ServiceResult:
        """Flip an automation between enabled and disabled."""
        return await self._call_automation_service("toggle", automation_id)

    async def _call_automation_service(
        self, service: str, automation_id: str
    ) -> ServiceResult:
        self._check_connection()
        try:
            await self._connection.call_service(
                "automation", service, {"entity_id": automation_id}
            )
        except HassClientError as err:
            _LOGGER.warning("automation.%s on %s failed: %s", service, automation_id, err)
            return ServiceResult(
                False, f"Failed to {service} automation {automation_id}: {err}"
            )
        return ServiceResult(True)


def _as_wire(config: AutomationConfig | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(config, AutomationConfig):
        return config.to_dict()
    return dict(config)
