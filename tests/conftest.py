"""Pytest configuration and fixtures for hass_automation_bridge tests."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp.test_utils import TestServer

from hass_automation_bridge import ConnectionConfig, HomeAssistantConnection

from .mock_hass import VALID_TOKEN, MockHomeAssistant


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    import aiohttp

    return MagicMock(spec=aiohttp.ClientSession)


def create_mock_response(
    status: int = 200,
    json_data: Any = None,
) -> AsyncMock:
    """Create a configured mock response usable as ``async with`` target.

    Args:
        status: HTTP status code
        json_data: Data to return from json() call

    Returns:
        Configured AsyncMock response
    """
    response = AsyncMock()
    response.status = status

    if json_data is not None:
        response.json.return_value = json_data

    response.__aenter__.return_value = response
    response.__aexit__.return_value = None

    return response


@pytest.fixture
async def mock_hass() -> AsyncIterator[MockHomeAssistant]:
    """Run a mock Home Assistant on a free local port."""
    hass = MockHomeAssistant()
    server = TestServer(hass.app)
    await server.start_server()
    hass.base_url = f"http://{server.host}:{server.port}"
    hass.socket_url = f"ws://{server.host}:{server.port}/api/websocket"
    yield hass
    await server.close()


def make_config(hass: MockHomeAssistant, **overrides: Any) -> ConnectionConfig:
    """ConnectionConfig pointing at the mock server."""
    values: dict[str, Any] = {
        "host": hass.base_url,
        "token": VALID_TOKEN,
        "socket_url": hass.socket_url,
    }
    values.update(overrides)
    return ConnectionConfig(**values)


@pytest.fixture
async def connection(
    mock_hass: MockHomeAssistant,
) -> AsyncIterator[HomeAssistantConnection]:
    """Connected HomeAssistantConnection against the mock server."""
    conn = HomeAssistantConnection(make_config(mock_hass))
    result = await conn.connect()
    assert result.success, result.error
    yield conn
    await conn.close()
