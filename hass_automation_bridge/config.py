"""Environment configuration for the bridge process."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from .connection import ConnectionConfig

DEFAULT_HOST = "http://localhost:8123"
DEFAULT_SOCKET_URL = "ws://localhost:8123/api/websocket"
DEFAULT_PORT = 3000


@dataclass(frozen=True, slots=True)
class BridgeConfig:
    """Settings for one bridge process."""

    host: str = DEFAULT_HOST
    token: str = ""
    socket_url: str = DEFAULT_SOCKET_URL
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, *, dotenv: bool = True
    ) -> BridgeConfig:
        """Read HASS_HOST, HASS_TOKEN, HASS_SOCKET_URL, PORT and HASS_BRIDGE_LOG_LEVEL.

        A ``.env`` file in the working directory is loaded first unless
        ``dotenv`` is False; variables already set in the environment win.
        """
        if environ is None:
            if dotenv:
                load_dotenv(find_dotenv(usecwd=True))
            environ = os.environ

        port_raw = environ.get("PORT") or str(DEFAULT_PORT)
        try:
            port = int(port_raw)
        except ValueError as err:
            raise ValueError(f"PORT must be an integer, got {port_raw!r}") from err

        return cls(
            host=environ.get("HASS_HOST") or DEFAULT_HOST,
            token=environ.get("HASS_TOKEN", ""),
            socket_url=environ.get("HASS_SOCKET_URL") or DEFAULT_SOCKET_URL,
            port=port,
            log_level=(environ.get("HASS_BRIDGE_LOG_LEVEL") or "INFO").upper(),
        )

    def connection_config(self) -> ConnectionConfig:
        return ConnectionConfig(
            host=self.host, token=self.token, socket_url=self.socket_url
        )
