"""Run the bridge: ``python -m hass_automation_bridge``."""

from __future__ import annotations

import logging

from aiohttp import web

from .config import BridgeConfig
from .connection import HomeAssistantConnection
from .server import create_app

_LOGGER = logging.getLogger(__name__)


def main() -> None:
    config = BridgeConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not config.token:
        _LOGGER.warning("HASS_TOKEN is empty; Home Assistant will reject requests")

    app = create_app(HomeAssistantConnection(config.connection_config()))
    _LOGGER.info("Home Assistant bridge listening on port %d", config.port)
    web.run_app(app, port=config.port, print=None)


if __name__ == "__main__":
    main()
