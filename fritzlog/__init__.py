"""Poll a home automation gateway and record its device readings."""

from __future__ import annotations

import logging
from datetime import timedelta

import aiohttp

from .client import AsyncSessionProvider, FritzBoxAPI
from .coordinator import PollingCoordinator
from .dispatcher import BackendDispatcher
from .settings import BaseSettings

__version__ = "0.1.0"

_LOGGER = logging.getLogger(__name__)


async def async_run(settings: BaseSettings, dispatcher: BackendDispatcher) -> None:
    """Set up the gateway client and poll until cancelled."""
    async with aiohttp.ClientSession() as client_session:
        api = FritzBoxAPI(
            client_session=client_session,
            base_url=settings.url,
            session_provider=AsyncSessionProvider(
                client_session=client_session,
                base_url=settings.url,
                username=settings.username,
                password=settings.password,
                timeout=settings.timeout,
            ),
            timeout=settings.timeout,
        )

        coordinator = PollingCoordinator(
            api, dispatcher, timedelta(seconds=settings.interval)
        )
        _LOGGER.info(
            "Polling %s every %s seconds", settings.url, settings.interval
        )
        try:
            await coordinator.async_run()
        finally:
            await dispatcher.async_wait_idle()
