"""Polling coordinator driving the gateway and the backends."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from .client import FritzBoxAPI
from .dispatcher import BackendDispatcher
from .exceptions import ApiError, FritzLogError, format_error_chain

_LOGGER = logging.getLogger(__name__)


class PollingCoordinator:
    """Coordinator to poll the device list and dispatch snapshots."""

    def __init__(
        self,
        api: FritzBoxAPI,
        dispatcher: BackendDispatcher,
        update_interval: timedelta,
    ) -> None:
        """Initialize the coordinator."""
        self.api = api
        self.dispatcher = dispatcher
        self.update_interval = update_interval
        self._sid: str | None = None

    async def async_setup(self) -> None:
        """Log in once. Errors are fatal to the caller."""
        self._sid = await self.api.authenticate()
        _LOGGER.debug("Session established (sid ...%s)", self._sid[-4:])

    async def async_refresh(self, tick: datetime | None = None) -> bool:
        """Run one tick: fetch a snapshot and hand it to the backends.

        Failures are logged and reported as False, the session is kept.
        """
        if self._sid is None:
            raise FritzLogError("Coordinator used before async_setup")

        tick = tick or datetime.now(timezone.utc)
        try:
            snapshot = await self.api.async_get_device_list(self._sid)
        except ApiError as err:
            error = ApiError("Failed getting device infos")
            error.__cause__ = err
            _LOGGER.error("%s", format_error_chain(error))
            return False
        except Exception:
            _LOGGER.exception("Failed getting device infos")
            return False

        self.dispatcher.dispatch(tick, snapshot)
        return True

    async def async_run(self) -> None:
        """Authenticate, then poll forever at a fixed rate starting now."""
        await self.async_setup()

        loop = asyncio.get_running_loop()
        interval = self.update_interval.total_seconds()
        next_tick = loop.time()
        while True:
            await self.async_refresh()

            next_tick += interval
            now = loop.time()
            if now > next_tick:
                skipped = int((now - next_tick) // interval) + 1
                _LOGGER.warning("Polling fell behind, skipping %s tick(s)", skipped)
                next_tick += skipped * interval
            await asyncio.sleep(next_tick - now)
