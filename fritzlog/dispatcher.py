"""Fan device snapshots out to the enabled backends."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime

from .backends import Backend
from .backends.console import ConsoleBackend
from .backends.csvfile import CsvBackend
from .exceptions import BackendError, UnknownBackendError, format_error_chain
from .model import DeviceSnapshot
from .settings import ConfigStore

_LOGGER = logging.getLogger(__name__)

BACKEND_TYPES: tuple[type[Backend], ...] = (ConsoleBackend, CsvBackend)


@dataclass(frozen=True)
class BackendRegistration:
    name: str
    enabled: bool
    settings_section: str


@dataclass
class _BackendSlot:
    """A constructed backend plus the lock serializing its log calls."""

    backend: Backend
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


def register_backends(
    store: ConfigStore, backend_types: tuple[type[Backend], ...] = BACKEND_TYPES
) -> list[str]:
    """Register the defaults of every known backend, return their names."""
    names: list[str] = []
    for backend_type in backend_types:
        backend_type.register(store, names)
    return names


class BackendDispatcher:
    """Holds the enabled backends for the lifetime of the process."""

    def __init__(
        self,
        backends: list[Backend],
        registrations: list[BackendRegistration] | None = None,
    ) -> None:
        self._slots = [_BackendSlot(backend) for backend in backends]
        self._tasks: set[asyncio.Task[None]] = set()
        if registrations is None:
            registrations = [
                BackendRegistration(backend.name, True, backend.settings.name)
                for backend in backends
            ]
        self.registrations = registrations

    @classmethod
    def from_config(
        cls,
        store: ConfigStore,
        enabled: list[str],
        backend_types: tuple[type[Backend], ...] = BACKEND_TYPES,
    ) -> BackendDispatcher:
        """Construct the enabled backends from an already registered store.

        Only the settings sections of enabled backends are read.
        """
        known = [backend_type.name for backend_type in backend_types]
        store.refresh()

        for name in enabled:
            if name not in known:
                raise UnknownBackendError(name, known)

        registrations = [
            BackendRegistration(
                name=backend_type.name,
                enabled=backend_type.name in enabled,
                settings_section=backend_type.settings.name,
            )
            for backend_type in backend_types
        ]

        backends: list[Backend] = []
        try:
            for backend_type in backend_types:
                if backend_type.name in enabled:
                    backends.append(backend_type.from_settings(store))
        except Exception:
            for backend in backends:
                backend.close()
            raise

        _LOGGER.info(
            "Enabled backends: %s", ", ".join(b.name for b in backends) or "none"
        )
        return cls(backends, registrations)

    @property
    def backends(self) -> list[Backend]:
        return [slot.backend for slot in self._slots]

    def dispatch(self, tick: datetime, snapshot: DeviceSnapshot) -> None:
        """Hand the snapshot to every backend without waiting for them."""
        for slot in self._slots:
            task = asyncio.create_task(
                self._async_call_backend(slot, tick, snapshot),
                name=f"backend-{slot.backend.name}",
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _async_call_backend(
        self, slot: _BackendSlot, tick: datetime, snapshot: DeviceSnapshot
    ) -> None:
        try:
            async with slot.lock:
                await asyncio.to_thread(slot.backend.log, tick, snapshot)
        except Exception as err:
            error = BackendError(f"Backend {slot.backend.name} failed")
            error.__cause__ = err
            _LOGGER.error("%s", format_error_chain(error))

    async def async_wait_idle(self) -> None:
        """Wait until every dispatched backend call has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def close(self) -> None:
        for slot in self._slots:
            slot.backend.close()
