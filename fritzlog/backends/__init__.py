"""Recording backends for device snapshots."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar

import voluptuous as vol

from ..model import DeviceSnapshot
from ..settings import ConfigStore, SettingsSection


@dataclass(frozen=True)
class NoSettings:
    """Settings of a backend that has nothing to configure."""


def no_settings(name: str) -> SettingsSection[NoSettings]:
    return SettingsSection(
        name=name,
        defaults={},
        schema=vol.Schema({}, extra=vol.REMOVE_EXTRA),
        factory=NoSettings,
    )


class Backend(ABC):
    """A consumer of device snapshots."""

    name: ClassVar[str]
    settings: ClassVar[SettingsSection[Any]]

    @classmethod
    def register(cls, store: ConfigStore, names: list[str]) -> None:
        store.add_defaults(cls.settings)
        names.append(cls.name)

    @classmethod
    def from_settings(cls, store: ConfigStore) -> Backend:
        return cls(store.get(cls.settings.name))

    @abstractmethod
    def log(self, tick: datetime, snapshot: DeviceSnapshot) -> None:
        """Record one snapshot. Called with exclusive access to the backend."""

    def close(self) -> None:
        """Release resources held by the backend."""
