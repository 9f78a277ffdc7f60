"""Settings registry shared by the core and every backend.

Each component registers a :class:`SettingsSection` holding its default
values, a voluptuous schema that coerces merged values into shape and a
factory that builds the typed settings object. User supplied TOML files are
merged key by key on top of the registered defaults.

Defaults have to be registered before a file is loaded, the defaults
establish the keys a user file is merged against. A section is only
decoded when somebody asks for it.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import threading
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Generic, TypeVar

import voluptuous as vol

from .const import (
    CONF_BACKENDS,
    CONF_INTERVAL,
    CONF_PASSWORD,
    CONF_TIMEOUT,
    CONF_URL,
    CONF_USERNAME,
    DEFAULT_BACKENDS,
    DEFAULT_INTERVAL,
    DEFAULT_TIMEOUT,
    DEFAULT_URL,
    SECTION_BASE,
)
from .exceptions import ConfigError

_LOGGER = logging.getLogger(__name__)

_SettingsT = TypeVar("_SettingsT")


@dataclass(frozen=True)
class SettingsSection(Generic[_SettingsT]):
    """Registration of one component's settings under a section name."""

    name: str
    defaults: Mapping[str, Any]
    schema: vol.Schema
    factory: Callable[..., _SettingsT]

    def decode(self, raw: Mapping[str, Any]) -> _SettingsT:
        try:
            values = self.schema(dict(raw))
        except vol.Invalid as err:
            raise ConfigError(f"Invalid settings for {self.name}: {err}") from err
        return self.factory(**values)

    def encode(self, value: _SettingsT) -> str:
        """Render a settings value as the body of a TOML table."""
        if dataclasses.is_dataclass(value):
            items = dataclasses.asdict(value)
        else:
            items = dict(value or {})
        return "".join(f"{key} = {_toml_value(val)}\n" for key, val in items.items())


def _toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Path):
        return json.dumps(str(value), ensure_ascii=False)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_toml_value(item) for item in value) + "]"
    raise ConfigError(f"Cannot serialize value {value!r}")


@dataclass(frozen=True)
class BaseSettings:
    """Settings every run needs."""

    url: str
    username: str
    password: str
    interval: int
    backends: list[str] = field(default_factory=list)
    timeout: int = DEFAULT_TIMEOUT


BASE_SECTION: SettingsSection[BaseSettings] = SettingsSection(
    name=SECTION_BASE,
    defaults={
        CONF_URL: DEFAULT_URL,
        CONF_USERNAME: "",
        CONF_PASSWORD: "",
        CONF_INTERVAL: DEFAULT_INTERVAL,
        CONF_BACKENDS: DEFAULT_BACKENDS,
        CONF_TIMEOUT: DEFAULT_TIMEOUT,
    },
    schema=vol.Schema(
        {
            vol.Required(CONF_URL): str,
            vol.Required(CONF_USERNAME): str,
            vol.Required(CONF_PASSWORD): str,
            vol.Required(CONF_INTERVAL): vol.All(vol.Coerce(int), vol.Range(min=1)),
            vol.Required(CONF_BACKENDS): [str],
            vol.Required(CONF_TIMEOUT): vol.All(vol.Coerce(int), vol.Range(min=1)),
        },
        extra=vol.REMOVE_EXTRA,
    ),
    factory=BaseSettings,
)


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file:
            return tomllib.load(file)
    except FileNotFoundError as err:
        raise ConfigError(f"Config file {path} does not exist") from err
    except (OSError, tomllib.TOMLDecodeError) as err:
        raise ConfigError(f"Cannot parse config file {path}") from err


class ConfigStore:
    """Process wide configuration, constructed once and passed around."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sections: dict[str, SettingsSection[Any]] = {}
        self._defaults: dict[str, dict[str, Any]] = {}
        self._files: list[Path] = []
        self._overrides: list[dict[str, Any]] = []
        self._default_settings = ""
        self.add_defaults(BASE_SECTION)

    def add_defaults(self, section: SettingsSection[Any]) -> None:
        """Register a section's defaults and append their rendering.

        The section only becomes visible once its defaults rendered.
        """
        with self._lock:
            if section.name in self._sections:
                raise ConfigError(f"Settings for {section.name} registered twice")

            value = self._resolve_locked(section, section.defaults)
            try:
                body = section.encode(value)
            except ConfigError as err:
                raise ConfigError(
                    f"Failed to serialize default values of backend: {section.name}"
                ) from err

            self._sections[section.name] = section
            self._defaults[section.name] = dict(section.defaults)

            # this component has no settings
            if not body:
                return
            self._default_settings += f"[{section.name}]\n{body}\n"

    def load(self, path: str | Path) -> None:
        """Merge a TOML file on top of everything registered so far."""
        path = Path(path)
        with self._lock:
            try:
                data = _read_toml(path)
            except ConfigError as err:
                raise ConfigError("Failed to load config file") from err
            self._files.append(path)
            self._overrides.append(data)
        _LOGGER.debug("Loaded config file %s", path)

    def refresh(self) -> None:
        """Re-read all loaded files.

        Sections are not decoded here, each one is validated when its
        owner asks for it through get().
        """
        with self._lock:
            try:
                self._overrides = [_read_toml(path) for path in self._files]
            except ConfigError as err:
                raise ConfigError("Failed to load backend settings.") from err

    def get(self, name: str) -> Any:
        """Return the merged, typed settings of a section."""
        with self._lock:
            section = self._sections.get(name)
            if section is None:
                raise ConfigError(f"Cannot get settings for {name}")
            return self._resolve_locked(section, self._defaults[name])

    def render_defaults(self) -> str:
        with self._lock:
            return self._default_settings

    @property
    def sections(self) -> list[str]:
        with self._lock:
            return list(self._sections)

    def _resolve_locked(
        self, section: SettingsSection[Any], defaults: Mapping[str, Any]
    ) -> Any:
        name = section.name
        merged = dict(defaults)
        for data in self._overrides:
            values = data.get(name, {})
            if not isinstance(values, Mapping):
                raise ConfigError(f"Cannot get settings for {name}: not a table")
            merged.update(values)

        try:
            return section.decode(merged)
        except ConfigError as err:
            raise ConfigError(f"Cannot get settings for {name}") from err
