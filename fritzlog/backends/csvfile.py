"""Backend appending readings to CSV files."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import IO, Any

import voluptuous as vol

from ..const import CONF_OUT_DIR
from ..exceptions import BackendError
from ..model import DeviceSnapshot
from ..settings import SettingsSection
from . import Backend

_LOGGER = logging.getLogger(__name__)

NAME = "Csv"

TEMPERATURE_FILE = "temperature.csv"
ENERGY_FILE = "energy.csv"
TEMPERATURE_FIELDS = ("timestamp", "id", "temperature", "offset")
ENERGY_FIELDS = ("timestamp", "id", "voltage", "power")


@dataclass(frozen=True)
class CsvSettings:
    out_dir: str


class _CsvWriter:
    """Append-only CSV file that writes its header once."""

    def __init__(self, path: Path, fieldnames: tuple[str, ...]) -> None:
        file_preexists = path.exists()
        self._file: IO[str] = path.open("a", newline="", encoding="utf-8")
        self._writer = csv.DictWriter(self._file, fieldnames=fieldnames)
        if not file_preexists:
            self._writer.writeheader()

    def write(self, rows: list[dict[str, Any]]) -> None:
        self._writer.writerows(rows)
        self._file.flush()

    def close(self) -> None:
        self._file.close()


class CsvBackend(Backend):
    name = NAME
    settings = SettingsSection(
        name=NAME,
        defaults={CONF_OUT_DIR: "."},
        schema=vol.Schema({vol.Required(CONF_OUT_DIR): str}, extra=vol.REMOVE_EXTRA),
        factory=CsvSettings,
    )

    def __init__(self, settings: CsvSettings) -> None:
        out_dir = Path(settings.out_dir)
        try:
            self._temperature = _CsvWriter(out_dir / TEMPERATURE_FILE, TEMPERATURE_FIELDS)
        except OSError as err:
            raise BackendError("Cannot open temperature outfile") from err
        try:
            self._energy = _CsvWriter(out_dir / ENERGY_FILE, ENERGY_FIELDS)
        except OSError as err:
            self._temperature.close()
            raise BackendError("Cannot open energy outfile") from err
        _LOGGER.debug("Writing CSV records to %s", out_dir)

    def log(self, tick: datetime, snapshot: DeviceSnapshot) -> None:
        timestamp = int(tick.timestamp())
        try:
            self._temperature.write(
                [
                    {
                        "timestamp": timestamp,
                        "id": device.common.unique_id,
                        "temperature": device.temperature.temperature,
                        "offset": device.temperature.offset,
                    }
                    for device in snapshot
                    if device.temperature is not None
                ]
            )
            self._energy.write(
                [
                    {
                        "timestamp": timestamp,
                        "id": device.common.unique_id,
                        "voltage": device.powermeter.voltage,
                        "power": device.powermeter.power,
                    }
                    for device in snapshot
                    if device.powermeter is not None
                ]
            )
        except (OSError, csv.Error) as err:
            raise BackendError("Cannot flush out csv records") from err

    def close(self) -> None:
        self._temperature.close()
        self._energy.close()
