"""Backend printing snapshots to the terminal."""

from __future__ import annotations

import pprint
import sys
from datetime import datetime
from typing import TextIO

from ..model import DeviceSnapshot
from . import Backend, NoSettings, no_settings

NAME = "Console"


class ConsoleBackend(Backend):
    name = NAME
    settings = no_settings(NAME)

    def __init__(self, settings: NoSettings, stream: TextIO | None = None) -> None:
        self._stream = stream

    def log(self, tick: datetime, snapshot: DeviceSnapshot) -> None:
        stream = self._stream or sys.stdout
        stream.write(f"{tick.isoformat()}\n")
        pprint.pprint(list(snapshot), stream=stream)
        stream.flush()
