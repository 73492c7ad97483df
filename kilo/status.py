from __future__ import annotations

import time

from kilo.output import CLEAR_EOL
from kilo.output import OutputBuffer

MESSAGE_TIMEOUT = 5


class Status:
    def __init__(self) -> None:
        self._status = ''
        self._time = 0.0

    def update(self, status: str) -> None:
        self._status = status
        self._time = time.monotonic()

    @property
    def visible(self) -> str:
        if self._status and time.monotonic() - self._time < MESSAGE_TIMEOUT:
            return self._status
        else:
            return ''

    def draw(self, out: OutputBuffer, width: int) -> None:
        out.append(CLEAR_EOL)
        out.append(self.visible[:width])
