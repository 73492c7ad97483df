from __future__ import annotations

import enum
import importlib.metadata
from typing import Protocol

from kilo import output
from kilo.buf import Buf
from kilo.keys import Key
from kilo.keys import KeyDecoder
from kilo.output import OutputBuffer
from kilo.status import Status
from kilo.viewport import BARS_HEIGHT
from kilo.viewport import Dim
from kilo.viewport import visible_slice

VERSION_STR = f'Kilo editor -- version {importlib.metadata.version("kilo")}'
HELP = 'HELP: Ctrl-Q = quit'


class Term(Protocol):
    def read(self) -> bytes: ...
    def write(self, s: bytes) -> None: ...
    def get_window_size(self) -> tuple[int, int]: ...


class EditResult(enum.Enum):
    EXIT = enum.auto()


class Screen:
    def __init__(self, term: Term, buf: Buf) -> None:
        self.term = term
        self.buf = buf
        self.status = Status()
        self.decoder = KeyDecoder(term.read)
        rows, cols = term.get_window_size()
        self.dim = Dim.from_window_size(rows, cols)
        self.draw_bars = rows > BARS_HEIGHT

    def get_char(self) -> Key:
        return self.decoder.get_key()

    # drawing

    def _draw_welcome(self, out: OutputBuffer) -> None:
        welcome = VERSION_STR[:self.dim.width]
        padding = (self.dim.width - len(welcome)) // 2
        if padding:
            out.append('~')
            padding -= 1
        out.append(' ' * padding)
        out.append(welcome)

    def _draw_rows(self, out: OutputBuffer) -> None:
        rowoff, coloff = self.buf.viewport
        for y in range(self.dim.height):
            filerow = y + rowoff
            if filerow < len(self.buf):
                rendered = self.buf[filerow].rendered
                out.append(visible_slice(rendered, coloff, self.dim.width))
            elif not self.buf and y == self.dim.height // 3:
                self._draw_welcome(out)
            else:
                out.append('~')

            out.append(output.CLEAR_EOL)
            if self.draw_bars or y < self.dim.height - 1:
                out.append(output.CRLF)

    def _draw_status_bar(self, out: OutputBuffer) -> None:
        filename = self.buf.filename or '[No Name]'
        status = f'{filename[:20]} - {self.buf.numrows} lines'
        rstatus = f'{self.buf.y + 1}/{self.buf.numrows}'

        status = status[:self.dim.width]
        remaining = self.dim.width - len(status)
        if remaining >= len(rstatus):
            status += rstatus.rjust(remaining)
        else:
            status += ' ' * remaining

        out.append(output.REVERSE)
        out.append(status)
        out.append(output.RESET)
        out.append(output.CRLF)

    def draw(self) -> None:
        self.buf.scroll_screen_if_needed(self.dim)

        out = OutputBuffer()
        out.append(output.HIDE_CURSOR)
        out.append(output.CURSOR_HOME)

        self._draw_rows(out)
        if self.draw_bars:
            self._draw_status_bar(out)
            self.status.draw(out, self.dim.width)

        y, x = self.buf.cursor_position()
        out.append(output.move(y + 1, x + 1))
        out.append(output.SHOW_CURSOR)

        self.term.write(bytes(out))

    # commands

    def quit(self) -> EditResult:
        return EditResult.EXIT

    DISPATCH = {
        b'^Q': quit,
    }
