from __future__ import annotations

from typing import Iterable

from kilo.viewport import Dim
from kilo.viewport import scroll
from kilo.viewport import Viewport

TAB_STOP = 8


def _tab_advance(col: int, tab_size: int) -> int:
    return tab_size - col % tab_size


def render(raw: str, tab_size: int = TAB_STOP) -> str:
    parts = []
    col = 0
    for c in raw:
        if c == '\t':
            n = _tab_advance(col, tab_size)
            parts.append(' ' * n)
            col += n
        else:
            parts.append(c)
            col += 1
    return ''.join(parts)


def cx_to_rx(raw: str, cx: int, tab_size: int = TAB_STOP) -> int:
    """column of `raw[cx]` in the rendered form of `raw`

    must agree with `render` or the cursor drifts away from the text
    """
    rx = 0
    for c in raw[:cx]:
        if c == '\t':
            rx += _tab_advance(rx, tab_size)
        else:
            rx += 1
    return rx


class Row:
    def __init__(self, raw: str, tab_size: int = TAB_STOP) -> None:
        self.tab_size = tab_size
        self.raw = raw

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.raw!r})'

    def __len__(self) -> int:
        return len(self._raw)

    @property
    def raw(self) -> str:
        return self._raw

    @raw.setter
    def raw(self, raw: str) -> None:
        self._raw = raw
        self.update_rendered()

    @property
    def rsize(self) -> int:
        return len(self.rendered)

    def update_rendered(self) -> None:
        self.rendered = render(self._raw, self.tab_size)

    def cx_to_rx(self, cx: int) -> int:
        return cx_to_rx(self._raw, cx, self.tab_size)


class Buf:
    def __init__(
            self,
            lines: Iterable[str] = (),
            *,
            filename: str | None = None,
            tab_size: int = TAB_STOP,
    ) -> None:
        self.filename = filename
        self.tab_size = tab_size
        self.rows: list[Row] = []
        self.x = self.y = 0
        self.viewport = Viewport()

        for line in lines:
            self.append_row(line)

    # read only interface

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}('
            f'{[row.raw for row in self.rows]!r}, x={self.x}, y={self.y}, '
            f'viewport={self.viewport}'
            f')'
        )

    def __bool__(self) -> bool:
        return bool(self.rows)

    def __getitem__(self, idx: int) -> Row:
        return self.rows[idx]

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def numrows(self) -> int:
        return len(self.rows)

    # mutators

    def append_row(self, s: str) -> None:
        self.rows.append(Row(s, self.tab_size))

    # position properties

    def _row_len(self, y: int) -> int:
        # the line past the end of the file is always empty
        if y < len(self.rows):
            return len(self.rows[y])
        else:
            return 0

    @property
    def rx(self) -> int:
        if self.y < len(self.rows):
            return self.rows[self.y].cx_to_rx(self.x)
        else:
            return 0

    def cursor_position(self) -> tuple[int, int]:
        """cursor position relative to the viewport"""
        rowoff, coloff = self.viewport
        return self.y - rowoff, self.rx - coloff

    def scroll_screen_if_needed(self, dim: Dim) -> None:
        self.viewport = scroll(self.viewport, self.y, self.rx, dim)

    def _clamp_x(self) -> None:
        # rows differ in length: a long row's x may not exist on the next
        self.x = min(self.x, self._row_len(self.y))

    # movement

    def up(self, dim: Dim) -> None:
        if self.y > 0:
            self.y -= 1
        self._clamp_x()

    def down(self, dim: Dim) -> None:
        if self.y < len(self.rows):
            self.y += 1
        self._clamp_x()

    def right(self, dim: Dim) -> None:
        if self.y < len(self.rows):
            if self.x < len(self.rows[self.y]):
                self.x += 1
            else:
                self.y += 1
                self.x = 0
        self._clamp_x()

    def left(self, dim: Dim) -> None:
        if self.x > 0:
            self.x -= 1
        elif self.y > 0:
            self.y -= 1
            self.x = len(self.rows[self.y])
        self._clamp_x()

    def home(self, dim: Dim) -> None:
        self.x = 0

    def end(self, dim: Dim) -> None:
        self.x = self._row_len(self.y)

    def page_up(self, dim: Dim) -> None:
        self.y = self.viewport.rowoff
        for _ in range(dim.height):
            self.up(dim)

    def page_down(self, dim: Dim) -> None:
        self.y = min(self.viewport.rowoff + dim.height - 1, len(self.rows))
        for _ in range(dim.height):
            self.down(dim)

    DISPATCH = {
        b'KEY_UP': up,
        b'KEY_DOWN': down,
        b'KEY_RIGHT': right,
        b'KEY_LEFT': left,
        b'KEY_HOME': home,
        b'KEY_END': end,
        b'KEY_PPAGE': page_up,
        b'KEY_NPAGE': page_down,
    }
