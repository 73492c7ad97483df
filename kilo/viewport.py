from __future__ import annotations

from typing import NamedTuple

# the status bar and the message line, drawn only when there is room
BARS_HEIGHT = 2


class Dim(NamedTuple):
    height: int
    width: int

    @classmethod
    def from_window_size(cls, rows: int, cols: int) -> Dim:
        if rows > BARS_HEIGHT:
            height = rows - BARS_HEIGHT
        else:
            height = max(rows, 1)
        return cls(height=height, width=max(cols, 1))


class Viewport(NamedTuple):
    rowoff: int = 0
    coloff: int = 0


def scroll(viewport: Viewport, y: int, rx: int, dim: Dim) -> Viewport:
    """minimally adjust the window so (y, rx) is visible"""
    rowoff, coloff = viewport

    if y < rowoff:
        rowoff = y
    if y >= rowoff + dim.height:
        rowoff = y - dim.height + 1

    if rx < coloff:
        coloff = rx
    if rx >= coloff + dim.width:
        coloff = rx - dim.width + 1

    return Viewport(rowoff, coloff)


def visible_slice(rendered: str, coloff: int, width: int) -> str:
    return rendered[coloff:coloff + width]
