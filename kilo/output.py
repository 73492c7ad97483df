from __future__ import annotations

HIDE_CURSOR = '\x1b[?25l'
SHOW_CURSOR = '\x1b[?25h'
CURSOR_HOME = '\x1b[H'
CLEAR_EOL = '\x1b[K'
CLEAR_SCREEN = '\x1b[2J'
REVERSE = '\x1b[7m'
RESET = '\x1b[m'
CRLF = '\r\n'


def move(y: int, x: int) -> str:
    """1-indexed absolute cursor position"""
    return f'\x1b[{y};{x}H'


class OutputBuffer:
    """collects the drawing for one frame so it can be written at once"""

    def __init__(self) -> None:
        self._chunks: list[bytes] = []
        self._size = 0

    def __repr__(self) -> str:
        return f'{type(self).__name__}({bytes(self)!r})'

    def __len__(self) -> int:
        return self._size

    def __bytes__(self) -> bytes:
        return b''.join(self._chunks)

    def append(self, s: str | bytes) -> None:
        if isinstance(s, str):
            s = s.encode()
        self._chunks.append(s)
        self._size += len(s)
