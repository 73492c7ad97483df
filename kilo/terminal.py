from __future__ import annotations

import contextlib
import os
import re
import sys
import termios
from typing import Generator
from typing import Mapping

from kilo.output import CLEAR_SCREEN
from kilo.output import CURSOR_HOME

CURSOR_POSITION_RE = re.compile(br'^\x1b\[(\d+);(\d+)R$')
# milliseconds, same as the curses variable
DEFAULT_ESCDELAY = 100


class TerminalError(RuntimeError):
    pass


def escdelay_deciseconds(environ: Mapping[str, str]) -> int:
    try:
        delay = int(environ.get('ESCDELAY', DEFAULT_ESCDELAY))
    except ValueError:
        delay = DEFAULT_ESCDELAY
    if delay <= 0:
        delay = DEFAULT_ESCDELAY
    # VTIME is an unsigned char of tenths of a second
    return min(-(-delay // 100), 255)


class Terminal:
    def __init__(self, fd_in: int, fd_out: int, *, vtime: int = 1) -> None:
        self.fd_in = fd_in
        self.fd_out = fd_out
        self.vtime = vtime

    def read(self) -> bytes:
        """one byte, or `b''` if nothing arrived before the timeout"""
        try:
            return os.read(self.fd_in, 1)
        except BlockingIOError:
            return b''

    def write(self, s: bytes) -> None:
        while s:
            n = os.write(self.fd_out, s)
            s = s[n:]

    def clear_screen(self) -> None:
        self.write(f'{CLEAR_SCREEN}{CURSOR_HOME}'.encode())

    def get_cursor_position(self) -> tuple[int, int]:
        self.write(b'\x1b[6n')

        reply = b''
        while len(reply) < 32:
            c = self.read()
            if not c:
                break
            reply += c
            if c == b'R':
                break

        match = CURSOR_POSITION_RE.match(reply)
        if match is None:
            raise TerminalError(f'unexpected cursor position reply {reply!r}')
        return int(match[1]), int(match[2])

    def get_window_size(self) -> tuple[int, int]:
        try:
            size = os.get_terminal_size(self.fd_out)
        except OSError:
            rows = cols = 0
        else:
            rows, cols = size.lines, size.columns

        if cols == 0:
            # no ioctl: push the cursor into the bottom right and ask for it
            self.write(b'\x1b[999C\x1b[999B')
            return self.get_cursor_position()
        else:
            return rows, cols

    @contextlib.contextmanager
    def raw_mode(self) -> Generator[None, None, None]:
        try:
            orig = termios.tcgetattr(self.fd_in)
        except termios.error as e:
            raise TerminalError(f'tcgetattr failed: {e.args[-1]}')

        iflag, oflag, cflag, lflag, ispeed, ospeed, cc = orig
        cc = list(cc)
        cc[termios.VMIN] = 0
        cc[termios.VTIME] = self.vtime
        raw = [
            iflag & ~(
                termios.BRKINT | termios.ICRNL | termios.INPCK |
                termios.ISTRIP | termios.IXON
            ),
            oflag & ~termios.OPOST,
            cflag | termios.CS8,
            lflag & ~(
                termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG
            ),
            ispeed,
            ospeed,
            cc,
        ]

        try:
            termios.tcsetattr(self.fd_in, termios.TCSAFLUSH, raw)
        except termios.error as e:
            raise TerminalError(f'tcsetattr failed: {e.args[-1]}')

        try:
            yield
        finally:
            try:
                termios.tcsetattr(self.fd_in, termios.TCSAFLUSH, orig)
            except termios.error as e:
                raise TerminalError(f'tcsetattr failed: {e.args[-1]}')


@contextlib.contextmanager
def make_terminal() -> Generator[Terminal, None, None]:
    """raw mode for the lifetime of the editor, cleared screen on the way out
    """
    term = Terminal(
        sys.stdin.fileno(),
        sys.stdout.fileno(),
        vtime=escdelay_deciseconds(os.environ),
    )
    with term.raw_mode():
        try:
            yield term
        finally:
            term.clear_screen()
