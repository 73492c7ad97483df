from __future__ import annotations

import contextlib
import enum
import importlib.util
import re
import shutil
import sys
from typing import List
from typing import NamedTuple
from typing import Protocol
from unittest import mock

import pytest
import wcwidth

import kilo.main
from kilo.keys import ctrl
from kilo.main import main


@pytest.fixture
def ten_lines(tmpdir):
    f = tmpdir.join('f')
    f.write('\n'.join(f'line_{i}' for i in range(10)))
    return f


class Token(enum.Enum):
    HIDE_CURSOR = re.compile(r'\x1b\[\?25l')
    SHOW_CURSOR = re.compile(r'\x1b\[\?25h')
    HOME = re.compile(r'\x1b\[H')
    MOVE = re.compile(r'\x1b\[(\d+);(\d+)H')
    CLEAR_EOL = re.compile(r'\x1b\[K')
    CLEAR = re.compile(r'\x1b\[2J')
    REVERSE = re.compile(r'\x1b\[7m')
    RESET = re.compile(r'\x1b\[m')
    CRLF = re.compile(r'\r\n')
    CHAR = re.compile('.', re.DOTALL)


def tokenize(s):
    i = 0
    while i < len(s):
        for tp in Token:
            match = tp.value.match(s, i)
            if match is not None:
                yield tp, match
                i = match.end()
                break
        else:
            raise AssertionError(f'unreachable: not matched at {i}?')


class Screen:
    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.lines = [' ' * self.width for _ in range(self.height)]
        self.attrs = [[False] * self.width for _ in range(self.height)]
        self.x = self.y = 0
        self.reverse = False
        self.cursor_visible = True
        self.writes = 0
        self._prev_screenshot = None

    def screenshot(self):
        ret = ''.join(f'{line.rstrip()}\n' for line in self.lines)
        if ret != self._prev_screenshot:
            print('=' * 79)
            print(ret, end='')
            print('=' * 79)
            self._prev_screenshot = ret
        return ret

    def _addch(self, c):
        if self.y < self.height and self.x < self.width:
            line = self.lines[self.y]
            self.lines[self.y] = line[:self.x] + c + line[self.x + 1:]
            self.attrs[self.y][self.x] = self.reverse
        self.x += max(wcwidth.wcwidth(c), 0)

    def _clear_eol(self):
        if self.y < self.height and self.x < self.width:
            n = self.width - self.x
            self.lines[self.y] = self.lines[self.y][:self.x] + ' ' * n
            self.attrs[self.y][self.x:] = [False] * n

    def _clear(self):
        self.lines = [' ' * self.width for _ in range(self.height)]
        self.attrs = [[False] * self.width for _ in range(self.height)]

    def write(self, s):
        self.writes += 1
        for tp, match in tokenize(s):
            if tp is Token.HIDE_CURSOR:
                self.cursor_visible = False
            elif tp is Token.SHOW_CURSOR:
                self.cursor_visible = True
            elif tp is Token.HOME:
                self.x = self.y = 0
            elif tp is Token.MOVE:
                self.move(int(match[1]) - 1, int(match[2]) - 1)
            elif tp is Token.CLEAR_EOL:
                self._clear_eol()
            elif tp is Token.CLEAR:
                self._clear()
            elif tp is Token.REVERSE:
                self.reverse = True
            elif tp is Token.RESET:
                self.reverse = False
            elif tp is Token.CRLF:
                self.x = 0
                self.y += 1
            elif tp is Token.CHAR:
                self._addch(match[0])
            else:
                raise AssertionError(f'unreachable {tp} {match}')

    def move(self, y, x):
        assert 0 <= y < self.height
        assert 0 <= x < self.width
        print(f'MOVE: y: {y}, x: {x}')
        self.y, self.x = y, x


class Op(Protocol):
    def __call__(self, screen: Screen) -> None: ...


class AwaitText(NamedTuple):
    text: str

    def __call__(self, screen: Screen) -> None:
        if self.text not in screen.screenshot():
            raise AssertionError(f'expected: {self.text!r}')


class AwaitTextMissing(NamedTuple):
    text: str

    def __call__(self, screen: Screen) -> None:
        if self.text in screen.screenshot():
            raise AssertionError(f'expected missing: {self.text!r}')


class AwaitCursorPosition(NamedTuple):
    x: int
    y: int

    def __call__(self, screen: Screen) -> None:
        assert screen.cursor_visible
        assert (self.x, self.y) == (screen.x, screen.y)


class AssertCursorLineEquals(NamedTuple):
    line: str

    def __call__(self, screen: Screen) -> None:
        assert screen.lines[screen.y].rstrip() == self.line


class AssertScreenLineEquals(NamedTuple):
    n: int
    line: str

    def __call__(self, screen: Screen) -> None:
        assert screen.lines[self.n].rstrip() == self.line


class AssertScreenAttrEquals(NamedTuple):
    n: int
    attr: List[bool]

    def __call__(self, screen: Screen) -> None:
        assert screen.attrs[self.n] == self.attr


class AssertFullContents(NamedTuple):
    contents: str

    def __call__(self, screen: Screen) -> None:
        assert screen.screenshot() == self.contents


class AssertWrites(NamedTuple):
    n: int

    def __call__(self, screen: Screen) -> None:
        assert screen.writes == self.n


class KeyPress(NamedTuple):
    b: bytes

    def __call__(self, screen: Screen) -> None:
        raise AssertionError('unreachable')


class Timeout(NamedTuple):
    def __call__(self, screen: Screen) -> None:
        raise AssertionError('unreachable')


class Key(NamedTuple):
    tmux: str
    seq: bytes


KEYS = [
    Key('Enter', b'\r'),
    Key('Tab', b'\t'),
    Key('BSpace', b'\x7f'),
    Key('DC', b'\x1b[3~'),
    Key('Up', b'\x1b[A'),
    Key('Down', b'\x1b[B'),
    Key('Right', b'\x1b[C'),
    Key('Left', b'\x1b[D'),
    Key('Home', b'\x1b[1~'),
    Key('End', b'\x1b[4~'),
    Key('PageUp', b'\x1b[5~'),
    Key('PageDown', b'\x1b[6~'),
]
KEYS_TMUX = {k.tmux: k.seq for k in KEYS}


class FakeTerminal:
    def __init__(self, runner):
        self._runner = runner

    def read(self):
        return self._runner._read()

    def write(self, s):
        self._runner.screen.write(s.decode())

    def get_window_size(self):
        return self._runner.screen.height, self._runner.screen.width


class DeferredRunner:
    def __init__(self, command, width=80, height=24):
        self.command = command
        self._i = 0
        self._ops: list[Op] = []
        self.screen = Screen(width, height)
        self.ret = None

    def _read(self):
        while True:
            if self._i >= len(self._ops):
                raise AssertionError('ran out of input, missing ^Q?')
            op = self._ops[self._i]
            self._i += 1
            if isinstance(op, KeyPress):
                print(f'KEY: {op.b!r}')
                return op.b
            elif isinstance(op, Timeout):
                return b''
            else:
                try:
                    op(self.screen)
                except AssertionError:  # pragma: no cover (only on failures)
                    self.screen.screenshot()
                    raise

    def await_text(self, text, timeout=1):
        self._ops.append(AwaitText(text))

    def await_text_missing(self, text):
        self._ops.append(AwaitTextMissing(text))

    def await_cursor_position(self, *, x, y):
        self._ops.append(AwaitCursorPosition(x, y))

    def assert_cursor_line_equals(self, line):
        self._ops.append(AssertCursorLineEquals(line))

    def assert_screen_line_equals(self, n, line):
        self._ops.append(AssertScreenLineEquals(n, line))

    def assert_screen_attr_equals(self, n, attr):
        self._ops.append(AssertScreenAttrEquals(n, attr))

    def assert_full_contents(self, contents):
        self._ops.append(AssertFullContents(contents))

    def assert_writes(self, n):
        self._ops.append(AssertWrites(n))

    def run(self, callback):
        self._ops.append(lambda screen: callback())

    def _expand_key(self, s):
        if s == 'Escape':
            return [KeyPress(b'\x1b'), Timeout()]
        elif s in KEYS_TMUX:
            return [KeyPress(bytes((b,))) for b in KEYS_TMUX[s]]
        elif s.startswith('^') and len(s) == 2:
            return [KeyPress(bytes((ctrl(s[1]),)))]
        else:
            return [KeyPress(bytes((b,))) for b in s.encode()]

    def press(self, s):
        self._ops.extend(self._expand_key(s))

    def press_bytes(self, b):
        """raw input, each byte arriving before the read timeout"""
        self._ops.extend(KeyPress(bytes((c,))) for c in b)

    def timeout(self):
        self._ops.append(Timeout())

    @contextlib.contextmanager
    def _make_terminal(self):
        try:
            yield FakeTerminal(self)
        finally:
            self.screen.write('\x1b[2J\x1b[H')

    def await_exit(self):
        patch = mock.patch.object(
            kilo.main, 'make_terminal', self._make_terminal,
        )
        with patch:
            self.ret = main(self.command)
        assert self.ret == 0
        # we have already exited -- check remaining things
        # KeyPress with failing condition or error
        for i in range(self._i, len(self._ops)):
            if not isinstance(self._ops[i], Timeout):
                raise AssertionError(self._ops[i:])


@contextlib.contextmanager
def run_fake(*cmd, **kwargs):
    h = DeferredRunner(cmd, **kwargs)
    yield h


@contextlib.contextmanager
def run_tmux(*args, **kwargs):
    from testing.tmux_runner import PrintsErrorRunner

    cmd = (sys.executable, '-mcoverage', 'run', '-m', 'kilo', *args)
    cmd = ('env', 'TERM=screen', *cmd)
    with PrintsErrorRunner(*cmd, **kwargs) as h, h.on_error():
        # startup with coverage can be slow
        h.await_drawn(timeout=2)
        yield h


_no_tmux = pytest.mark.skipif(
    (
        shutil.which('tmux') is None or
        importlib.util.find_spec('hecate') is None
    ),
    reason='needs tmux and hecate',
)


@pytest.fixture(
    scope='session',
    params=[run_fake, pytest.param(run_tmux, marks=_no_tmux)],
    ids=['fake', 'tmux'],
)
def run(request):
    return request.param


@pytest.fixture(scope='session', params=[run_fake], ids=['fake'])
def run_only_fake(request):
    return request.param
