from __future__ import annotations

import argparse
import sys
from typing import Sequence

from kilo.buf import Buf
from kilo.file import load_file
from kilo.file import OpenError
from kilo.screen import EditResult
from kilo.screen import HELP
from kilo.screen import Screen
from kilo.screen import Term
from kilo.terminal import make_terminal
from kilo.terminal import TerminalError


def _edit(screen: Screen) -> EditResult:
    while True:
        screen.draw()

        key = screen.get_char()
        if key.keyname in Buf.DISPATCH:
            Buf.DISPATCH[key.keyname](screen.buf, screen.dim)
        elif key.keyname in Screen.DISPATCH:
            ret = Screen.DISPATCH[key.keyname](screen)
            if isinstance(ret, EditResult):
                return ret
        else:
            screen.status.update(f'unknown key: {key}')


def c_main(term: Term, filename: str | None) -> int:
    if filename is None:
        buf = Buf()
    else:
        buf = Buf(load_file(filename), filename=filename)

    screen = Screen(term, buf)
    screen.status.update(HELP)
    _edit(screen)
    return 0


def _key_debug(term: Term) -> int:
    screen = Screen(term, Buf(filename='<<key debug>>'))

    while True:
        screen.status.update('press q to quit')
        screen.draw()

        key = screen.get_char()
        screen.buf.append_row(f'{key.wch!r} {key.keyname.decode()!r}')
        screen.buf.down(screen.dim)
        if key.wch == 'q':
            return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog='kilo')
    parser.add_argument('filename', nargs='?')
    parser.add_argument(
        '--key-debug', action='store_true', help=argparse.SUPPRESS,
    )
    args = parser.parse_args(argv)

    try:
        with make_terminal() as term:
            if args.key_debug:
                return _key_debug(term)
            else:
                return c_main(term, args.filename)
    except (OpenError, TerminalError, OSError) as e:
        print(f'kilo: {e}', file=sys.stderr)
        return 1


if __name__ == '__main__':
    raise SystemExit(main())
