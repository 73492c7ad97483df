from __future__ import annotations

import enum
from typing import Callable
from typing import NamedTuple

ESC = b'\x1b'

# ESC [ <letter>
CSI_KEYNAME = {
    b'A': b'KEY_UP',
    b'B': b'KEY_DOWN',
    b'C': b'KEY_RIGHT',
    b'D': b'KEY_LEFT',
    b'H': b'KEY_HOME',
    b'F': b'KEY_END',
}
# ESC [ <digit> ~
CSI_TILDE_KEYNAME = {
    b'1': b'KEY_HOME',
    b'3': b'KEY_DC',
    b'4': b'KEY_END',
    b'5': b'KEY_PPAGE',
    b'6': b'KEY_NPAGE',
    b'7': b'KEY_HOME',
    b'8': b'KEY_END',
}
# ESC O <letter>
SS3_KEYNAME = {
    b'H': b'KEY_HOME',
    b'F': b'KEY_END',
}


def ctrl(c: str) -> int:
    return ord(c) & 0x1f


def keyname(b: int) -> bytes:
    """the curses-style name of a single byte"""
    if b >= 0x80:
        return b'M-' + keyname(b & 0x7f)
    elif b == 0x7f:
        return b'^?'
    elif b < 0x20:
        return b'^' + bytes((b | 0x40,))
    else:
        return bytes((b,))


class Key(NamedTuple):
    wch: str
    keyname: bytes


ESCAPE_KEY = Key('\x1b', b'^[')


class DecoderState(enum.Enum):
    IDLE = enum.auto()
    ESCAPE = enum.auto()
    SEQUENCE = enum.auto()
    DIGIT = enum.auto()


class KeyDecoder:
    """turns single byte reads into keys

    `read` returns one byte, or `b''` when the read timed out.  the timeout
    is what tells a lone escape apart from the start of a sequence.
    """

    def __init__(self, read: Callable[[], bytes]) -> None:
        self._read = read

    def get_key(self) -> Key:
        state = DecoderState.IDLE
        seq = b''
        while True:
            c = self._read()
            if state is DecoderState.IDLE:
                if not c:  # nothing yet, keep waiting
                    continue
                elif c == ESC:
                    state = DecoderState.ESCAPE
                    seq = c
                else:
                    return Key(c.decode('latin1'), keyname(c[0]))
            elif not c:
                return ESCAPE_KEY
            elif state is DecoderState.ESCAPE:
                state = DecoderState.SEQUENCE
                seq += c
            elif state is DecoderState.SEQUENCE:
                seq += c
                if seq[1:2] == b'[' and c.isdigit():
                    state = DecoderState.DIGIT
                else:
                    return _sequence_key(seq)
            elif state is DecoderState.DIGIT:
                seq += c
                return _sequence_key(seq)
            else:
                raise AssertionError(f'unreachable {state}')


def _sequence_key(seq: bytes) -> Key:
    intro, rest = seq[1:2], seq[2:]
    if intro == b'[' and len(rest) == 2 and rest.endswith(b'~'):
        name = CSI_TILDE_KEYNAME.get(rest[:1])
    elif intro == b'[' and len(rest) == 1:
        name = CSI_KEYNAME.get(rest)
    elif intro == b'O' and len(rest) == 1:
        name = SS3_KEYNAME.get(rest)
    else:
        name = None

    if name is None:
        return ESCAPE_KEY
    else:
        return Key(seq.decode('latin1'), name)
