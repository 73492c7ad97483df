from __future__ import annotations

from typing import IO


class OpenError(RuntimeError):
    pass


def get_lines(sio: IO[str]) -> list[str]:
    return [line.rstrip('\r\n') for line in sio]


def load_file(filename: str) -> list[str]:
    try:
        with open(filename, encoding='UTF-8', newline='\n') as f:
            return get_lines(f)
    except UnicodeDecodeError:
        raise OpenError(f'not utf-8: {filename!r}')
    except OSError as e:
        raise OpenError(f'{filename!r}: {e.strerror}')
