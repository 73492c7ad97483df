from __future__ import annotations

from kilo.main import main

if __name__ == '__main__':
    raise SystemExit(main())
