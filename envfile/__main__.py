"""Package entrypoint."""

from __future__ import annotations

from envfile.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
