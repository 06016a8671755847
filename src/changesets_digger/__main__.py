"""Allow running as ``python -m changesets_digger``."""

from __future__ import annotations

from changesets_digger.cli.app import main

if __name__ == "__main__":
    main()
