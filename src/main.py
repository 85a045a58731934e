"""Run script.

Allows `python -m main` from inside `src/` during development, alongside the
`chartseed` console script.
"""

from __future__ import annotations

import sys

# The progress output uses non-ASCII glyphs; cp1252 Windows consoles choke on them.
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")
    sys.stderr.reconfigure(encoding="utf-8")

from cli.main import run


def main() -> None:
    run()


if __name__ == "__main__":
    main()
