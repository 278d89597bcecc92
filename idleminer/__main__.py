"""CLI entry point: python -m idleminer <command>"""

from __future__ import annotations

import sys

from idleminer.cli import main

if __name__ == "__main__":
    sys.exit(main())
