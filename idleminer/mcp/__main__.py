"""CLI entry point: python -m idleminer.mcp [save_dir]"""

from __future__ import annotations

import logging
import sys


def main() -> None:
    # stdout carries the MCP protocol; diagnostics go to stderr
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr)

    save_dir = sys.argv[1] if len(sys.argv) > 1 else None

    from idleminer.mcp.server import create_server

    server = create_server(save_dir)
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
