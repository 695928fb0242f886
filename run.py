#!/usr/bin/env python3
"""Development launcher for the clubdocs service."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

import uvicorn

APP = "clubdocs.main:app"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5000
PROJECT_ROOT = Path(__file__).resolve().parent


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the launcher script."""

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--host",
        default=os.getenv("HOST", DEFAULT_HOST),
        help="Host interface to bind.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", DEFAULT_PORT)),
        help="Port to listen on.",
    )
    parser.add_argument(
        "--storage-root",
        default=os.getenv("STORAGE_ROOT"),
        help="Directory holding the events/docs/writeups collections.",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "info"),
        help="Log level passed to Uvicorn.",
    )
    parser.add_argument(
        "--no-reload",
        dest="reload",
        action="store_false",
        help="Disable autoreload (default: on).",
    )
    return parser.parse_args()


def main() -> None:
    """Launch a single Uvicorn server with autoreload on the package sources."""

    args = parse_args()
    sys.path.insert(0, str(PROJECT_ROOT))
    if args.storage_root:
        os.environ["STORAGE_ROOT"] = str(Path(args.storage_root).resolve())

    uvicorn.run(
        APP,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        reload=args.reload,
        reload_dirs=[str(PROJECT_ROOT / "clubdocs")] if args.reload else None,
    )


if __name__ == "__main__":
    main()
