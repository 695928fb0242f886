"""Operator maintenance commands for the managed collections.

Usage::

    python -m clubdocs.maintenance reconcile [--collection NAME] [--prune]

``reconcile`` prints one JSON report per collection and exits with status 1
when a file lacks an index entry, or an entry lacks its file and was not
pruned.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Sequence

from .config import get_settings
from .models import COLLECTIONS
from .services.documents import get_collection
from .utils.logging import configure_logging


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="clubdocs maintenance commands.")
    subcommands = parser.add_subparsers(dest="command", required=True)

    reconcile = subcommands.add_parser(
        "reconcile", help="Compare collection indexes with their directories."
    )
    reconcile.add_argument(
        "--collection",
        action="append",
        choices=[definition.name for definition in COLLECTIONS],
        help="Collection to check (repeatable; default: all).",
    )
    reconcile.add_argument(
        "--prune",
        action="store_true",
        help="Drop index entries whose file no longer exists.",
    )
    return parser.parse_args(argv)


def run_reconcile(names: Sequence[str], *, prune: bool) -> int:
    settings = get_settings()
    inconsistent = False
    for name in names:
        report = get_collection(name, settings).reconcile(prune=prune)
        print(json.dumps(report.model_dump(mode="json", exclude_none=True), indent=2))
        if report.untracked_files or (report.missing_files and not prune):
            inconsistent = True
    return 1 if inconsistent else 0


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging(stream=sys.stderr)
    args = parse_args(argv)
    names = args.collection or [definition.name for definition in COLLECTIONS]
    return run_reconcile(names, prune=args.prune)


if __name__ == "__main__":
    sys.exit(main())
