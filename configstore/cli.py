"""
Command-line tool for inspecting a workspace configuration graph.

Commands:
- list: Print keys, sinks or sources as JSON
- orphans: Print unlinked entities and broken links

Usage:
    configstore list sinks --all
    configstore orphans --catalog catalog.json

Invariants:
    - Read-only: no command mutates remote state
    - Output is JSON on stdout; diagnostics go to stderr
    - Exit code 1 when orphans are found, 2 when a pull failed
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional, Sequence

from .collection import EntityCollection
from .config import Settings
from .log_setup import setup_logging
from .sinks import StaticReferenceCatalog
from .status import CollectionStatus
from .workspace import Workspace

logger = logging.getLogger(__name__)

COLLECTIONS = ("keys", "sinks", "sources")


class StoreCLI:
    """Renders workspace contents for the command line.

    Example:
        >>> cli = StoreCLI()
        >>> print(cli.list_entities(ws.sinks, view="hidden"))
    """

    def list_entities(self, collection: EntityCollection, view: str = "visible") -> str:
        """Serialize one view of a collection.

        Args:
            collection: Collection to print
            view: visible, hidden or all
        """
        if view == "hidden":
            entities = collection.list_hidden
        elif view == "all":
            entities = collection.list_include_hidden
        else:
            entities = collection.list
        return json.dumps([e.to_wire() for e in entities], indent=2, sort_keys=True)

    def orphans(self, workspace: Workspace) -> tuple[str, int]:
        """Serialize orphan warnings; returns (json, warning count)."""
        warnings = workspace.orphans()
        return json.dumps([w.to_dict() for w in warnings], indent=2), len(warnings)

    def pull_errors(self, workspace: Workspace) -> List[str]:
        return [
            c.error_message
            for c in (workspace.keys, workspace.sinks, workspace.sources)
            if c.status is CollectionStatus.ERROR
        ]


def _load_catalog(path: Optional[str]) -> StaticReferenceCatalog:
    if not path:
        return StaticReferenceCatalog()
    with open(path) as f:
        return StaticReferenceCatalog(json.load(f))


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    cli = StoreCLI()
    async with Workspace.from_settings(settings, catalog=_load_catalog(args.catalog)) as ws:
        await ws.pull_all(full_page_load=True)

        errors = cli.pull_errors(ws)
        if errors:
            for error in errors:
                print(error, file=sys.stderr)
            return 2

        if args.command == "list":
            view = "all" if args.all else "hidden" if args.hidden else "visible"
            print(cli.list_entities(getattr(ws, args.collection), view))
            return 0

        output, count = cli.orphans(ws)
        print(output)
        return 1 if count else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Workspace configuration store tool")
    parser.add_argument("--catalog", help="JSON file mapping sink type to {\"hidden\": bool}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # list command
    list_parser = subparsers.add_parser("list", help="Print a collection as JSON")
    list_parser.add_argument("collection", choices=COLLECTIONS)
    group = list_parser.add_mutually_exclusive_group()
    group.add_argument("--hidden", action="store_true", help="Only hidden entities")
    group.add_argument("--all", action="store_true", help="Hidden entities included")

    # orphans command
    subparsers.add_parser("orphans", help="Print unlinked entities and broken links")

    args = parser.parse_args(argv)
    settings = Settings()
    setup_logging(settings)
    return asyncio.run(_run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
