"""List command: Show retained snapshots and archives."""

import argparse
import json
import logging

from rich.console import Console
from rich.table import Table

from ..core import list_backups
from .common import init_logging, load_cli_config

logger = logging.getLogger(__name__)


def execute_list(args: argparse.Namespace) -> int:
    """Execute the list command.

    Lists the backup root given on the command line, or every configured
    job's backup root.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    backup_root = getattr(args, "backup_root", None)
    if backup_root:
        init_logging(args)
        roots = [backup_root]
    else:
        config = load_cli_config(args)
        if config is None:
            return 1
        roots = list(dict.fromkeys(j.backup_root for j in config.get_enabled_jobs()))

    inventory = {root: list_backups(root) for root in roots}

    if getattr(args, "json", False):
        data = {
            root: [repo.to_dict() for repo in repos]
            for root, repos in inventory.items()
        }
        print(json.dumps(data, indent=2))
        return 0

    console = Console()
    for root, repos in inventory.items():
        table = Table(title=f"Backups in {root}")
        table.add_column("Repository")
        table.add_column("Latest", justify="right")
        table.add_column("Snapshots", justify="right")
        table.add_column("Archives", justify="right")

        for repo in repos:
            latest = repo.latest_revision
            table.add_row(
                repo.name,
                f"r{latest}" if latest is not None else "-",
                str(len(repo.snapshots)),
                str(len(repo.archives)),
            )

        if repos:
            console.print(table)
        else:
            console.print(f"No backups in {root}")

    return 0
