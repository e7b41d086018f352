"""Prune command: Apply retention policies."""

import argparse
import logging
import time
from pathlib import Path

from .. import __util__
from ..core import RetentionPruner
from .common import load_cli_config

logger = logging.getLogger(__name__)


def execute_prune(args: argparse.Namespace) -> int:
    """Execute the prune command.

    Applies each job's retention window to every repository folder in its
    backup root, without taking new snapshots.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    config = load_cli_config(args)
    if config is None:
        return 1

    jobs = config.get_enabled_jobs()
    if not jobs:
        logger.error("No jobs configured")
        return 1

    dry_run = getattr(args, "dry_run", False)
    if dry_run:
        logger.info("Dry run mode - showing what would be deleted")

    logger.info(__util__.log_heading(f"Pruning backups at {time.ctime()}"))

    pruner = RetentionPruner()
    total_deleted = 0
    errors = 0

    for job in jobs:
        history = config.get_effective_history(job)
        logger.info("Backup root: %s (history=%d)", job.backup_root, history)

        if history < 1:
            logger.info("  Retention disabled, nothing to prune")
            continue

        try:
            folders = sorted(p for p in Path(job.backup_root).iterdir() if p.is_dir())
        except OSError as e:
            logger.error("  Cannot list %s: %s", job.backup_root, e)
            errors += 1
            continue

        for folder in folders:
            result = pruner.prune(folder, history, dry_run=dry_run)
            logger.info(
                "  %s: keeping %d dir(s) and %d archive(s), deleting %d",
                folder.name,
                len(result.kept_dirs),
                len(result.kept_archives),
                result.deleted,
            )
            total_deleted += result.deleted
            errors += len(result.errors)

    logger.info(__util__.log_heading(f"Finished at {time.ctime()}"))

    if dry_run:
        logger.info("Dry run: would delete %d backup(s)", total_deleted)
    else:
        logger.info("Deleted %d backup(s)", total_deleted)

    if errors > 0:
        logger.warning("Encountered %d error(s)", errors)
        return 1

    return 0
