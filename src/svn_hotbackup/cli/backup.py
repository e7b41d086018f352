"""Backup command: back up a repository root given on the command line."""

import argparse
import logging
import time

from .. import __util__
from ..core import BackupOptions, BackupOrchestrator, RepositoryStatus
from .common import init_logging

logger = logging.getLogger(__name__)


def perform_backup(options: BackupOptions, strict: bool = False) -> int:
    """Run one backup and log a summary.

    Args:
        options: Backup settings
        strict: Treat failed repositories as a failed run

    Returns:
        Exit code: 1 when the run could not start, or with ``strict`` when
        any repository failed, else 0
    """
    logger.info(__util__.log_heading(f"Started at {time.ctime()}"))
    logger.info(
        "Repository root: %s, backup root: %s",
        options.repository_root,
        options.backup_root,
    )
    logger.info(
        "Compress: %s, history: %d, parallel repositories: %d",
        options.compress,
        options.history,
        options.parallel_repositories,
    )

    try:
        report = BackupOrchestrator(options).run()
    except __util__.AbortError as e:
        logger.error("%s", e)
        return 1

    logger.info(__util__.log_heading(f"Finished at {time.ctime()}"))

    for result in report.results:
        if result.status == RepositoryStatus.FAILED:
            logger.warning("  %s: %s (%s)", result.name, result.status.value, result.error)
        elif result.revision is not None:
            logger.info(
                "  %s: %s at r%d", result.name, result.status.value, result.revision
            )

    logger.info(
        "%d succeeded, %d failed, %d skipped in %.1fs",
        report.succeeded,
        report.failed,
        report.skipped,
        report.duration,
    )

    if report.failed and strict:
        return 1
    return 0


def execute_backup(args: argparse.Namespace) -> int:
    """Execute the backup command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    init_logging(args)

    options = BackupOptions(
        repository_root=args.repository_root,
        backup_root=args.backup_root,
        compress=args.compress,
        history=args.history,
        tool_path=args.svn_path,
        tool_timeout=args.timeout,
        parallel_repositories=args.parallel,
    )
    return perform_backup(options, strict=args.strict)
