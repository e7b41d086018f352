"""Run command: Execute all configured backup jobs."""

import argparse
import logging

from ..config import Config, JobConfig
from ..core import BackupOptions
from .backup import perform_backup
from .common import load_cli_config

logger = logging.getLogger(__name__)


def job_options(job: JobConfig, config: Config, parallel: int | None = None) -> BackupOptions:
    """Build backup options for a job from its config and the global defaults."""
    timeout = config.global_config.tool_timeout
    return BackupOptions(
        repository_root=job.repository_root,
        backup_root=job.backup_root,
        compress=config.get_effective_compress(job),
        history=config.get_effective_history(job),
        tool_path=config.global_config.svn_path,
        tool_timeout=timeout if timeout and timeout > 0 else None,
        parallel_repositories=parallel or config.global_config.parallel_repositories,
    )


def execute_run(args: argparse.Namespace) -> int:
    """Execute the run command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    config = load_cli_config(args)
    if config is None:
        return 1

    jobs = config.get_enabled_jobs()
    if not jobs:
        logger.error("No jobs configured")
        return 1

    # Dry run mode
    if getattr(args, "dry_run", False):
        return _dry_run(config)

    strict = getattr(args, "strict", False) or config.global_config.strict
    parallel = getattr(args, "parallel", None)

    logger.info("Processing %d job(s)", len(jobs))

    exit_code = 0
    for job in jobs:
        code = perform_backup(job_options(job, config, parallel), strict=strict)
        exit_code = max(exit_code, code)

    return exit_code


def _dry_run(config: Config) -> int:
    """Show what would be done without making changes."""
    print("Dry run mode - showing what would be done:")
    print("")

    for job in config.get_enabled_jobs():
        history = config.get_effective_history(job)
        print(f"Job: {job.repository_root}")
        print(f"  Backup root: {job.backup_root}")
        print(f"  Compress: {'yes' if config.get_effective_compress(job) else 'no'}")
        print(f"  History: {history if history > 0 else 'keep all'}")
        print("")

    return 0
