"""CLI dispatcher with legacy mode detection.

This module routes between the subcommands and the positional form
``svn-hotbackup REPO_ROOT BACKUP_ROOT``, which is treated as ``backup``.
"""

import argparse
import sys
from typing import Callable

from ..__logger__ import logger, shutdown_logger
from .common import add_verbosity_args, create_global_parser


# Known subcommands
SUBCOMMANDS = frozenset(
    {
        "backup",
        "run",
        "prune",
        "list",
        "config",
    }
)


def is_legacy_mode(argv: list[str]) -> bool:
    """Detect if arguments indicate legacy CLI mode.

    Legacy mode is when the first argument looks like a path rather
    than a subcommand:
        svn-hotbackup /srv/svn /mnt/backup -c -n 7

    Args:
        argv: Command line arguments (without program name)

    Returns:
        True if legacy mode should be used
    """
    if not argv:
        return False

    first = argv[0]

    # Explicit subcommand - not legacy
    if first in SUBCOMMANDS:
        return False

    # Help/version flags and options - not legacy
    if first.startswith("-"):
        return False

    # Absolute or relative path - legacy mode
    if first.startswith(("/", "./", "../", "~")):
        return True

    # Contains path separator but not URL scheme - legacy mode
    if "/" in first and "://" not in first:
        return True

    # Default: assume new mode (will error if invalid subcommand)
    return False


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def add_backup_args(parser: argparse.ArgumentParser) -> None:
    """Add the arguments of the backup command."""
    parser.add_argument(
        "repository_root",
        metavar="REPO_ROOT",
        help="Repository, or folder whose subdirectories are repositories",
    )
    parser.add_argument(
        "backup_root",
        metavar="BACKUP_ROOT",
        help="Destination root for the backups",
    )
    parser.add_argument(
        "-c",
        "--compress",
        action="store_true",
        help="Zip each new snapshot and remove the snapshot directory",
    )
    parser.add_argument(
        "-n",
        "--history",
        type=int,
        default=0,
        metavar="N",
        help="Snapshots to keep per repository (default: 0, keep all)",
    )
    parser.add_argument(
        "-s",
        "--svn-path",
        metavar="DIR",
        help="Directory holding svnlook and svnadmin (default: search PATH)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Kill svnlook/svnadmin when they run longer than this",
    )
    parser.add_argument(
        "--parallel",
        type=positive_int,
        default=1,
        metavar="N",
        help="Repositories to back up concurrently (default: 1)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with an error status when any repository fails",
    )


def create_subcommand_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="svn-hotbackup",
        description="Incremental hot-copy backups of Subversion repositories",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    add_verbosity_args(parser)

    parser.add_argument(
        "-V",
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    parser.add_argument(
        "--config",
        metavar="FILE",
        help="Path to configuration file",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands (use 'command --help' for details)",
    )

    # backup command
    backup_parser = subparsers.add_parser(
        "backup",
        parents=[create_global_parser()],
        help="Back up repositories given on the command line",
        description="Hot-copy new revisions, optionally compress, then prune",
    )
    add_backup_args(backup_parser)

    # run command
    run_parser = subparsers.add_parser(
        "run",
        help="Execute all configured backup jobs",
        description="Back up every enabled job from the configuration file",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without making changes",
    )
    run_parser.add_argument(
        "--parallel",
        type=positive_int,
        metavar="N",
        help="Repositories to back up concurrently (overrides config)",
    )
    run_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with an error status when any repository fails",
    )

    # prune command
    prune_parser = subparsers.add_parser(
        "prune",
        help="Apply retention policies",
        description="Remove old snapshots and archives beyond each job's history",
    )
    prune_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be deleted without making changes",
    )

    # list command
    list_parser = subparsers.add_parser(
        "list",
        help="Show retained backups",
        description="List snapshots and archives per repository",
    )
    list_parser.add_argument(
        "backup_root",
        metavar="BACKUP_ROOT",
        nargs="?",
        help="Backup root to list (default: all configured jobs)",
    )
    list_parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format",
    )

    # config command with subcommands
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Validate or initialize configuration",
    )
    config_subs = config_parser.add_subparsers(dest="config_action")

    config_subs.add_parser(
        "validate",
        help="Validate configuration file",
    )

    init_parser = config_subs.add_parser(
        "init",
        help="Generate example configuration",
    )
    init_parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        help="Output file (default: stdout)",
    )

    return parser


def cmd_backup(args: argparse.Namespace) -> int:
    """Execute backup command."""
    from .backup import execute_backup

    return execute_backup(args)


def cmd_run(args: argparse.Namespace) -> int:
    """Execute run command."""
    from .run import execute_run

    return execute_run(args)


def cmd_prune(args: argparse.Namespace) -> int:
    """Execute prune command."""
    from .prune import execute_prune

    return execute_prune(args)


def cmd_list(args: argparse.Namespace) -> int:
    """Execute list command."""
    from .list_cmd import execute_list

    return execute_list(args)


def cmd_config(args: argparse.Namespace) -> int:
    """Execute config command."""
    from .config_cmd import execute_config

    return execute_config(args)


def run_subcommand(args: argparse.Namespace) -> int:
    """Run the specified subcommand.

    Args:
        args: Parsed arguments

    Returns:
        Exit code
    """
    from .. import __version__

    if args.version:
        print(f"svn-hotbackup {__version__}")
        return 0

    if not args.command:
        print("No command specified. Use --help for usage information.")
        return 1

    handlers: dict[str, Callable] = {
        "backup": cmd_backup,
        "run": cmd_run,
        "prune": cmd_prune,
        "list": cmd_list,
        "config": cmd_config,
    }

    handler = handlers.get(args.command)
    if handler:
        return handler(args)
    else:
        print(f"Unknown command: {args.command}")
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for svn-hotbackup CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    if is_legacy_mode(argv):
        argv = ["backup", *argv]

    parser = create_subcommand_parser()
    args = parser.parse_args(argv)

    try:
        return run_subcommand(args)
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130
    except Exception:
        logger.critical("Unhandled exception", exc_info=True)
        return 1
    finally:
        shutdown_logger()
