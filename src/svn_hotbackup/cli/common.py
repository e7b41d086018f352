"""Shared CLI utilities and argument parsers."""

import argparse
import logging

from ..__logger__ import create_logger
from ..config import Config, ConfigError, find_config_file, load_config

logger = logging.getLogger(__name__)


def create_global_parser() -> argparse.ArgumentParser:
    """Create a parser with global options that can be used as a parent.

    Options left out on the command line are not set at all, so a
    subcommand using this parent keeps values given before the subcommand.
    """
    parser = argparse.ArgumentParser(add_help=False, argument_default=argparse.SUPPRESS)
    add_verbosity_args(parser)
    return parser


def add_verbosity_args(parser: argparse.ArgumentParser) -> None:
    """Add verbosity-related arguments to a parser."""
    group = parser.add_argument_group("Output options")
    group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )
    group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output",
    )
    group.add_argument(
        "--log-file",
        metavar="FILE",
        help="Also write log messages to FILE",
    )


def get_log_level(args: argparse.Namespace) -> str:
    """Determine log level from parsed arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Log level string (DEBUG, INFO, WARNING, ERROR)
    """
    if getattr(args, "debug", False):
        return "DEBUG"
    elif getattr(args, "quiet", False):
        return "WARNING"
    elif getattr(args, "verbose", False):
        return "DEBUG"
    else:
        return "INFO"


def init_logging(args: argparse.Namespace, log_file: str | None = None) -> None:
    """Configure logging from the command line, falling back to ``log_file``."""
    create_logger(get_log_level(args), getattr(args, "log_file", None) or log_file)


def load_cli_config(args: argparse.Namespace) -> Config | None:
    """Find and load the configuration file named on the command line.

    Returns:
        The loaded configuration, or None after reporting why it is missing
    """
    try:
        config_path = find_config_file(getattr(args, "config", None))
        if config_path is None:
            print("No configuration file found.")
            print("Create one with: svn-hotbackup config init")
            print("")
            print("Or back up directly: svn-hotbackup backup REPO_ROOT BACKUP_ROOT")
            return None

        config, warnings = load_config(config_path)

    except ConfigError as e:
        print(f"Configuration error: {e}")
        return None

    init_logging(args, config.global_config.log_file)
    logger.info("Loaded configuration from: %s", config_path)
    for warning in warnings:
        logger.warning("Config: %s", warning)

    return config
