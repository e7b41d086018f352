"""svn-hotbackup: svn_hotbackup/__init__.py."""

from pathlib import Path


__version__ = "0.1.0"


def repository_name(path: Path) -> str:
    """Name of the per-repository backup folder for ``path``."""
    return Path(path).resolve().name
