"""Inventory of the backups retained under a backup root."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .. import __util__
from .retention import list_archives, list_snapshot_dirs

logger = logging.getLogger(__name__)


@dataclass
class RepositoryBackups:
    """Snapshots and archives kept for one repository."""

    name: str
    path: Path
    snapshots: list[str] = field(default_factory=list)
    archives: list[str] = field(default_factory=list)

    @property
    def latest_revision(self) -> Optional[int]:
        revisions = [
            r
            for r in map(__util__.parse_revision_tag, self.snapshots + self.archives)
            if r is not None
        ]
        return max(revisions) if revisions else None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "path": str(self.path),
            "snapshots": self.snapshots,
            "archives": self.archives,
            "latest_revision": self.latest_revision,
        }


def list_backups(backup_root) -> list[RepositoryBackups]:
    """List per-repository backup folders under ``backup_root``, by name."""
    backup_root = Path(backup_root)
    if not backup_root.is_dir():
        logger.debug("Backup root %s does not exist", backup_root)
        return []

    inventory = []
    for folder in sorted(backup_root.iterdir(), key=lambda p: p.name):
        if not folder.is_dir():
            continue
        inventory.append(
            RepositoryBackups(
                name=folder.name,
                path=folder,
                snapshots=[p.name for p in list_snapshot_dirs(folder)],
                archives=[p.name for p in list_archives(folder)],
            )
        )
    return inventory
