"""Retention: keep at most N snapshot directories and N archives per repository.

Snapshot directories and archives are pruned as two independent lists,
each ordered by the revision in their name. Leftover staging entries
(``*.tmp``) from interrupted runs can be removed in the same pass.
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from .. import __util__

logger = logging.getLogger(__name__)


@dataclass
class PruneResult:
    """Result of one prune pass over a repository backup folder."""

    folder: Path
    history: int
    dry_run: bool = False
    deleted_dirs: list[Path] = field(default_factory=list)
    deleted_archives: list[Path] = field(default_factory=list)
    deleted_staging: list[Path] = field(default_factory=list)
    kept_dirs: list[Path] = field(default_factory=list)
    kept_archives: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def deleted(self) -> int:
        return len(self.deleted_dirs) + len(self.deleted_archives)

    @property
    def ok(self) -> bool:
        return not self.errors


def revision_order(path: Path) -> tuple:
    """Sort key: tagged entries by revision, anything else after them by name."""
    revision = __util__.parse_revision_tag(path.name)
    return (revision is None, revision or 0, path.name)


def list_snapshot_dirs(folder: Path) -> list[Path]:
    """Snapshot directories in ``folder``, oldest first."""
    return sorted(
        (
            p
            for p in folder.iterdir()
            if p.is_dir() and not p.name.endswith(__util__.TEMP_SUFFIX)
        ),
        key=revision_order,
    )


def list_archives(folder: Path) -> list[Path]:
    """Archive files in ``folder``, oldest first."""
    return sorted(
        (
            p
            for p in folder.iterdir()
            if p.is_file() and p.name.endswith(__util__.ARCHIVE_SUFFIX)
        ),
        key=revision_order,
    )


def list_staging(folder: Path) -> list[Path]:
    """Incomplete snapshot directories and archives left in ``folder``."""
    return sorted(
        (p for p in folder.iterdir() if p.name.endswith(__util__.TEMP_SUFFIX)),
        key=lambda p: p.name,
    )


def split_excess(entries: list[Path], history: int) -> tuple[list[Path], list[Path]]:
    """Split sorted entries into (to_keep, to_delete) for a window of ``history``."""
    if history < 1 or len(entries) <= history:
        return list(entries), []
    cut = len(entries) - history
    return entries[cut:], entries[:cut]


def _remove_entry(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


class RetentionPruner:
    """Deletes the oldest snapshots and archives beyond the retention window.

    A failed deletion is logged and recorded in the result, and the
    remaining entries are still attempted.
    """

    def __init__(self, log=None):
        self.log = log or logger

    def prune(
        self,
        folder,
        history: int,
        dry_run: bool = False,
        clean_staging: bool = False,
    ) -> PruneResult:
        """Apply the retention window to one repository backup folder.

        Args:
            folder: Per-repository backup folder
            history: Entries of each kind to keep (< 1 keeps all)
            dry_run: Only log what would be removed
            clean_staging: Also remove ``*.tmp`` entries; only safe while no
                extraction or compression is writing to ``folder``
        """
        folder = Path(folder)
        result = PruneResult(folder=folder, history=history, dry_run=dry_run)

        if not folder.is_dir():
            self.log.debug("Nothing to prune, %s does not exist", folder)
            return result

        if clean_staging:
            for path in list_staging(folder):
                if self._delete(path, _remove_entry, result, "incomplete backup"):
                    result.deleted_staging.append(path)

        if history < 1:
            self.log.debug("Retention disabled for %s", folder)
            return result

        result.kept_dirs, old_dirs = split_excess(list_snapshot_dirs(folder), history)
        for path in old_dirs:
            if self._delete(path, shutil.rmtree, result):
                result.deleted_dirs.append(path)

        result.kept_archives, old_archives = split_excess(list_archives(folder), history)
        for path in old_archives:
            if self._delete(path, Path.unlink, result):
                result.deleted_archives.append(path)

        return result

    def _delete(self, path: Path, remove, result: PruneResult, what="backup") -> bool:
        if result.dry_run:
            self.log.info("Would remove %s '%s'.", what, path)
            return True
        try:
            remove(path)
        except OSError as e:
            message = f"Failed to remove {what} '{path}': {e}"
            self.log.error(message)
            result.errors.append(message)
            return False
        self.log.info("Removed %s '%s'.", what, path)
        return True
