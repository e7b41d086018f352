"""Compression of snapshot directories into zip archives."""

import logging
import os
import shutil
import zipfile
from pathlib import Path

from .. import __util__

logger = logging.getLogger(__name__)


class CompressionError(Exception):
    """Raised when archive creation fails."""


def _add_directory_to_zip(zipf: zipfile.ZipFile, directory: Path) -> int:
    """Recursively add the contents of ``directory`` with relative names.

    Returns:
        Number of files written
    """
    count = 0
    for item in sorted(directory.rglob("*")):
        relative_path = item.relative_to(directory).as_posix()
        if item.is_dir():
            # Keep empty directories, hot copies rely on some of them
            if not any(item.iterdir()):
                zipf.writestr(relative_path + "/", "")
        elif item.is_file():
            zipf.write(item, relative_path)
            count += 1
    return count


class ArchiveCompressor:
    """Replaces a snapshot directory with a single zip archive."""

    def __init__(self, compression=zipfile.ZIP_DEFLATED, log=None):
        self.compression = compression
        self.log = log or logger

    def compress(self, snapshot_dir, archive_path) -> Path:
        """Zip ``snapshot_dir`` into ``archive_path`` and delete the directory.

        Zip64 extensions are used when needed, so archives may exceed 4 GiB.
        Non-ASCII file names are stored as UTF-8, and files older than 1980
        get the earliest timestamp zip can hold.

        Raises:
            CompressionError: If the archive could not be written
        """
        snapshot_dir = Path(snapshot_dir)
        archive_path = Path(archive_path)
        staging = archive_path.with_name(archive_path.name + __util__.TEMP_SUFFIX)

        if not snapshot_dir.is_dir():
            raise CompressionError(f"Snapshot directory not found: {snapshot_dir}")

        try:
            with zipfile.ZipFile(
                staging,
                "w",
                compression=self.compression,
                allowZip64=True,
                strict_timestamps=False,
            ) as zipf:
                count = _add_directory_to_zip(zipf, snapshot_dir)
            os.replace(staging, archive_path)
        except (OSError, zipfile.BadZipFile, ValueError) as e:
            staging.unlink(missing_ok=True)
            raise CompressionError(f"Failed to create archive {archive_path}: {e}") from e

        self.log.debug("Wrote %d file(s) to %s", count, archive_path)
        shutil.rmtree(snapshot_dir)
        return archive_path
