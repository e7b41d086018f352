"""Snapshot extraction with ``svnadmin hotcopy``.

The copy is written next to its final location and only renamed into
place once the tool has exited successfully, so a snapshot directory under
its final name is always complete.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from .. import __util__

logger = logging.getLogger(__name__)


def temp_path(destination: Path) -> Path:
    """Sibling path a snapshot is written to before it is published."""
    return destination.with_name(destination.name + __util__.TEMP_SUFFIX)


class SnapshotExtractor:
    """Produces consistent point-in-time copies of repositories."""

    TOOL = "svnadmin"

    def __init__(self, tool_path=None, timeout: Optional[float] = None, log=None):
        self.tool_path = tool_path
        self.timeout = timeout
        self.log = log or logger

    def command(self, source: Path, destination: Path) -> list[str]:
        tool = __util__.resolve_tool(self.TOOL, self.tool_path)
        return [tool, "hotcopy", str(source), str(destination)]

    def extract(self, source, destination) -> Path:
        """Hot-copy ``source`` into ``destination``.

        Args:
            source: Repository directory
            destination: Final snapshot directory, must not exist yet

        Returns:
            The published snapshot directory

        Raises:
            ToolError: svnadmin could not be run or exited with an error
        """
        source = Path(source)
        destination = Path(destination)
        staging = temp_path(destination)

        if staging.exists():
            self.log.info("Removing incomplete snapshot %s", staging)
            shutil.rmtree(staging)

        try:
            result = __util__.exec_subprocess(
                self.command(source, staging), timeout=self.timeout
            )
            if result.stderr and result.stderr.strip():
                self.log.info(result.stderr.strip())
            if result.returncode != 0:
                raise __util__.ToolError(
                    result.args, result.returncode, result.stderr or ""
                )
            os.replace(staging, destination)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise

        self.log.debug("Published snapshot %s", destination)
        return destination
