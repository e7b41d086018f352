# pyright: standard

"""svn-hotbackup: svn_hotbackup/__util__.py
Common utility code shared between modules.
"""

import logging
import os
import re
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

REVISION_PREFIX = "v"
REVISION_WIDTH = 7
REVISION_TAG_RE = re.compile(rf"^{REVISION_PREFIX}(\d+)$")

# Suffix of in-progress snapshot directories and archives
TEMP_SUFFIX = ".tmp"
ARCHIVE_SUFFIX = ".zip"
LOCK_FILE_NAME = ".svn-hotbackup.lock"


class AbortError(Exception):
    """Exception where the run as a whole should be aborted."""


class RepositoryRootError(AbortError):
    """The repository root directory is missing or unusable."""


class ToolError(Exception):
    """An external Subversion tool could not be run or reported failure."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip() if stderr else ""
        if returncode is None:
            message = f"{self.command[0]} failed: {self.stderr}"
        else:
            message = f"{self.command[0]} exited with status {returncode}"
            if self.stderr:
                message += f": {self.stderr}"
        super().__init__(message)


def log_heading(caption: str) -> str:
    """Formatted heading for logging output sections."""
    return f"{f'--[ {caption} ]':-<50}"


def revision_tag(revision: int) -> str:
    """Return the snapshot name for a revision, e.g. 123 -> 'v0000123'."""
    if revision < 0:
        raise ValueError(f"Revision must not be negative: {revision}")
    return f"{REVISION_PREFIX}{revision:0{REVISION_WIDTH}d}"


def parse_revision_tag(name: str) -> Optional[int]:
    """Return the revision encoded in a snapshot or archive name, if any."""
    if name.endswith(ARCHIVE_SUFFIX):
        name = name[: -len(ARCHIVE_SUFFIX)]
    match = REVISION_TAG_RE.match(name)
    return int(match.group(1)) if match else None


def is_repository(path) -> bool:
    """Check whether ``path`` has the on-disk layout of a Subversion repository."""
    path = Path(path)
    return (path / "format").is_file() and (path / "db").is_dir()


def resolve_tool(name: str, tool_path=None) -> str:
    """Find the executable for a Subversion tool.

    Args:
        name: Tool name, e.g. 'svnlook'
        tool_path: Optional directory holding the Subversion binaries

    Returns:
        Path of the executable, or the bare name to let the OS look it up
    """
    if tool_path:
        found = shutil.which(name, path=str(tool_path))
        return found or str(Path(tool_path) / name)
    return shutil.which(name) or name


def exec_subprocess(
    command: Sequence[str], timeout: Optional[float] = None, **kwargs
) -> subprocess.CompletedProcess:
    """Run a command to completion with captured stdout and stderr.

    The child process is always waited for, or killed when a timeout
    expires, before returning or raising.

    Raises:
        ToolError: The command could not be started or timed out
    """
    command = [str(c) for c in command]
    logger.debug("Executing: %s", command)
    try:
        process = subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            env=kwargs.pop("env", os.environ.copy()),
            **kwargs,
        )
    except OSError as e:
        raise ToolError(command, stderr=str(e)) from e

    with process:
        try:
            stdout, stderr = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired as e:
            process.kill()
            process.communicate()
            raise ToolError(
                command, stderr=f"timed out after {timeout} seconds"
            ) from e
        except BaseException:
            process.kill()
            raise

    logger.debug("%s returned %d", command[0], process.returncode)
    return subprocess.CompletedProcess(command, process.returncode, stdout, stderr)
