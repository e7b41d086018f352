"""Revision probing: ask ``svnlook youngest`` for a repository's head revision.

A directory that is not a repository is an expected outcome here, so it is
reported as an absent result instead of an exception.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .. import __util__

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of probing one directory.

    Attributes:
        revision: Youngest revision, or None when no revision was found
    """

    revision: Optional[int] = None

    @classmethod
    def absent(cls) -> "ProbeResult":
        return cls(revision=None)

    @property
    def found(self) -> bool:
        return self.revision is not None

    @property
    def tag(self) -> str:
        """Snapshot name for the probed revision."""
        if self.revision is None:
            raise ValueError("No revision was found")
        return __util__.revision_tag(self.revision)


def parse_revision(output: str) -> Optional[int]:
    """Parse the revision number from ``svnlook youngest`` output."""
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        return int(line) if line.isascii() and line.isdigit() else None
    return None


class RevisionProbe:
    """Runs the revision-reporting tool against candidate directories."""

    TOOL = "svnlook"

    def __init__(self, tool_path=None, timeout: Optional[float] = None, log=None):
        self.tool_path = tool_path
        self.timeout = timeout
        self.log = log or logger

    def command(self, repository: Path) -> list[str]:
        tool = __util__.resolve_tool(self.TOOL, self.tool_path)
        return [tool, "youngest", str(repository)]

    def probe(self, repository) -> ProbeResult:
        """Return the youngest revision of ``repository``.

        Raises:
            ToolError: svnlook could not be run or timed out
        """
        repository = Path(repository)
        result = __util__.exec_subprocess(
            self.command(repository), timeout=self.timeout
        )

        if result.stderr and result.stderr.strip():
            self.log.info(result.stderr.strip())

        revision = parse_revision(result.stdout) if result.returncode == 0 else None
        if revision is None:
            self.log.warning("'%s' is not a repository.", repository.name)
            if result.stdout and result.stdout.strip():
                self.log.info(result.stdout.strip())
            return ProbeResult.absent()

        self.log.debug("Youngest revision of %s is %d", repository.name, revision)
        return ProbeResult(revision=revision)
