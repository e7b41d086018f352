"""Backup orchestration: probe, hot-copy, compress and prune each repository.

The repository root is either a repository itself or a folder whose
immediate subdirectories are candidate repositories. Each repository runs
through its pipeline independently; a failure is logged and recorded
without stopping the others.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout

from .. import __util__, repository_name
from .compress import ArchiveCompressor
from .hotcopy import SnapshotExtractor
from .retention import RetentionPruner
from .revision import RevisionProbe

logger = logging.getLogger(__name__)


class RepositoryStatus(Enum):
    """Outcome of one repository's pipeline."""

    BACKED_UP = "backed up"
    UP_TO_DATE = "up to date"
    NOT_A_REPOSITORY = "not a repository"
    FAILED = "failed"


@dataclass
class BackupOptions:
    """Settings for one backup run.

    Attributes:
        repository_root: A repository, or a folder of repositories
        backup_root: Destination root, created when missing
        compress: Replace each new snapshot directory by a zip archive
        history: Snapshots and archives kept per repository (< 1 keeps all)
        tool_path: Directory holding svnlook and svnadmin
        tool_timeout: Seconds before a hung tool is killed (None waits forever)
        parallel_repositories: Repositories processed concurrently
        lock: Hold a lock file in the backup root for the whole run and remove
            staging entries left by interrupted runs
    """

    repository_root: Path
    backup_root: Path
    compress: bool = False
    history: int = 0
    tool_path: Optional[str] = None
    tool_timeout: Optional[float] = None
    parallel_repositories: int = 1
    lock: bool = True

    def __post_init__(self):
        self.repository_root = Path(self.repository_root).expanduser()
        self.backup_root = Path(self.backup_root).expanduser()


@dataclass
class RepositoryResult:
    """Result of backing up a single repository."""

    name: str
    path: Path
    status: RepositoryStatus
    revision: Optional[int] = None
    artifact: Optional[Path] = None
    pruned: int = 0
    error: str = ""
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status != RepositoryStatus.FAILED


@dataclass
class BackupReport:
    """Summary of a complete run."""

    repository_root: Path
    backup_root: Path
    started_at: float = field(default_factory=time.time)
    completed_at: float = 0.0
    results: list[RepositoryResult] = field(default_factory=list)

    def count(self, *statuses: RepositoryStatus) -> int:
        return sum(1 for r in self.results if r.status in statuses)

    @property
    def succeeded(self) -> int:
        return self.count(RepositoryStatus.BACKED_UP, RepositoryStatus.UP_TO_DATE)

    @property
    def failed(self) -> int:
        return self.count(RepositoryStatus.FAILED)

    @property
    def skipped(self) -> int:
        return self.count(RepositoryStatus.NOT_A_REPOSITORY)

    @property
    def duration(self) -> float:
        if self.completed_at:
            return self.completed_at - self.started_at
        return time.time() - self.started_at


class BackupOrchestrator:
    """Runs the per-repository backup pipeline over a repository root."""

    def __init__(
        self,
        options: BackupOptions,
        probe: Optional[RevisionProbe] = None,
        extractor: Optional[SnapshotExtractor] = None,
        compressor: Optional[ArchiveCompressor] = None,
        pruner: Optional[RetentionPruner] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self.options = options
        self.log = log or logger
        self.probe = probe or RevisionProbe(
            options.tool_path, options.tool_timeout, log=self.log
        )
        self.extractor = extractor or SnapshotExtractor(
            options.tool_path, options.tool_timeout, log=self.log
        )
        self.compressor = compressor or ArchiveCompressor(log=self.log)
        self.pruner = pruner or RetentionPruner(log=self.log)

    def run(self) -> BackupReport:
        """Back up every repository under the repository root.

        Raises:
            RepositoryRootError: The repository root does not exist
            AbortError: Another run holds the backup root lock
        """
        repo_root = self.options.repository_root
        if not repo_root.is_dir():
            raise __util__.RepositoryRootError(
                f"The repository root directory '{repo_root}' does not exist."
            )
        repo_root = repo_root.resolve()

        backup_root = self.options.backup_root
        if not backup_root.is_dir():
            self.log.info("Creating backup root: %s", backup_root)
            backup_root.mkdir(parents=True, exist_ok=True)
        backup_root = backup_root.resolve()

        report = BackupReport(repository_root=repo_root, backup_root=backup_root)

        if not self.options.lock:
            report.results = self._backup_all(self.find_repositories(repo_root))
        else:
            lock = FileLock(backup_root / __util__.LOCK_FILE_NAME, timeout=0)
            try:
                with lock:
                    report.results = self._backup_all(
                        self.find_repositories(repo_root)
                    )
            except Timeout as e:
                raise __util__.AbortError(
                    f"Another backup run is using '{backup_root}'"
                ) from e

        report.completed_at = time.time()
        return report

    def find_repositories(self, repo_root: Path) -> list[Path]:
        """Candidate repositories: the root itself, or its subdirectories."""
        if __util__.is_repository(repo_root):
            self.log.debug("%s is a repository", repo_root)
            return [repo_root]
        candidates = sorted(
            (p for p in repo_root.iterdir() if p.is_dir()), key=lambda p: p.name
        )
        self.log.debug("Found %d candidate(s) in %s", len(candidates), repo_root)
        return candidates

    def _backup_all(self, repositories: list[Path]) -> list[RepositoryResult]:
        workers = max(1, self.options.parallel_repositories)

        if workers == 1 or len(repositories) < 2:
            return [self.backup_repository(repo) for repo in repositories]

        results: dict[Path, RepositoryResult] = {}
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self.backup_repository, repo): repo
                for repo in repositories
            }
            for future in as_completed(futures):
                repo = futures[future]
                try:
                    results[repo] = future.result()
                except Exception as e:
                    self.log.error("Backup of %s failed: %s", repo.name, e)
                    results[repo] = RepositoryResult(
                        repo.name, repo, RepositoryStatus.FAILED, error=str(e)
                    )
        return [results[repo] for repo in repositories]

    def backup_repository(self, repository) -> RepositoryResult:
        """Run the pipeline for one repository, never raising."""
        repository = Path(repository)
        started = time.monotonic()
        try:
            result = self._backup_repository(repository)
        except Exception as e:
            self.log.error("Backup of %s failed: %s", repository.name, e)
            self.log.debug("Failure details for %s", repository.name, exc_info=True)
            result = RepositoryResult(
                repository.name, repository, RepositoryStatus.FAILED, error=str(e)
            )
        result.duration_seconds = time.monotonic() - started
        return result

    def _backup_repository(self, repository: Path) -> RepositoryResult:
        name = repository_name(repository)
        probe = self.probe.probe(repository)
        if not probe.found:
            self.log.info("No revision found in %s, skipping", repository)
            return RepositoryResult(name, repository, RepositoryStatus.NOT_A_REPOSITORY)

        tag = probe.tag
        repo_backup_dir = self.options.backup_root / name
        snapshot_dir = repo_backup_dir / tag
        archive_path = snapshot_dir.with_name(tag + __util__.ARCHIVE_SUFFIX)

        repo_backup_dir.mkdir(parents=True, exist_ok=True)
        result = RepositoryResult(
            name, repository, RepositoryStatus.UP_TO_DATE, revision=probe.revision
        )

        if archive_path.is_file():
            self.log.info("This revision is already backed up: %s", archive_path)
            result.artifact = archive_path
        else:
            if snapshot_dir.is_dir():
                self.log.info("This revision is already backed up: %s", snapshot_dir)
            else:
                self.log.info("Backing up '%s' from '%s'.", tag, name)
                self.extractor.extract(repository, snapshot_dir)
                result.status = RepositoryStatus.BACKED_UP
            result.artifact = snapshot_dir

            if self.options.compress:
                self.log.info("Compressing %s", archive_path)
                result.artifact = self.compressor.compress(snapshot_dir, archive_path)
            else:
                self.log.info("Compression inactive, keeping %s", snapshot_dir)

        self.log.info("Pruning %s", repo_backup_dir)
        # Under the run lock, with this repository's steps done, any staging
        # entry left in its folder belongs to an interrupted run
        pruned = self.pruner.prune(
            repo_backup_dir, self.options.history, clean_staging=self.options.lock
        )
        result.pruned = pruned.deleted
        if pruned.errors:
            result.status = RepositoryStatus.FAILED
            result.error = "; ".join(pruned.errors)
        return result
