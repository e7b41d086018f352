"""Core backup operations for svn-hotbackup.

Revision probing, hot-copy extraction, compression and retention, driven
per repository by the orchestrator.
"""

from .backup import (
    BackupOptions,
    BackupOrchestrator,
    BackupReport,
    RepositoryResult,
    RepositoryStatus,
)
from .compress import ArchiveCompressor, CompressionError
from .hotcopy import SnapshotExtractor
from .inventory import RepositoryBackups, list_backups
from .retention import PruneResult, RetentionPruner
from .revision import ProbeResult, RevisionProbe

__all__ = [
    "ArchiveCompressor",
    "BackupOptions",
    "BackupOrchestrator",
    "BackupReport",
    "CompressionError",
    "ProbeResult",
    "PruneResult",
    "RepositoryBackups",
    "RepositoryResult",
    "RepositoryStatus",
    "RetentionPruner",
    "RevisionProbe",
    "SnapshotExtractor",
    "list_backups",
]
