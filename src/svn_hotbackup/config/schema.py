"""Configuration schema definitions using dataclasses.

Defines the structure for TOML configuration with sensible defaults.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class JobConfig:
    """Backup job configuration.

    Attributes:
        repository_root: A repository, or a folder of repositories
        backup_root: Destination root for this job's backups
        compress: Zip new snapshots (None uses the global setting)
        history: Snapshots kept per repository (None uses the global setting)
        enabled: Whether this job runs
    """

    repository_root: str
    backup_root: str
    compress: Optional[bool] = None
    history: Optional[int] = None
    enabled: bool = True


@dataclass
class GlobalConfig:
    """Global configuration settings.

    Attributes:
        svn_path: Directory holding svnlook and svnadmin (None searches PATH)
        tool_timeout: Seconds before a hung Subversion tool is killed
        compress: Default for zipping new snapshots
        history: Default number of snapshots kept per repository (0 keeps all)
        parallel_repositories: Max repositories backed up concurrently
        strict: Exit with an error status when any repository fails
        log_file: Path to log file (None for no file logging)
    """

    svn_path: Optional[str] = None
    tool_timeout: Optional[float] = None
    compress: bool = False
    history: int = 0
    parallel_repositories: int = 1
    strict: bool = False
    log_file: Optional[str] = None


@dataclass
class Config:
    """Root configuration object.

    Attributes:
        global_config: Global settings that apply to all jobs
        jobs: List of backup jobs
    """

    global_config: GlobalConfig = field(default_factory=GlobalConfig)
    jobs: list[JobConfig] = field(default_factory=list)

    def get_effective_compress(self, job: JobConfig) -> bool:
        """Job-specific compression overrides the global setting."""
        if job.compress is None:
            return self.global_config.compress
        return job.compress

    def get_effective_history(self, job: JobConfig) -> int:
        """Job-specific history overrides the global setting."""
        if job.history is None:
            return self.global_config.history
        return job.history

    def get_enabled_jobs(self) -> list[JobConfig]:
        """Get list of enabled jobs."""
        return [j for j in self.jobs if j.enabled]
