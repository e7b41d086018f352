"""Pytest configuration and shared fixtures."""

import stat
import sys
from pathlib import Path

import pytest

# Stand-in for svnlook and svnadmin. A repository is any directory with a
# 'format' file and 'db/current'; a FAIL_HOTCOPY marker makes hotcopy fail
# and a WARN marker makes it print to stderr but succeed.
FAKE_SVN_TOOL = '''
import shutil
import sys
from pathlib import Path


def svnlook(args):
    if len(args) != 2 or args[0] != "youngest":
        sys.stderr.write("svnlook: unsupported arguments\\n")
        return 2
    current = Path(args[1]) / "db" / "current"
    if not current.is_file():
        sys.stderr.write(
            f"svnlook: E000002: Can't open file '{args[1]}/format'\\n"
        )
        return 1
    print(current.read_text().split()[0])
    return 0


def svnadmin(args):
    if len(args) != 3 or args[0] != "hotcopy":
        sys.stderr.write("svnadmin: unsupported arguments\\n")
        return 2
    source, destination = Path(args[1]), Path(args[2])
    if (source / "FAIL_HOTCOPY").exists():
        destination.mkdir(parents=True, exist_ok=True)
        (destination / "partial").write_text("half written")
        sys.stderr.write("svnadmin: E720005: Can't open file: Permission denied\\n")
        return 1
    if (source / "WARN").exists():
        sys.stderr.write("svnadmin: warning: W200007: hotcopy warning\\n")
    shutil.copytree(source, destination)
    return 0


if __name__ == "__main__":
    tool = sys.argv[1]
    sys.exit({"svnlook": svnlook, "svnadmin": svnadmin}[tool](sys.argv[2:]))
'''


@pytest.fixture
def svn_bin(tmp_path):
    """Directory holding fake svnlook and svnadmin executables."""
    bin_dir = tmp_path / "svn-bin"
    bin_dir.mkdir()
    script = bin_dir / "fake_svn.py"
    script.write_text(FAKE_SVN_TOOL)

    for tool in ("svnlook", "svnadmin"):
        wrapper = bin_dir / tool
        wrapper.write_text(
            f'#!/bin/sh\nexec "{sys.executable}" "{script}" {tool} "$@"\n'
        )
        wrapper.chmod(wrapper.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP)
    return bin_dir


def set_revision(repo: Path, revision: int) -> None:
    """Move a fake repository to ``revision``."""
    (repo / "db" / "current").write_text(f"{revision}\n")
    (repo / "db" / "revs" / f"{revision}").write_text(f"revision {revision}\n")


def make_repo(parent: Path, name: str, revision: int = 1) -> Path:
    """Create a directory with the on-disk layout of a repository."""
    repo = parent / name
    (repo / "db" / "revs").mkdir(parents=True)
    (repo / "db" / "transactions").mkdir()
    (repo / "conf").mkdir()
    (repo / "locks").mkdir()
    (repo / "format").write_text("5\n")
    (repo / "conf" / "svnserve.conf").write_text("[general]\n")
    (repo / "conf" / "résumé-日本.txt").write_text("non-ascii name\n")
    set_revision(repo, revision)
    return repo


@pytest.fixture
def repo_root(tmp_path):
    """Empty parent directory for repositories."""
    root = tmp_path / "repos"
    root.mkdir()
    return root


@pytest.fixture
def backup_root(tmp_path):
    """Backup destination that does not exist yet."""
    return tmp_path / "backups"


@pytest.fixture
def sample_config_toml():
    """Return a sample valid TOML configuration string."""
    return """
[global]
svn_path = "/opt/subversion/bin"
tool_timeout = 600
compress = true
history = 7
parallel_repositories = 2
strict = false

[[jobs]]
repository_root = "/srv/svn"
backup_root = "/mnt/backup/svn"

[[jobs]]
repository_root = "/srv/svn-legacy/project"
backup_root = "/mnt/backup/legacy"
compress = false
history = 2
enabled = true

[[jobs]]
repository_root = "/srv/old"
backup_root = "/mnt/backup/old"
enabled = false
"""


@pytest.fixture
def minimal_config_toml():
    """Return a minimal valid TOML configuration string."""
    return """
[[jobs]]
repository_root = "/srv/svn"
backup_root = "/mnt/backup"
"""


@pytest.fixture
def tmp_config_dir(tmp_path):
    """Create a temporary config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def config_file(tmp_config_dir, sample_config_toml):
    """Create a temporary config file with sample content."""
    config_path = tmp_config_dir / "config.toml"
    config_path.write_text(sample_config_toml)
    return config_path


@pytest.fixture
def minimal_config_file(tmp_config_dir, minimal_config_toml):
    """Create a temporary config file with minimal content."""
    config_path = tmp_config_dir / "minimal.toml"
    config_path.write_text(minimal_config_toml)
    return config_path
