"""Tests for the command line entry point."""

import argparse
import json
from unittest import mock

import pytest

from conftest import make_repo
from svn_hotbackup import __version__
from svn_hotbackup.cli import dispatcher
from svn_hotbackup.cli.dispatcher import is_legacy_mode, main, positive_int


def write_config(path, repo_root, backup_root, svn_bin, **global_settings):
    settings = {"svn_path": str(svn_bin), "compress": True, "history": 2}
    settings.update(global_settings)
    lines = ["[global]"]
    for key, value in settings.items():
        lines.append(f"{key} = {json.dumps(value)}")
    lines += [
        "",
        "[[jobs]]",
        f'repository_root = "{repo_root}"',
        f'backup_root = "{backup_root}"',
    ]
    path.write_text("\n".join(lines) + "\n")
    return path


class TestIsLegacyMode:
    """Tests for is_legacy_mode function."""

    @pytest.mark.parametrize(
        "argv",
        [
            ["/srv/svn", "/mnt/backup"],
            ["./repos", "backups"],
            ["../repos", "backups"],
            ["~/repos", "backups"],
            ["repos/project", "backups"],
        ],
    )
    def test_paths_are_legacy(self, argv):
        assert is_legacy_mode(argv) is True

    @pytest.mark.parametrize(
        "argv",
        [
            [],
            ["backup", "/srv/svn", "/mnt/backup"],
            ["run"],
            ["--version"],
            ["-v", "list"],
            ["https://svn.example.com/repo"],
            ["repos"],
        ],
    )
    def test_not_legacy(self, argv):
        assert is_legacy_mode(argv) is False


class TestPositiveInt:
    """Tests for positive_int argument type."""

    def test_accepts_positive(self):
        assert positive_int("4") == 4

    @pytest.mark.parametrize("value", ["0", "-2"])
    def test_rejects_below_one(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            positive_int(value)


class TestMain:
    """Tests for main and global options."""

    def test_version(self, capsys):
        assert main(["--version"]) == 0
        assert __version__ in capsys.readouterr().out

    def test_no_command(self, capsys):
        assert main([]) == 1
        assert "No command specified" in capsys.readouterr().out

    def test_invalid_parallel_is_usage_error(self, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            main(["backup", str(tmp_path), str(tmp_path), "--parallel", "0"])
        assert excinfo.value.code == 2

    def test_unhandled_exception(self):
        with mock.patch.object(
            dispatcher, "run_subcommand", side_effect=RuntimeError("boom")
        ):
            assert main(["list"]) == 1

    def test_keyboard_interrupt(self):
        with mock.patch.object(
            dispatcher, "run_subcommand", side_effect=KeyboardInterrupt
        ):
            assert main(["list"]) == 130


class TestBackupCommand:
    """Tests for the backup command and its legacy form."""

    def test_backup(self, repo_root, backup_root, svn_bin):
        make_repo(repo_root, "project", revision=12)

        code = main(
            [
                "backup",
                str(repo_root),
                str(backup_root),
                "--compress",
                "--history",
                "2",
                "--svn-path",
                str(svn_bin),
            ]
        )

        assert code == 0
        assert (backup_root / "project" / "v0000012.zip").is_file()

    def test_legacy_form(self, repo_root, backup_root, svn_bin):
        make_repo(repo_root, "project", revision=3)

        code = main([str(repo_root), str(backup_root), "-s", str(svn_bin)])

        assert code == 0
        assert (backup_root / "project" / "v0000003").is_dir()

    def test_missing_repository_root(self, tmp_path, backup_root, svn_bin):
        code = main(
            ["backup", str(tmp_path / "missing"), str(backup_root), "-s", str(svn_bin)]
        )
        assert code == 1

    def test_failed_repository_permissive_by_default(
        self, repo_root, backup_root, svn_bin
    ):
        broken = make_repo(repo_root, "broken")
        (broken / "FAIL_HOTCOPY").touch()
        make_repo(repo_root, "fine")

        code = main(["backup", str(repo_root), str(backup_root), "-s", str(svn_bin)])

        assert code == 0
        assert (backup_root / "fine" / "v0000001").is_dir()

    def test_failed_repository_with_strict(self, repo_root, backup_root, svn_bin):
        broken = make_repo(repo_root, "broken")
        (broken / "FAIL_HOTCOPY").touch()

        code = main(
            [
                "backup",
                str(repo_root),
                str(backup_root),
                "-s",
                str(svn_bin),
                "--strict",
            ]
        )

        assert code == 1

    def test_log_file(self, repo_root, backup_root, svn_bin, tmp_path):
        make_repo(repo_root, "project", revision=8)
        log_file = tmp_path / "backup.log"

        main(
            [
                "--log-file",
                str(log_file),
                "backup",
                str(repo_root),
                str(backup_root),
                "-s",
                str(svn_bin),
            ]
        )

        text = log_file.read_text()
        assert "Backing up 'v0000008' from 'project'." in text
        assert "1 succeeded, 0 failed, 0 skipped" in text

    def test_options_after_subcommand(self, repo_root, backup_root, svn_bin, tmp_path):
        make_repo(repo_root, "project", revision=6)
        log_file = tmp_path / "after.log"

        code = main(
            [
                "backup",
                str(repo_root),
                str(backup_root),
                "-s",
                str(svn_bin),
                "--log-file",
                str(log_file),
            ]
        )

        assert code == 0
        assert "Backing up 'v0000006' from 'project'." in log_file.read_text()

    def test_legacy_form_with_verbosity(self, repo_root, backup_root, svn_bin):
        make_repo(repo_root, "project", revision=2)

        code = main([str(repo_root), str(backup_root), "-c", "-v", "-s", str(svn_bin)])

        assert code == 0
        assert (backup_root / "project" / "v0000002.zip").is_file()

    def test_options_before_subcommand_are_kept(
        self, repo_root, backup_root, svn_bin, tmp_path
    ):
        make_repo(repo_root, "project", revision=6)
        log_file = tmp_path / "quiet.log"

        main(
            [
                "-q",
                "backup",
                str(repo_root),
                str(backup_root),
                "-s",
                str(svn_bin),
                "--log-file",
                str(log_file),
            ]
        )

        assert "Backing up" not in log_file.read_text()
        assert (backup_root / "project" / "v0000006").is_dir()


class TestRunCommand:
    """Tests for the run command."""

    def test_run_jobs(self, repo_root, backup_root, svn_bin, tmp_config_dir):
        make_repo(repo_root, "project", revision=4)
        config = write_config(
            tmp_config_dir / "config.toml", repo_root, backup_root, svn_bin
        )

        assert main(["--config", str(config), "run"]) == 0
        assert (backup_root / "project" / "v0000004.zip").is_file()

    def test_strict_from_config(self, repo_root, backup_root, svn_bin, tmp_config_dir):
        broken = make_repo(repo_root, "broken")
        (broken / "FAIL_HOTCOPY").touch()
        config = write_config(
            tmp_config_dir / "config.toml", repo_root, backup_root, svn_bin
        )
        assert main(["--config", str(config), "run"]) == 0

        write_config(config, repo_root, backup_root, svn_bin, strict=True)
        assert main(["--config", str(config), "run"]) == 1

    def test_dry_run(self, repo_root, backup_root, svn_bin, tmp_config_dir, capsys):
        make_repo(repo_root, "project")
        config = write_config(
            tmp_config_dir / "config.toml", repo_root, backup_root, svn_bin
        )

        assert main(["--config", str(config), "run", "--dry-run"]) == 0

        out = capsys.readouterr().out
        assert f"Job: {repo_root}" in out
        assert "History: 2" in out
        assert not backup_root.exists()

    def test_missing_config(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "none.toml"), "run"]) == 1
        assert "Configuration error" in capsys.readouterr().out


class TestPruneCommand:
    """Tests for the prune command."""

    def test_prune(self, repo_root, backup_root, svn_bin, tmp_config_dir):
        folder = backup_root / "project"
        folder.mkdir(parents=True)
        for rev in range(1, 5):
            (folder / f"v{rev:07d}.zip").write_bytes(b"PK")
        config = write_config(
            tmp_config_dir / "config.toml", repo_root, backup_root, svn_bin
        )

        assert main(["--config", str(config), "prune", "--dry-run"]) == 0
        assert len(list(folder.iterdir())) == 4

        assert main(["--config", str(config), "prune"]) == 0
        assert sorted(p.name for p in folder.iterdir()) == [
            "v0000003.zip",
            "v0000004.zip",
        ]


class TestListCommand:
    """Tests for the list command."""

    def test_list_json(self, backup_root, capsys):
        (backup_root / "project" / "v0000002").mkdir(parents=True)
        (backup_root / "project" / "v0000001.zip").write_bytes(b"PK")

        assert main(["list", str(backup_root), "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        [repo] = data[str(backup_root)]
        assert repo["name"] == "project"
        assert repo["snapshots"] == ["v0000002"]
        assert repo["archives"] == ["v0000001.zip"]
        assert repo["latest_revision"] == 2

    def test_list_table(self, backup_root, capsys):
        (backup_root / "project").mkdir(parents=True)
        (backup_root / "project" / "v0000009.zip").write_bytes(b"PK")

        assert main(["list", str(backup_root)]) == 0
        out = capsys.readouterr().out
        assert "project" in out
        assert "r9" in out


class TestConfigCommand:
    """Tests for the config command."""

    def test_init_to_stdout(self, capsys):
        assert main(["config", "init"]) == 0
        assert "[[jobs]]" in capsys.readouterr().out

    def test_init_to_file_then_validate(self, tmp_config_dir, capsys):
        output = tmp_config_dir / "generated.toml"

        assert main(["config", "init", "-o", str(output)]) == 0
        assert output.is_file()

        assert main(["--config", str(output), "config", "validate"]) == 0
        assert "Configuration is valid." in capsys.readouterr().out

    def test_validate_invalid(self, tmp_config_dir, capsys):
        bad = tmp_config_dir / "bad.toml"
        bad.write_text("[global]\nhistory = 'many'\n")

        assert main(["--config", str(bad), "config", "validate"]) == 1
        assert "Configuration error" in capsys.readouterr().out

    def test_no_action(self, capsys):
        assert main(["config"]) == 1
        assert "Usage" in capsys.readouterr().out
