"""
Tests for the ecosync CLI.

Uses Click's CliRunner with FakeGit patched in for SubprocessGit, so no
subprocesses are spawned.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner
from conftest import LOCAL, OTHER, UNREACHABLE, FakeGit

from ecosync.errors import GitCommandError
from ecosync.main import cli


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    (tmp_path / "ecosync.yaml").write_text(
        "canonical_remote: everclaw-org\n"
        "excluded_remotes: [everclaw-fork]\n"
    )
    return tmp_path


@pytest.fixture
def use_git(monkeypatch):
    """Route every SubprocessGit construction to the given fake."""
    def _use(git: FakeGit) -> FakeGit:
        factory = lambda *args, **kwargs: git
        monkeypatch.setattr("ecosync.fleet.runner.SubprocessGit", factory)
        monkeypatch.setattr("ecosync.cli.status.SubprocessGit", factory)
        monkeypatch.setattr("ecosync.cli.config.SubprocessGit", factory)
        return git
    return _use


def invoke(repo: Path, *args: str):
    return CliRunner().invoke(cli, ["--repo", str(repo), *args])


class TestSync:

    def test_live_pushes_and_writes_report(self, repo, fake_git, use_git):
        use_git(fake_git)

        result = invoke(repo, "sync")

        assert result.exit_code == 0, result.output
        assert "flavor-a" in result.output
        assert "pushed" in result.output
        assert "skipped (excluded)" in result.output
        assert "📊 Sync Summary" in result.output
        assert fake_git.pushes == [("flavor-a", "main", False)]

        data = json.loads((repo / "scripts" / ".last-sync.json").read_text())
        assert data["pushed"] == 1
        assert data["inSync"] == 1
        assert data["failed"] == 0

    def test_verify_exit_one(self, repo, fake_git, use_git):
        use_git(fake_git)

        result = invoke(repo, "sync", "--verify")

        assert result.exit_code == 1
        assert "out of sync (remote: def4560)" in result.output
        assert "Failed remotes:" in result.output
        assert fake_git.pushes == []

    def test_dry_run(self, repo, fake_git, use_git):
        use_git(fake_git)

        result = invoke(repo, "sync", "--dry-run")

        assert result.exit_code == 0
        assert f"would push {LOCAL[:7]} → def4560" in result.output
        assert fake_git.pushes == []

    def test_verify_wins_over_dry_run(self, repo, fake_git, use_git):
        use_git(fake_git)

        result = invoke(repo, "sync", "--dry-run", "--verify")

        assert result.exit_code == 1
        assert "out of sync" in result.output

    def test_force(self, repo, fake_git, use_git):
        use_git(fake_git)

        result = invoke(repo, "sync", "--force")

        assert result.exit_code == 0
        assert fake_git.pushes == [("flavor-a", "main", True)]

    def test_json_output(self, repo, fake_git, use_git):
        use_git(fake_git)

        result = invoke(repo, "sync", "--verify", "--json")

        data = json.loads(result.stdout)
        assert data["failedRemotes"] == ["flavor-a"]
        assert [r["remote"] for r in data["remotes"]] == ["origin", "flavor-a", "everclaw-fork"]
        assert data["remotes"][1]["outcome"] == "diverged"

    def test_custom_report_path(self, repo, fake_git, use_git, tmp_path):
        use_git(fake_git)
        target = tmp_path / "out" / "status.json"

        invoke(repo, "sync", "--report", str(target))

        assert json.loads(target.read_text())["branch"] == "main"

    def test_unreachable_exit_one(self, repo, use_git):
        use_git(FakeGit(refs={"origin": LOCAL, "flavor-b": UNREACHABLE}))

        result = invoke(repo, "sync")

        assert result.exit_code == 1
        assert "unreachable" in result.output

    def test_not_a_repository_exit_two(self, repo, fake_git, use_git):
        fake_git.is_repo = False
        use_git(fake_git)

        result = invoke(repo, "sync")

        assert result.exit_code == 2
        assert "Not a git repository" in result.output
        assert not (repo / "scripts" / ".last-sync.json").exists()

    def test_no_remotes_exit_two(self, repo, use_git):
        use_git(FakeGit(refs={}))

        result = invoke(repo, "sync")

        assert result.exit_code == 2
        assert "No remotes configured" in result.output

    def test_unwritable_report_exit_three(self, repo, fake_git, use_git):
        use_git(fake_git)
        (repo / "scripts").write_text("not a directory\n")

        result = invoke(repo, "sync")

        assert result.exit_code == 3, result.output
        assert not isinstance(result.exception, OSError)
        assert "📊 Sync Summary" in result.output
        assert "❌ Could not write report" in result.output
        assert fake_git.pushes == [("flavor-a", "main", False)]

    def test_remote_listing_failure_exit_two(self, repo, fake_git, use_git, monkeypatch):
        def broken_remotes():
            raise GitCommandError("git remote failed")

        monkeypatch.setattr(fake_git, "list_remotes", broken_remotes)
        use_git(fake_git)

        result = invoke(repo, "sync")

        assert result.exit_code == 2
        assert "Cannot list remotes" in result.output

    def test_bad_config_exit_two(self, repo, fake_git, use_git):
        use_git(fake_git)
        (repo / "ecosync.yaml").write_text("probe_timeout: -5\n")

        result = invoke(repo, "sync")

        assert result.exit_code == 2

    def test_external_section(self, repo, use_git):
        url = "https://github.com/SmartAgentProtocol/smartagent.git"
        (repo / "ecosync.yaml").write_text(
            "externals:\n"
            f"  - name: smartagent\n    url: {url}\n"
        )
        use_git(FakeGit(refs={"origin": LOCAL, url: OTHER}))

        result = invoke(repo, "sync")

        assert result.exit_code == 0
        assert "📱 External references" in result.output
        assert "remote HEAD: def4560 (no local clone)" in result.output


class TestStatus:

    def test_after_sync(self, repo, fake_git, use_git):
        use_git(fake_git)
        invoke(repo, "sync", "--verify")

        result = invoke(repo, "status")

        assert result.exit_code == 1
        assert "(verify)" in result.output
        assert "- flavor-a" in result.output

    def test_json(self, repo, fake_git, use_git):
        use_git(fake_git)
        invoke(repo, "sync")

        result = invoke(repo, "status", "--json")

        assert result.exit_code == 0
        assert json.loads(result.stdout)["pushed"] == 1

    def test_missing_report(self, repo):
        result = invoke(repo, "status")

        assert result.exit_code == 2
        assert "No sync report" in result.output

    def test_corrupt_report(self, repo):
        path = repo / "scripts" / ".last-sync.json"
        path.parent.mkdir()
        path.write_text("{not json")

        result = invoke(repo, "status")

        assert result.exit_code == 2


class TestRemotes:

    def test_lists_categories(self, repo, fake_git, use_git):
        use_git(fake_git)

        result = invoke(repo, "remotes", "--json")

        assert result.exit_code == 0
        assert json.loads(result.stdout) == [
            {"name": "origin", "category": "primary"},
            {"name": "flavor-a", "category": "flavor"},
            {"name": "everclaw-fork", "category": "excluded"},
        ]

    def test_not_a_repository(self, repo, fake_git, use_git):
        fake_git.is_repo = False
        use_git(fake_git)

        result = invoke(repo, "remotes")

        assert result.exit_code == 2

    def test_remote_listing_failure(self, repo, fake_git, use_git, monkeypatch):
        def broken_remotes():
            raise GitCommandError("git remote failed")

        monkeypatch.setattr(fake_git, "list_remotes", broken_remotes)
        use_git(fake_git)

        result = invoke(repo, "remotes")

        assert result.exit_code == 2
        assert "git remote failed" in result.output


class TestCheckConfig:

    def test_warns_about_unknown_remote(self, repo, fake_git, use_git):
        use_git(fake_git)

        result = invoke(repo, "check-config")

        # everclaw-org is configured as canonical but not a git remote here
        assert result.exit_code == 0
        assert "'everclaw-org' is not a configured git remote" in result.output

    def test_error_exit_two(self, repo, fake_git, use_git):
        use_git(fake_git)
        (repo / "ecosync.yaml").write_text("canonical_remote: origin\n")

        result = invoke(repo, "check-config")

        assert result.exit_code == 2
        assert "both primary and canonical" in result.output
