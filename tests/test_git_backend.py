"""
Tests for SubprocessGit.

All git invocations are mocked; no real repositories or network needed.
"""

import subprocess
from pathlib import Path
from unittest import mock

import pytest

from ecosync.errors import (
    GitCommandError,
    PushRejectedError,
    RemoteTimeoutError,
    RemoteUnreachableError,
)
from ecosync.git.backend import SubprocessGit

SHA = "abc1230000000000000000000000000000000000"


def _result(returncode: int = 0, stdout: str = "", stderr: str = ""):
    return subprocess.CompletedProcess(
        args=["git"], returncode=returncode, stdout=stdout, stderr=stderr,
    )


@pytest.fixture
def git(tmp_path: Path) -> SubprocessGit:
    return SubprocessGit(tmp_path)


class TestLocal:

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_is_repository(self, mock_run, git):
        mock_run.return_value = _result(stdout="true\n")

        assert git.is_repository() is True
        assert mock_run.call_args[0][0] == ["git", "rev-parse", "--is-inside-work-tree"]

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_not_a_repository(self, mock_run, git):
        mock_run.return_value = _result(returncode=128, stderr="fatal: not a git repository")

        assert git.is_repository() is False

    def test_missing_directory(self, tmp_path):
        assert SubprocessGit(tmp_path / "nope").is_repository() is False

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_list_remotes(self, mock_run, git):
        mock_run.return_value = _result(stdout="origin\nflavor-a\n\neverclaw-org\n")

        assert git.list_remotes() == ["origin", "flavor-a", "everclaw-org"]

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_head_failure_raises(self, mock_run, git):
        mock_run.return_value = _result(returncode=128, stderr="fatal: bad revision 'HEAD'")

        with pytest.raises(GitCommandError) as exc:
            git.head()
        assert "bad revision" in exc.value.stderr

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_head_subject(self, mock_run, git):
        mock_run.return_value = _result(stdout="Fix flavor sync\n")

        assert git.head_subject() == "Fix flavor sync"
        assert mock_run.call_args[0][0] == ["git", "log", "-1", "--format=%s"]


class TestGetRemoteRef:

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_present(self, mock_run, git):
        mock_run.return_value = _result(stdout=f"{SHA}\trefs/heads/main\n")

        assert git.get_remote_ref("origin", "main", 10) == SHA

        args, kwargs = mock_run.call_args
        assert args[0] == ["git", "ls-remote", "--exit-code", "origin", "refs/heads/main"]
        assert kwargs["timeout"] == 10
        assert kwargs["env"]["GIT_TERMINAL_PROMPT"] == "0"

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_absent(self, mock_run, git):
        mock_run.return_value = _result(returncode=2)

        assert git.get_remote_ref("origin", "main", 10) is None

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_unreachable(self, mock_run, git):
        mock_run.return_value = _result(
            returncode=128,
            stderr="fatal: unable to access 'https://x/': Could not resolve host: x",
        )

        with pytest.raises(RemoteUnreachableError) as exc:
            git.get_remote_ref("flavor-a", "main", 10)
        assert exc.value.remote == "flavor-a"
        assert "Could not resolve host" in str(exc.value)

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_timeout(self, mock_run, git):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="git", timeout=10)

        with pytest.raises(RemoteTimeoutError) as exc:
            git.get_remote_ref("slow", "main", 10)
        assert exc.value.timeout == 10
        assert isinstance(exc.value, RemoteUnreachableError)


class TestPush:

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_plain_push(self, mock_run, git):
        mock_run.return_value = _result(stderr="To x\n   abc..def  main -> main\n")

        assert git.push("flavor-a", "main", 60) == "abc..def  main -> main"
        assert mock_run.call_args[0][0] == ["git", "push", "flavor-a", "HEAD:refs/heads/main"]

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_force_push(self, mock_run, git):
        mock_run.return_value = _result()

        git.force_push("flavor-a", "main", 60)

        assert mock_run.call_args[0][0] == ["git", "push", "--force", "flavor-a", "HEAD:refs/heads/main"]

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_pushes_head_not_local_branch(self, mock_run, git):
        """A feature-branch checkout still lands HEAD on the target branch."""
        mock_run.return_value = _result()

        git.push("flavor-a", "release", 60)
        git.force_push("flavor-a", "release", 60)

        pushed = [c[0][0] for c in mock_run.call_args_list]
        assert pushed == [
            ["git", "push", "flavor-a", "HEAD:refs/heads/release"],
            ["git", "push", "--force", "flavor-a", "HEAD:refs/heads/release"],
        ]

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_rejected(self, mock_run, git):
        mock_run.return_value = _result(
            returncode=1,
            stderr=" ! [rejected]        main -> main (non-fast-forward)\n"
                   "error: failed to push some refs\n",
        )

        with pytest.raises(PushRejectedError) as exc:
            git.push("flavor-a", "main", 60)
        assert str(exc.value).startswith("flavor-a: [rejected]")
        assert "non-fast-forward" in str(exc.value)
        assert "failed to push some refs" in exc.value.stderr

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_failure_without_rejected_line(self, mock_run, git):
        mock_run.return_value = _result(
            returncode=128, stderr="fatal: could not read from remote repository.\n",
        )

        with pytest.raises(PushRejectedError) as exc:
            git.push("flavor-a", "main", 60)
        assert "could not read from remote" in str(exc.value)

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_push_timeout(self, mock_run, git):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="git", timeout=60)

        with pytest.raises(RemoteTimeoutError):
            git.push("flavor-a", "main", 60)


class TestOtherClone:

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_clone_head(self, mock_run, git, tmp_path):
        mock_run.return_value = _result(stdout=f"{SHA}\n")

        assert git.clone_head(tmp_path / "clone") == SHA
        assert mock_run.call_args[1]["cwd"] == str(tmp_path / "clone")

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_clone_head_unreadable(self, mock_run, git, tmp_path):
        mock_run.return_value = _result(returncode=128)

        assert git.clone_head(tmp_path) is None

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_pull_rebase(self, mock_run, git, tmp_path):
        mock_run.return_value = _result(stdout="Successfully rebased and updated refs/heads/main.\n")

        git.pull_rebase(tmp_path, "origin", "main", 60)

        assert mock_run.call_args[0][0] == ["git", "pull", "--rebase", "origin", "main"]

    @mock.patch("ecosync.git.backend.subprocess.run")
    def test_pull_rebase_failure(self, mock_run, git, tmp_path):
        mock_run.return_value = _result(returncode=1, stderr="CONFLICT (content)\n")

        with pytest.raises(GitCommandError):
            git.pull_rebase(tmp_path, "origin", "main", 60)
