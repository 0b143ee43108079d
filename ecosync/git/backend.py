"""
Git Backend — The only place ecosync shells out to git.

The sync engine talks to a GitBackend, never to subprocess directly, so the
executor/prober/checker logic can be exercised against a fake backend with
no network or repository state.

Remote operations set GIT_TERMINAL_PROMPT=0 so a remote that wants
credentials fails fast instead of waiting on a prompt, and every call
carries a timeout.
"""

from __future__ import annotations

import logging
import os
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from ..errors import (
    GitCommandError,
    PushRejectedError,
    RemoteTimeoutError,
    RemoteUnreachableError,
)

logger = logging.getLogger(__name__)

# git ls-remote --exit-code returns 2 when no matching ref exists
LS_REMOTE_NO_MATCH = 2


class GitBackend(ABC):
    """Operations the sync engine needs from version control."""

    @abstractmethod
    def is_repository(self) -> bool:
        """True if the working directory is inside a git work tree."""

    @abstractmethod
    def list_remotes(self) -> List[str]:
        """Names of configured remotes."""

    @abstractmethod
    def head(self) -> str:
        """Full hash of local HEAD."""

    @abstractmethod
    def short_head(self) -> str:
        """Abbreviated hash of local HEAD."""

    @abstractmethod
    def head_subject(self) -> str:
        """Subject line of the HEAD commit."""

    @abstractmethod
    def get_remote_ref(self, remote: str, branch: str, timeout: float) -> Optional[str]:
        """
        Look up refs/heads/<branch> on a remote (name or URL).

        Returns the hash, or None when the remote answered but has no such
        branch. Raises RemoteUnreachableError / RemoteTimeoutError otherwise.
        """

    @abstractmethod
    def push(self, remote: str, branch: str, timeout: float) -> str:
        """
        Fast-forward push of local HEAD to refs/heads/<branch> on the remote.

        Raises PushRejectedError on refusal.
        """

    @abstractmethod
    def force_push(self, remote: str, branch: str, timeout: float) -> str:
        """Force push, overwriting remote history. Only reachable via --force."""

    @abstractmethod
    def clone_head(self, clone_path: Path) -> Optional[str]:
        """HEAD of another local clone, or None if it cannot be read."""

    @abstractmethod
    def pull_rebase(self, clone_path: Path, remote: str, branch: str, timeout: float) -> str:
        """Run pull --rebase inside another local clone."""


class SubprocessGit(GitBackend):
    """GitBackend backed by the git executable."""

    def __init__(self, repo: Path, local_timeout: float = 5.0):
        self.repo = Path(repo)
        self.local_timeout = local_timeout

    # ─── Helpers ────────────────────────────────────────────

    def _run(
        self,
        *args: str,
        cwd: Optional[Path] = None,
        timeout: Optional[float] = None,
    ) -> subprocess.CompletedProcess:
        cmd = ["git"] + list(args)
        env = dict(os.environ, GIT_TERMINAL_PROMPT="0")
        return subprocess.run(
            cmd,
            cwd=str(cwd or self.repo),
            capture_output=True,
            text=True,
            timeout=timeout or self.local_timeout,
            env=env,
        )

    def _output(self, *args: str) -> str:
        """Run a local git query and return stripped stdout."""
        try:
            result = self._run(*args)
        except subprocess.TimeoutExpired:
            raise GitCommandError(f"git {' '.join(args)} timed out")
        if result.returncode != 0:
            raise GitCommandError(
                f"git {' '.join(args)} failed", stderr=result.stderr.strip()
            )
        return result.stdout.strip()

    @staticmethod
    def _refspec(branch: str) -> str:
        # local HEAD, whichever branch is checked out
        return f"HEAD:refs/heads/{branch}"

    @staticmethod
    def _last_line(result: subprocess.CompletedProcess) -> str:
        output = result.stderr.strip() or result.stdout.strip()
        return output.splitlines()[-1].strip() if output else ""

    @classmethod
    def _push_reason(cls, result: subprocess.CompletedProcess) -> str:
        """The "! [rejected] ..." line if git printed one, else the last line."""
        for line in (result.stderr or "").splitlines():
            if "[rejected]" in line or "[remote rejected]" in line:
                return line.strip().lstrip("! ").strip()
        return cls._last_line(result) or "push failed"

    # ─── Local ──────────────────────────────────────────────

    def is_repository(self) -> bool:
        if not self.repo.is_dir():
            return False
        try:
            result = self._run("rev-parse", "--is-inside-work-tree")
        except (OSError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0 and result.stdout.strip() == "true"

    def list_remotes(self) -> List[str]:
        output = self._output("remote")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def head(self) -> str:
        return self._output("rev-parse", "HEAD")

    def short_head(self) -> str:
        return self._output("rev-parse", "--short", "HEAD")

    def head_subject(self) -> str:
        return self._output("log", "-1", "--format=%s")

    # ─── Remote ─────────────────────────────────────────────

    def get_remote_ref(self, remote: str, branch: str, timeout: float) -> Optional[str]:
        try:
            result = self._run(
                "ls-remote", "--exit-code", remote, f"refs/heads/{branch}",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            raise RemoteTimeoutError(remote, timeout)

        if result.returncode == LS_REMOTE_NO_MATCH:
            return None
        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise RemoteUnreachableError(
                remote, stderr.splitlines()[-1] if stderr else "ls-remote failed",
                stderr=stderr,
            )

        for line in result.stdout.splitlines():
            sha, _, ref = line.partition("\t")
            if ref.strip() == f"refs/heads/{branch}":
                return sha.strip()
        return None

    def push(self, remote: str, branch: str, timeout: float) -> str:
        return self._push(["push", remote, self._refspec(branch)], remote, timeout)

    def force_push(self, remote: str, branch: str, timeout: float) -> str:
        return self._push(["push", "--force", remote, self._refspec(branch)], remote, timeout)

    def _push(self, args: List[str], remote: str, timeout: float) -> str:
        try:
            result = self._run(*args, timeout=timeout)
        except subprocess.TimeoutExpired:
            raise RemoteTimeoutError(remote, timeout)

        if result.returncode != 0:
            stderr = result.stderr.strip() or result.stdout.strip()
            raise PushRejectedError(remote, self._push_reason(result), stderr=stderr)
        return self._last_line(result)

    # ─── Other clones ───────────────────────────────────────

    def clone_head(self, clone_path: Path) -> Optional[str]:
        try:
            result = self._run("rev-parse", "HEAD", cwd=clone_path)
        except (OSError, subprocess.TimeoutExpired):
            return None
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def pull_rebase(self, clone_path: Path, remote: str, branch: str, timeout: float) -> str:
        try:
            result = self._run(
                "pull", "--rebase", remote, branch, cwd=clone_path, timeout=timeout
            )
        except subprocess.TimeoutExpired:
            raise RemoteTimeoutError(str(clone_path), timeout)
        if result.returncode != 0:
            raise GitCommandError(
                f"pull --rebase in {clone_path} failed: {self._last_line(result)}",
                stderr=result.stderr.strip(),
            )
        return self._last_line(result)
