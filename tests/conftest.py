"""
Shared fixtures for ecosync tests.

FakeGit stands in for SubprocessGit so the engine can be exercised without
a real repository or network. Remote state lives in plain dicts that tests
set up directly.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import pytest

from ecosync.config.loader import SyncConfig
from ecosync.errors import (
    GitCommandError,
    PushRejectedError,
    RemoteTimeoutError,
    RemoteUnreachableError,
)
from ecosync.git.backend import GitBackend

LOCAL = "abc123" + "0" * 34
OTHER = "def456" + "0" * 34

UNREACHABLE = "<unreachable>"
TIMEOUT = "<timeout>"


class FakeGit(GitBackend):
    """In-memory GitBackend. refs maps remote name/URL → hash, None, or a marker."""

    def __init__(self, head: str = LOCAL, refs: Optional[Dict[str, Optional[str]]] = None):
        self.is_repo = True
        self.head_hash = head
        self.subject = "Fix flavor sync"
        self.refs: Dict[str, Optional[str]] = dict(refs or {})
        self.reject: Set[str] = set()
        self.clones: Dict[Path, Optional[str]] = {}
        self.pull_fails = False

        self.pushes: List[Tuple[str, str, bool]] = []
        self.probes: List[str] = []
        self.pulls: List[Path] = []
        self._lock = threading.Lock()

    def is_repository(self) -> bool:
        return self.is_repo

    def list_remotes(self) -> List[str]:
        return [name for name in self.refs if "://" not in name]

    def head(self) -> str:
        return self.head_hash

    def short_head(self) -> str:
        return self.head_hash[:7]

    def head_subject(self) -> str:
        return self.subject

    def get_remote_ref(self, remote: str, branch: str, timeout: float) -> Optional[str]:
        with self._lock:
            self.probes.append(remote)
        value = self.refs.get(remote)
        if value == UNREACHABLE:
            raise RemoteUnreachableError(remote, "Could not resolve host")
        if value == TIMEOUT:
            raise RemoteTimeoutError(remote, timeout)
        return value

    def _record_push(self, remote: str, branch: str, force: bool) -> str:
        with self._lock:
            self.pushes.append((remote, branch, force))
        if remote in self.reject:
            raise PushRejectedError(remote, "! [rejected] main -> main (non-fast-forward)")
        self.refs[remote] = self.head_hash
        return f"{self.head_hash[:7]}  main -> main"

    def push(self, remote: str, branch: str, timeout: float) -> str:
        return self._record_push(remote, branch, False)

    def force_push(self, remote: str, branch: str, timeout: float) -> str:
        return self._record_push(remote, branch, True)

    def clone_head(self, clone_path: Path) -> Optional[str]:
        return self.clones.get(clone_path)

    def pull_rebase(self, clone_path: Path, remote: str, branch: str, timeout: float) -> str:
        self.pulls.append(clone_path)
        if self.pull_fails:
            raise GitCommandError(f"pull --rebase in {clone_path} failed: conflict")
        for name, value in self.refs.items():
            if "://" in name:
                self.clones[clone_path] = value
        return "Successfully rebased"


@pytest.fixture
def fake_git() -> FakeGit:
    """Scenario fleet: origin in sync, one flavor behind, one excluded and behind."""
    return FakeGit(refs={
        "origin": LOCAL,
        "flavor-a": OTHER,
        "everclaw-fork": OTHER,
    })


@pytest.fixture
def config() -> SyncConfig:
    return SyncConfig(
        primary_remote="origin",
        canonical_remote="everclaw-org",
        excluded_remotes=["everclaw-fork"],
    )
