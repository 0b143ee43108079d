"""
External Reference Checker — Observe repositories the fleet does not own.

An external repository is read authority only: ecosync looks up its branch
head, compares it with a local clone if one exists, and in live mode may
pull --rebase that clone to catch up. It never pushes to the external
remote, and external results never affect the run's exit status.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config.loader import ExternalRepo
from ..errors import GitCommandError, RemoteUnreachableError
from ..git.backend import GitBackend
from ..models.outcome import SyncMode
from ..models.report import ExternalReport

logger = logging.getLogger(__name__)


class ExternalStatus(str, Enum):
    IN_SYNC = "in_sync"
    DIVERGED = "diverged"
    NO_LOCAL_CLONE = "no_local_clone"
    UNREACHABLE = "unreachable"


@dataclass
class ExternalResult:
    """What the checker found for one external repository."""

    name: str
    status: ExternalStatus
    remote_hash: Optional[str] = None
    local_hash: Optional[str] = None
    pulled: bool = False
    error: Optional[str] = None

    def to_report(self) -> ExternalReport:
        return ExternalReport(
            name=self.name,
            status=self.status.value,
            remote_hash=self.remote_hash,
            local_hash=self.local_hash,
            pulled=self.pulled,
            error=self.error,
        )


class ExternalReferenceChecker:
    """Pull-only counterpart of the SyncExecutor."""

    def __init__(self, git: GitBackend, timeout: float = 10.0,
                 pull_timeout: float = 60.0):
        self.git = git
        self.timeout = timeout
        self.pull_timeout = pull_timeout

    def check(self, external: ExternalRepo, mode: SyncMode = SyncMode.LIVE) -> ExternalResult:
        result = ExternalResult(name=external.name, status=ExternalStatus.UNREACHABLE)

        try:
            result.remote_hash = self.git.get_remote_ref(
                external.url, external.branch, self.timeout
            )
        except RemoteUnreachableError as e:
            result.error = str(e)
            logger.warning(f"[external] {external.name} unreachable: {e}")
            return result

        if result.remote_hash is None:
            result.error = f"refs/heads/{external.branch} not found"
            logger.warning(f"[external] {external.name}: {result.error}")
            return result

        clone = external.clone_path
        if clone is None or not (clone / ".git").is_dir():
            result.status = ExternalStatus.NO_LOCAL_CLONE
            return result

        result.local_hash = self.git.clone_head(clone)
        if result.local_hash == result.remote_hash:
            result.status = ExternalStatus.IN_SYNC
            return result

        result.status = ExternalStatus.DIVERGED
        if not mode.mutates:
            return result

        try:
            self.git.pull_rebase(clone, "origin", external.branch, self.pull_timeout)
        except GitCommandError as e:
            result.error = str(e)
            logger.error(f"[external] {external.name}: {e}")
            return result

        result.pulled = True
        result.local_hash = self.git.clone_head(clone)
        if result.local_hash == result.remote_hash:
            result.status = ExternalStatus.IN_SYNC
        logger.info(f"[external] {external.name}: pulled local clone at {clone}")
        return result
