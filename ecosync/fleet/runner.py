"""
Fleet Runner — One sync run, end to end.

    registry → prober → executor → aggregator → report file

Preconditions (inside a work tree, at least one remote, a resolvable HEAD)
are checked before any network call and raise PreconditionError. After
that, every per-remote failure is contained in that remote's outcome and the
run always finalizes. A report file that cannot be written is logged and
carried on the SyncRun instead of raising.

## Usage

    from ecosync.fleet.runner import FleetSync

    fleet = FleetSync(repo, config)
    run = fleet.run(SyncMode.VERIFY_ONLY)
    sys.exit(run.exit_status)
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config.loader import ExternalRepo, SyncConfig
from ..errors import (
    GitCommandError,
    NoRemotesConfiguredError,
    NotARepositoryError,
    PreconditionError,
)
from ..git.backend import GitBackend, SubprocessGit
from ..models.outcome import OutcomeKind, SyncMode, SyncOutcome
from ..models.remote import Remote
from ..models.report import SyncReport
from .aggregator import ExitStatus, ReportAggregator, exit_status, persist
from .executor import SyncExecutor
from .external import ExternalReferenceChecker, ExternalResult, ExternalStatus
from .prober import StateProber
from .registry import RemoteRegistry

logger = logging.getLogger(__name__)


@dataclass
class SyncRun:
    """Everything a caller needs after a run."""

    report: SyncReport
    outcomes: List[SyncOutcome] = field(default_factory=list)
    externals: List[ExternalResult] = field(default_factory=list)
    report_path: Optional[Path] = None
    report_error: Optional[str] = None

    @property
    def exit_status(self) -> ExitStatus:
        status = exit_status(self.report)
        if status == ExitStatus.ALL_SYNCED and self.report_error:
            return ExitStatus.REPORT_NOT_WRITTEN
        return status


class FleetSync:
    """Wire the components together for one repository."""

    def __init__(
        self,
        repo: Path,
        config: Optional[SyncConfig] = None,
        git: Optional[GitBackend] = None,
    ):
        self.repo = Path(repo)
        self.config = config or SyncConfig()
        self.git = git or SubprocessGit(self.repo)

        self.registry = RemoteRegistry.from_config(self.config)
        self.prober = StateProber(self.git, self.config.branch, self.config.probe_timeout)
        self.executor = SyncExecutor(self.git, self.config.branch, self.config.push_timeout)
        self.checker = ExternalReferenceChecker(
            self.git,
            timeout=self.config.probe_timeout,
            pull_timeout=self.config.push_timeout,
        )

    # ─── Preconditions ──────────────────────────────────────

    def remotes(self) -> List[Remote]:
        """Classified remotes. Raises PreconditionError."""
        if not self.git.is_repository():
            raise NotARepositoryError(str(self.repo))
        try:
            names = self.git.list_remotes()
        except GitCommandError as e:
            raise PreconditionError(f"Cannot list remotes in {self.repo}: {e}") from e
        if not names:
            raise NoRemotesConfiguredError(str(self.repo))
        return self.registry.build(names)

    def _aggregator(self, mode: SyncMode) -> ReportAggregator:
        try:
            return ReportAggregator(
                commit=self.git.head(),
                commit_short=self.git.short_head(),
                commit_message=self.git.head_subject(),
                branch=self.config.branch,
                mode=mode,
            )
        except GitCommandError as e:
            raise PreconditionError(f"Cannot resolve HEAD in {self.repo}: {e}") from e

    # ─── Run ────────────────────────────────────────────────

    def run(
        self,
        mode: SyncMode = SyncMode.LIVE,
        force: bool = False,
        report_path: Optional[Path] = None,
    ) -> SyncRun:
        """
        Sync (or verify) every remote and persist the report.

        Args:
            mode: live, dry-run or verify
            force: force-push in live mode; ignored otherwise
            report_path: where to write the report (None = don't persist)

        Raises:
            PreconditionError: before any remote work, if the run can't start
        """
        remotes = self.remotes()
        aggregator = self._aggregator(mode)

        if force and not mode.mutates:
            logger.warning(f"--force has no effect in {mode.value} mode")
            force = False

        logger.info(
            f"Syncing {aggregator.commit_short} on {self.config.branch} "
            f"to {len(remotes)} remote(s)",
            extra={"mode": mode.value},
        )

        self._fan_out(remotes, aggregator, mode, force)
        for external in self.config.externals:
            aggregator.record_external(self._check_external(external, mode))

        report = aggregator.finalize()
        report_error = None
        if report_path is not None:
            try:
                persist(report, report_path)
            except OSError as e:
                logger.error(f"[report] Could not write {report_path}: {e}")
                report_error = f"Could not write report to {report_path}: {e}"

        return SyncRun(
            report=report,
            outcomes=aggregator.outcomes(),
            externals=aggregator.externals(),
            report_path=report_path,
            report_error=report_error,
        )

    def _fan_out(
        self,
        remotes: List[Remote],
        aggregator: ReportAggregator,
        mode: SyncMode,
        force: bool,
    ) -> None:
        local_hash = aggregator.commit
        workers = min(self.config.max_workers, len(remotes))

        if workers <= 1:
            for remote in remotes:
                aggregator.record(self._process(remote, local_hash, mode, force))
            return

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ecosync") as pool:
            futures = [
                pool.submit(self._process, remote, local_hash, mode, force)
                for remote in remotes
            ]
            for future in as_completed(futures):
                aggregator.record(future.result())

    def _process(
        self,
        remote: Remote,
        local_hash: str,
        mode: SyncMode,
        force: bool,
    ) -> SyncOutcome:
        """Probe and act on one remote. Never raises."""
        try:
            state = self.prober.probe(remote, local_hash)
            return self.executor.execute(remote, state, mode, force=force)
        except Exception as e:
            logger.exception(f"Unexpected error syncing {remote.name}",
                             extra={"remote": remote.name})
            return SyncOutcome(
                remote=remote,
                kind=OutcomeKind.EXCLUDED if not remote.category.managed
                else OutcomeKind.UNREACHABLE,
                local_hash=local_hash,
                error=str(e),
            )

    def _check_external(self, external: ExternalRepo, mode: SyncMode) -> ExternalResult:
        try:
            return self.checker.check(external, mode)
        except Exception as e:
            logger.exception(f"Unexpected error checking {external.name}")
            return ExternalResult(
                name=external.name, status=ExternalStatus.UNREACHABLE, error=str(e)
            )
