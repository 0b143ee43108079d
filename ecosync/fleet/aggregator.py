"""
Report Aggregator — Collect per-remote outcomes into one SyncReport.

record() may be called from worker threads in any order; outcomes() and the
finalized report always list remotes in reporting order (category, then
name). The report file is overwritten on every run, never appended to.
"""

from __future__ import annotations

import json
import logging
import tempfile
import threading
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Dict, List, Optional

from ..models.outcome import OutcomeKind, SyncMode, SyncOutcome
from ..models.report import SyncReport
from .external import ExternalResult

logger = logging.getLogger(__name__)


class ExitStatus(IntEnum):
    """Process exit codes for automation."""
    ALL_SYNCED = 0
    SOME_FAILED = 1
    PRECONDITION_FAILED = 2
    REPORT_NOT_WRITTEN = 3


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class ReportAggregator:
    """Append-only, thread-safe accumulator for one run."""

    def __init__(
        self,
        commit: str,
        commit_short: str,
        commit_message: str = "",
        branch: str = "main",
        mode: SyncMode = SyncMode.LIVE,
    ):
        self.commit = commit
        self.commit_short = commit_short
        self.commit_message = commit_message
        self.branch = branch
        self.mode = mode

        self._lock = threading.Lock()
        self._outcomes: Dict[str, SyncOutcome] = {}
        self._externals: List[ExternalResult] = []
        self._report: Optional[SyncReport] = None

    def record(self, outcome: SyncOutcome) -> None:
        name = outcome.remote.name
        with self._lock:
            if self._report is not None:
                raise RuntimeError("Cannot record after finalize()")
            if name in self._outcomes:
                raise ValueError(f"Outcome for remote '{name}' already recorded")
            self._outcomes[name] = outcome
        logger.debug(f"[report] {name}: {outcome.kind.value}",
                     extra={"remote": name, "outcome": outcome.kind.value})

    def record_external(self, result: ExternalResult) -> None:
        with self._lock:
            if self._report is not None:
                raise RuntimeError("Cannot record after finalize()")
            self._externals.append(result)

    def outcomes(self) -> List[SyncOutcome]:
        with self._lock:
            items = list(self._outcomes.values())
        return sorted(items, key=lambda o: o.remote.sort_key)

    def externals(self) -> List[ExternalResult]:
        with self._lock:
            return list(self._externals)

    def finalize(self) -> SyncReport:
        """Build the report. Later calls return the same report."""
        with self._lock:
            if self._report is not None:
                return self._report

        outcomes = self.outcomes()
        kinds = [o.kind for o in outcomes]
        report = SyncReport(
            timestamp=utc_timestamp(),
            commit=self.commit,
            commit_short=self.commit_short,
            commit_message=self.commit_message,
            branch=self.branch,
            mode=self.mode.value,
            total=len(outcomes),
            pushed=sum(1 for k in kinds if k.is_push),
            in_sync=kinds.count(OutcomeKind.ALREADY_IN_SYNC),
            failed=sum(1 for k in kinds if k.is_failure),
            excluded=kinds.count(OutcomeKind.EXCLUDED),
            failed_remotes=[o.remote.name for o in outcomes if o.is_failure],
            external=[r.to_report() for r in self.externals()],
        )

        with self._lock:
            if self._report is None:
                self._report = report
            return self._report


def persist(report: SyncReport, path: Path) -> None:
    """
    Write the report, replacing any previous one.

    Writes to a uniquely named temp file beside the target and renames it, so
    readers never see a partial file and concurrent runs never share a temp
    file. Raises OSError if the report cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    f = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(f.name)

    try:
        with f:
            json.dump(report.to_json_dict(), f, indent=2)
            f.write("\n")
        temp_path.replace(path)
    finally:
        # no-op after a successful replace
        temp_path.unlink(missing_ok=True)

    logger.info(f"[report] Saved sync status → {path}")


def load_report(path: Path) -> SyncReport:
    """Read a persisted report. Raises FileNotFoundError if missing."""
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    return SyncReport.model_validate(data)


def exit_status(report: SyncReport) -> ExitStatus:
    return ExitStatus.SOME_FAILED if report.failed > 0 else ExitStatus.ALL_SYNCED
