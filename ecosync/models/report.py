"""
Report Models — Pydantic schema for the persisted sync status file.

The report (scripts/.last-sync.json by default) is what cron jobs and
shift executors read to decide follow-up action without re-running the
sync. Keys are camelCase on disk; attributes are snake_case in Python.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExternalReport(BaseModel):
    """Informational status of one externally-owned repository."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    status: str
    remote_hash: Optional[str] = Field(default=None, alias="remoteHash")
    local_hash: Optional[str] = Field(default=None, alias="localHash")
    pulled: bool = False
    error: Optional[str] = None


class SyncReport(BaseModel):
    """Aggregate result of one run."""

    model_config = ConfigDict(populate_by_name=True)

    timestamp: str
    commit: str
    commit_short: str = Field(alias="commitShort")
    commit_message: str = Field(default="", alias="commitMessage")
    branch: str
    mode: str = "live"
    total: int = 0
    pushed: int = 0
    in_sync: int = Field(default=0, alias="inSync")
    failed: int = 0
    excluded: int = 0
    failed_remotes: List[str] = Field(default_factory=list, alias="failedRemotes")
    external: List[ExternalReport] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def to_json_dict(self) -> dict:
        """Dump with on-disk (camelCase) keys."""
        return self.model_dump(by_alias=True)
