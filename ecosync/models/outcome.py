"""
Outcome Models — What happened to each remote in a run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .remote import Remote


class SyncMode(str, Enum):
    """Execution mode for a run."""
    LIVE = "live"
    DRY_RUN = "dry-run"
    VERIFY_ONLY = "verify"

    @property
    def mutates(self) -> bool:
        return self == SyncMode.LIVE

    @classmethod
    def from_flags(cls, dry_run: bool = False, verify: bool = False) -> "SyncMode":
        """Resolve composable CLI flags. --verify wins over --dry-run."""
        if verify:
            return cls.VERIFY_ONLY
        if dry_run:
            return cls.DRY_RUN
        return cls.LIVE


class OutcomeKind(str, Enum):
    """Exactly one of these per remote per run."""
    ALREADY_IN_SYNC = "already_in_sync"
    WOULD_PUSH = "would_push"
    PUSHED = "pushed"
    DIVERGED = "diverged"
    PUSH_FAILED = "push_failed"
    UNREACHABLE = "unreachable"
    EXCLUDED = "excluded"

    @property
    def is_failure(self) -> bool:
        return self in _FAILURES

    @property
    def is_push(self) -> bool:
        """Counted under "pushed" in the report (simulated pushes included)."""
        return self in (OutcomeKind.PUSHED, OutcomeKind.WOULD_PUSH)


_FAILURES = frozenset({
    OutcomeKind.DIVERGED,
    OutcomeKind.PUSH_FAILED,
    OutcomeKind.UNREACHABLE,
})


@dataclass
class SyncOutcome:
    """Outcome of processing one remote."""

    remote: Remote
    kind: OutcomeKind
    local_hash: str
    remote_hash: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_failure(self) -> bool:
        return self.kind.is_failure

    @property
    def local_short(self) -> str:
        return self.local_hash[:7]

    @property
    def remote_short(self) -> Optional[str]:
        return self.remote_hash[:7] if self.remote_hash else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "remote": self.remote.name,
            "category": self.remote.category.value,
            "outcome": self.kind.value,
            "localHash": self.local_hash,
            "remoteHash": self.remote_hash,
            "error": self.error,
        }
