"""
Remote Models — Remotes, their categories, and probed reference state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RemoteCategory(str, Enum):
    """How a remote takes part in the fan-out."""
    PRIMARY = "primary"       # origin, pushed first
    CANONICAL = "canonical"   # org-level canonical mirror
    FLAVOR = "flavor"         # derived repos, the default
    EXCLUDED = "excluded"     # configured but deliberately skipped
    EXTERNAL = "external"     # referenced, owned elsewhere, never pushed

    @property
    def rank(self) -> int:
        return _CATEGORY_ORDER.index(self)

    @property
    def managed(self) -> bool:
        """Whether ecosync is allowed to push to remotes of this category."""
        return self not in (RemoteCategory.EXCLUDED, RemoteCategory.EXTERNAL)


_CATEGORY_ORDER = [
    RemoteCategory.PRIMARY,
    RemoteCategory.CANONICAL,
    RemoteCategory.FLAVOR,
    RemoteCategory.EXCLUDED,
    RemoteCategory.EXTERNAL,
]


@dataclass(frozen=True)
class Remote:
    """A named git remote and its category for this run."""

    name: str
    category: RemoteCategory = RemoteCategory.FLAVOR

    @property
    def sort_key(self):
        return (self.category.rank, self.name)


class ProbeStatus(str, Enum):
    """Result of a remote reference lookup."""
    PRESENT = "present"
    ABSENT = "absent"             # remote answered, branch does not exist
    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"


@dataclass
class ReferenceState:
    """Local vs remote hash for one remote, produced fresh every run."""

    remote_name: str
    local_hash: str
    remote_hash: Optional[str] = None
    probe_status: ProbeStatus = ProbeStatus.PRESENT
    detail: Optional[str] = None

    @property
    def reachable(self) -> bool:
        return self.probe_status in (ProbeStatus.PRESENT, ProbeStatus.ABSENT)

    @property
    def in_sync(self) -> bool:
        return self.remote_hash is not None and self.remote_hash == self.local_hash

    @property
    def remote_short(self) -> Optional[str]:
        return self.remote_hash[:7] if self.remote_hash else None
