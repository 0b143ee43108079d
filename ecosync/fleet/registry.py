"""
Remote Registry — Classify every configured remote into one category.

Special names come from config; anything not named there is a flavor repo.
When a name appears in more than one list the most restrictive category
wins: excluded > external > primary > canonical.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..config.loader import SyncConfig
from ..models.remote import Remote, RemoteCategory


class RemoteRegistry:
    """Pure name → category mapping for one run."""

    def __init__(
        self,
        primary: str = "origin",
        canonical: Optional[str] = None,
        excluded: Iterable[str] = (),
        external: Iterable[str] = (),
    ):
        self.primary = primary
        self.canonical = canonical
        self.excluded = frozenset(excluded)
        self.external = frozenset(external)

    @classmethod
    def from_config(cls, config: SyncConfig) -> "RemoteRegistry":
        return cls(
            primary=config.primary_remote,
            canonical=config.canonical_remote,
            excluded=config.excluded_remotes,
            external=config.external_remotes,
        )

    def classify(self, name: str) -> RemoteCategory:
        if name in self.excluded:
            return RemoteCategory.EXCLUDED
        if name in self.external:
            return RemoteCategory.EXTERNAL
        if name == self.primary:
            return RemoteCategory.PRIMARY
        if self.canonical and name == self.canonical:
            return RemoteCategory.CANONICAL
        return RemoteCategory.FLAVOR

    def build(self, names: Iterable[str]) -> List[Remote]:
        """Remotes in reporting order (category, then name), de-duplicated."""
        remotes = {name: Remote(name, self.classify(name)) for name in names}
        return sorted(remotes.values(), key=lambda r: r.sort_key)
