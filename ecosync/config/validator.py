"""
Configuration Validator — Sanity checks behind `ecosync check-config`.

Nothing here is fatal to a sync run: the registry resolves overlaps with a
fixed precedence. The checks exist so an operator can see that e.g. the
primary remote is also listed as excluded before wondering why origin was
never pushed.

## Usage

    from ecosync.config.validator import ConfigValidator

    validator = ConfigValidator(config, remote_names=git.list_remotes())
    for issue in validator.validate_all():
        print(issue.level, issue.message)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .loader import SyncConfig

logger = logging.getLogger(__name__)

LEVEL_ERROR = "error"
LEVEL_WARNING = "warning"


@dataclass
class ConfigIssue:
    """One finding from the validator."""

    level: str
    field: str
    message: str

    def to_dict(self) -> Dict:
        return {"level": self.level, "field": self.field, "message": self.message}


class ConfigValidator:
    """Check a SyncConfig against itself and the repository's remotes."""

    def __init__(self, config: SyncConfig, remote_names: Optional[List[str]] = None):
        self.config = config
        self.remote_names = remote_names

    def validate_all(self) -> List[ConfigIssue]:
        issues: List[ConfigIssue] = []
        issues.extend(self._check_overlaps())
        issues.extend(self._check_externals())
        if self.remote_names is not None:
            issues.extend(self._check_known_remotes())
        return issues

    def has_errors(self) -> bool:
        return any(i.level == LEVEL_ERROR for i in self.validate_all())

    def _check_overlaps(self) -> List[ConfigIssue]:
        cfg = self.config
        issues = []

        if cfg.canonical_remote and cfg.canonical_remote == cfg.primary_remote:
            issues.append(ConfigIssue(
                LEVEL_ERROR, "canonical_remote",
                f"'{cfg.canonical_remote}' is both primary and canonical",
            ))

        for special in filter(None, (cfg.primary_remote, cfg.canonical_remote)):
            if special in cfg.excluded_remotes:
                issues.append(ConfigIssue(
                    LEVEL_WARNING, "excluded_remotes",
                    f"'{special}' is excluded and will never be pushed",
                ))
            if special in cfg.external_remotes:
                issues.append(ConfigIssue(
                    LEVEL_WARNING, "external_remotes",
                    f"'{special}' is marked external and will never be pushed",
                ))

        both = sorted(set(cfg.excluded_remotes) & set(cfg.external_remotes))
        for name in both:
            issues.append(ConfigIssue(
                LEVEL_WARNING, "external_remotes",
                f"'{name}' is listed as both excluded and external (excluded wins)",
            ))
        return issues

    def _check_externals(self) -> List[ConfigIssue]:
        issues = []
        seen = set()
        for ext in self.config.externals:
            if ext.name in seen:
                issues.append(ConfigIssue(
                    LEVEL_ERROR, "externals", f"duplicate external name '{ext.name}'",
                ))
            seen.add(ext.name)

            clone = ext.clone_path
            if clone is not None and not (clone / ".git").is_dir():
                issues.append(ConfigIssue(
                    LEVEL_WARNING, "externals",
                    f"{ext.name}: local clone {clone} not found (status only, no pull)",
                ))
        return issues

    def _check_known_remotes(self) -> List[ConfigIssue]:
        cfg = self.config
        known = set(self.remote_names or [])
        issues = []

        named = [("primary_remote", cfg.primary_remote)]
        if cfg.canonical_remote:
            named.append(("canonical_remote", cfg.canonical_remote))
        named += [("excluded_remotes", n) for n in cfg.excluded_remotes]
        named += [("external_remotes", n) for n in cfg.external_remotes]

        for field_name, name in named:
            if name not in known:
                issues.append(ConfigIssue(
                    LEVEL_WARNING, field_name,
                    f"'{name}' is not a configured git remote",
                ))
        return issues

    def log_status(self) -> None:
        for issue in self.validate_all():
            log = logger.error if issue.level == LEVEL_ERROR else logger.warning
            log(f"[config] {issue.field}: {issue.message}")
