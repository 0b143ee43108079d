"""
Config Loader — Build SyncConfig from defaults, YAML and environment.

Precedence, lowest first:
1. Built-in defaults
2. ecosync.yaml in the repository root (or an explicit --config path)
3. ECOSYNC_* environment variables
4. CLI options (applied by the caller via with_overrides)

## Example ecosync.yaml

    branch: main
    primary_remote: origin
    canonical_remote: everclaw-org
    excluded_remotes: [everclaw-fork]
    externals:
      - name: smartagent
        url: https://github.com/SmartAgentProtocol/smartagent.git
        local_clone: ~/.openclaw/workspace/smartagent

## Environment Variables

- ECOSYNC_BRANCH, ECOSYNC_PRIMARY_REMOTE, ECOSYNC_CANONICAL_REMOTE
- ECOSYNC_EXCLUDED_REMOTES, ECOSYNC_EXTERNAL_REMOTES (comma separated)
- ECOSYNC_PROBE_TIMEOUT, ECOSYNC_PUSH_TIMEOUT (seconds)
- ECOSYNC_MAX_WORKERS
- ECOSYNC_REPORT_PATH (relative paths resolve against the repo)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "ecosync.yaml"
DEFAULT_REPORT_PATH = "scripts/.last-sync.json"

# env var → config field
_ENV_SCALARS = {
    "ECOSYNC_BRANCH": "branch",
    "ECOSYNC_PRIMARY_REMOTE": "primary_remote",
    "ECOSYNC_CANONICAL_REMOTE": "canonical_remote",
    "ECOSYNC_PROBE_TIMEOUT": "probe_timeout",
    "ECOSYNC_PUSH_TIMEOUT": "push_timeout",
    "ECOSYNC_MAX_WORKERS": "max_workers",
    "ECOSYNC_REPORT_PATH": "report_path",
}
_ENV_LISTS = {
    "ECOSYNC_EXCLUDED_REMOTES": "excluded_remotes",
    "ECOSYNC_EXTERNAL_REMOTES": "external_remotes",
}


class ExternalRepo(BaseModel):
    """A repository outside the fleet, observed but never pushed to."""

    name: str
    url: str
    local_clone: Optional[str] = None
    branch: str = "main"

    @property
    def clone_path(self) -> Optional[Path]:
        if not self.local_clone:
            return None
        return Path(self.local_clone).expanduser()


class SyncConfig(BaseModel):
    """Everything a run needs besides the repository itself."""

    branch: str = "main"
    primary_remote: str = "origin"
    canonical_remote: Optional[str] = None
    excluded_remotes: List[str] = Field(default_factory=list)
    external_remotes: List[str] = Field(default_factory=list)
    externals: List[ExternalRepo] = Field(default_factory=list)

    probe_timeout: float = Field(default=10.0, gt=0)
    push_timeout: float = Field(default=60.0, gt=0)
    max_workers: int = Field(default=8, ge=1)
    report_path: str = DEFAULT_REPORT_PATH

    def resolve_report_path(self, repo: Path) -> Path:
        path = Path(self.report_path).expanduser()
        if not path.is_absolute():
            path = Path(repo) / path
        return path

    def with_overrides(self, **overrides: Any) -> "SyncConfig":
        """Return a copy with non-None overrides applied and re-validated."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return _validate(data, source="command line")


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping; an empty file yields {}."""
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a mapping at top level")
    return data


def _split_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for var, field_name in _ENV_SCALARS.items():
        value = environ.get(var)
        if value:
            overrides[field_name] = value
    for var, field_name in _ENV_LISTS.items():
        value = environ.get(var)
        if value is not None:
            overrides[field_name] = _split_list(value)
    return overrides


def _validate(data: Dict[str, Any], source: str) -> SyncConfig:
    try:
        return SyncConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration ({source}): {e}") from e


def load_config(
    repo: Path,
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SyncConfig:
    """
    Load configuration for a repository.

    Args:
        repo: Repository root; ecosync.yaml is looked up here
        config_path: Explicit config file (must exist if given)
        environ: Environment mapping (defaults to os.environ)

    Raises:
        ConfigurationError: If the file is unreadable or values are invalid
    """
    environ = os.environ if environ is None else environ
    data: Dict[str, Any] = {}

    if config_path is not None:
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")
        path: Optional[Path] = config_path
    else:
        candidate = Path(repo) / CONFIG_FILENAME
        path = candidate if candidate.exists() else None

    if path is not None:
        try:
            data.update(load_yaml(path))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
        logger.debug(f"Loaded config from {path}")

    data.update(_env_overrides(environ))
    return _validate(data, source=str(path) if path else "environment")
