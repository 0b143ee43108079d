"""
Errors — Exception taxonomy for ecosync.

Repository-level problems (PreconditionError and subclasses) abort a run
before any remote is touched and map to exit code 2. Everything deriving
from RemoteError is per-remote: the runner catches it, records an outcome,
and moves on to the next remote.
"""

from __future__ import annotations

from typing import Optional


class EcosyncError(Exception):
    """Base class for all ecosync errors."""


class PreconditionError(EcosyncError):
    """The run cannot start at all."""

    exit_code = 2


class NotARepositoryError(PreconditionError):
    """Raised when the working directory is not inside a git work tree."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not a git repository: {path}")


class NoRemotesConfiguredError(PreconditionError):
    """Raised when the repository has no remotes to sync."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"No remotes configured in {path}")


class ConfigurationError(PreconditionError):
    """Raised when configuration is missing or invalid."""


class GitCommandError(EcosyncError):
    """A git subprocess returned a failure."""

    def __init__(self, message: str, stderr: Optional[str] = None):
        self.stderr = stderr
        super().__init__(message)


class RemoteError(GitCommandError):
    """A failure scoped to a single remote."""

    def __init__(self, remote: str, message: str, stderr: Optional[str] = None):
        self.remote = remote
        super().__init__(f"{remote}: {message}", stderr=stderr)


class RemoteUnreachableError(RemoteError):
    """The remote could not be contacted."""


class RemoteTimeoutError(RemoteUnreachableError):
    """The remote did not answer within the configured timeout."""

    def __init__(self, remote: str, timeout: float):
        self.timeout = timeout
        super().__init__(remote, f"timed out after {timeout:g}s")


class PushRejectedError(RemoteError):
    """The remote refused the push (e.g. non-fast-forward without --force)."""


class DivergedRemoteError(RemoteError):
    """The remote points at a different commit than local."""
