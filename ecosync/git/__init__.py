"""
Git — Capability interface over the git executable.
"""

from .backend import GitBackend, SubprocessGit

__all__ = ["GitBackend", "SubprocessGit"]
