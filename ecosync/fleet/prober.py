"""
State Prober — Read a remote's branch head without touching it.
"""

from __future__ import annotations

import logging

from ..errors import RemoteTimeoutError, RemoteUnreachableError
from ..git.backend import GitBackend
from ..models.remote import ProbeStatus, ReferenceState, Remote

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 10.0


class StateProber:
    """Look up refs/heads/<branch> on each remote with a bounded timeout."""

    def __init__(self, git: GitBackend, branch: str = "main",
                 timeout: float = DEFAULT_PROBE_TIMEOUT):
        self.git = git
        self.branch = branch
        self.timeout = timeout

    def probe(self, remote: Remote, local_hash: str) -> ReferenceState:
        state = ReferenceState(remote_name=remote.name, local_hash=local_hash)
        try:
            state.remote_hash = self.git.get_remote_ref(
                remote.name, self.branch, self.timeout
            )
        except RemoteTimeoutError as e:
            state.probe_status = ProbeStatus.TIMEOUT
            state.detail = str(e)
            logger.warning(f"[probe] {e}", extra={"remote": remote.name})
            return state
        except RemoteUnreachableError as e:
            state.probe_status = ProbeStatus.UNREACHABLE
            state.detail = str(e)
            logger.warning(f"[probe] {e}", extra={"remote": remote.name})
            return state

        if state.remote_hash is None:
            state.probe_status = ProbeStatus.ABSENT
            state.detail = f"refs/heads/{self.branch} does not exist"
            logger.info(f"[probe] {remote.name}: no {self.branch} branch yet",
                        extra={"remote": remote.name})
        else:
            logger.debug(f"[probe] {remote.name}: {state.remote_short}",
                         extra={"remote": remote.name})
        return state
