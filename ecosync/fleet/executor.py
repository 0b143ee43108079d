"""
Sync Executor — Decide and perform the action for one remote.

Decision order for a probed remote:

1. remote hash == local hash        → already in sync (any mode, any category)
2. excluded / external remote       → excluded (never pushed, never a failure)
3. probe unreachable or timed out   → unreachable (failure)
4. verify mode                      → diverged (failure)
5. dry-run mode                     → would push (success, nothing mutated)
6. live mode                        → push; rejected → push failed (failure)

A remote that answered but has no branch yet falls through to 4-6, so a
live run creates the branch with a plain push.

Force is opt-in per call and only honoured in live mode. A rejected push is
reported, never retried, and never escalated to a force push: recovering
from a history rewrite requires an explicit re-run with --force.
"""

from __future__ import annotations

import logging
import threading

from ..errors import DivergedRemoteError, GitCommandError
from ..git.backend import GitBackend
from ..models.outcome import OutcomeKind, SyncMode, SyncOutcome
from ..models.remote import ReferenceState, Remote

logger = logging.getLogger(__name__)

DEFAULT_PUSH_TIMEOUT = 60.0


class SyncExecutor:
    """
    Turn a ReferenceState into a SyncOutcome for one branch.

    Pushes for the branch are serialized through a lock so concurrent
    workers never race on the local repository's remote-tracking refs.
    """

    def __init__(self, git: GitBackend, branch: str = "main",
                 push_timeout: float = DEFAULT_PUSH_TIMEOUT):
        self.git = git
        self.branch = branch
        self.push_timeout = push_timeout
        self._push_lock = threading.Lock()

    def execute(
        self,
        remote: Remote,
        state: ReferenceState,
        mode: SyncMode,
        force: bool = False,
    ) -> SyncOutcome:
        outcome = SyncOutcome(
            remote=remote,
            kind=OutcomeKind.ALREADY_IN_SYNC,
            local_hash=state.local_hash,
            remote_hash=state.remote_hash,
        )

        if state.in_sync:
            return outcome

        if not remote.category.managed:
            outcome.kind = OutcomeKind.EXCLUDED
            return outcome

        if not state.reachable:
            outcome.kind = OutcomeKind.UNREACHABLE
            outcome.error = state.detail
            return outcome

        if mode == SyncMode.VERIFY_ONLY:
            outcome.kind = OutcomeKind.DIVERGED
            outcome.error = str(DivergedRemoteError(
                remote.name, f"remote at {state.remote_short or 'empty'}"
            ))
            return outcome

        if mode == SyncMode.DRY_RUN:
            outcome.kind = OutcomeKind.WOULD_PUSH
            return outcome

        return self._push(outcome, force)

    def _push(self, outcome: SyncOutcome, force: bool) -> SyncOutcome:
        name = outcome.remote.name
        with self._push_lock:
            logger.info(
                f"[push] {name}/{self.branch}{' (force)' if force else ''}",
                extra={"remote": name, "mode": SyncMode.LIVE.value},
            )
            try:
                if force:
                    self.git.force_push(name, self.branch, self.push_timeout)
                else:
                    self.git.push(name, self.branch, self.push_timeout)
            except GitCommandError as e:
                logger.error(f"[push] {e}", extra={"remote": name})
                outcome.kind = OutcomeKind.PUSH_FAILED
                outcome.error = str(e)
                return outcome

        outcome.kind = OutcomeKind.PUSHED
        outcome.remote_hash = outcome.local_hash
        return outcome
