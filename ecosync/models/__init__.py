"""
Models — Value types shared by the registry, prober, executor and report.
"""

from .outcome import OutcomeKind, SyncMode, SyncOutcome
from .remote import ProbeStatus, ReferenceState, Remote, RemoteCategory
from .report import ExternalReport, SyncReport

__all__ = [
    "ExternalReport",
    "OutcomeKind",
    "ProbeStatus",
    "ReferenceState",
    "Remote",
    "RemoteCategory",
    "SyncMode",
    "SyncOutcome",
    "SyncReport",
]
