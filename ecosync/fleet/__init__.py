"""
Fleet — Registry, prober, executor, external checker and report aggregator.
"""

from .aggregator import ExitStatus, ReportAggregator, exit_status, load_report, persist
from .executor import SyncExecutor
from .external import ExternalReferenceChecker, ExternalResult, ExternalStatus
from .prober import StateProber
from .registry import RemoteRegistry
from .runner import FleetSync, SyncRun

__all__ = [
    "ExitStatus",
    "ExternalReferenceChecker",
    "ExternalResult",
    "ExternalStatus",
    "FleetSync",
    "RemoteRegistry",
    "ReportAggregator",
    "StateProber",
    "SyncExecutor",
    "SyncRun",
    "exit_status",
    "load_report",
    "persist",
]
