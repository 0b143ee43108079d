"""
Console rendering — Human-readable run output.

Purely observational: automation should use the exit code or the report
file, never parse this.
"""

from __future__ import annotations

from typing import Callable, Dict, List

import click

from ..fleet.external import ExternalResult, ExternalStatus
from ..models.outcome import OutcomeKind, SyncOutcome
from ..models.remote import RemoteCategory
from ..models.report import SyncReport

RULE = "━" * 33

_HEADERS: Dict[RemoteCategory, Callable[[int], str]] = {
    RemoteCategory.PRIMARY: lambda n: "📦 Origin",
    RemoteCategory.CANONICAL: lambda n: "🏢 Canonical",
    RemoteCategory.FLAVOR: lambda n: f"🌈 Flavor repos ({n})",
    RemoteCategory.EXCLUDED: lambda n: f"⏭️  Excluded ({n})",
    RemoteCategory.EXTERNAL: lambda n: f"🔗 External remotes ({n})",
}


def outcome_line(outcome: SyncOutcome) -> str:
    name = f"{outcome.remote.name:<25}"
    kind = outcome.kind

    if kind == OutcomeKind.ALREADY_IN_SYNC:
        return f"  ⏭️  {name} already in sync"
    if kind == OutcomeKind.EXCLUDED:
        return f"  ⏭️  {name} skipped ({outcome.remote.category.value})"
    if kind == OutcomeKind.WOULD_PUSH:
        return f"  🔍 {name} would push {outcome.local_short} → {outcome.remote_short or 'empty'}"
    if kind == OutcomeKind.PUSHED:
        return f"  ✅ {name} pushed"
    if kind == OutcomeKind.DIVERGED:
        return f"  ❌ {name} out of sync (remote: {outcome.remote_short or 'empty'})"
    if kind == OutcomeKind.UNREACHABLE:
        return f"  ❌ {name} unreachable"
    return f"  ❌ {name} FAILED"


def external_lines(result: ExternalResult) -> List[str]:
    name = f"{result.name:<25}"
    remote_short = (result.remote_hash or "")[:7]
    local_short = (result.local_hash or "")[:7]

    if result.status == ExternalStatus.UNREACHABLE:
        return [f"  ❌ {name} unreachable"]
    if result.status == ExternalStatus.NO_LOCAL_CLONE:
        return [f"  ℹ️  {name} remote HEAD: {remote_short} (no local clone)"]
    if result.status == ExternalStatus.IN_SYNC and not result.pulled:
        return [f"  ⏭️  {name} in sync ({remote_short})"]

    if result.pulled:
        return [f"  ✅ {name} synced ({local_short})"]
    lines = [f"  ⚠️  {name} local ({local_short}) differs from remote ({remote_short})"]
    if result.error:
        lines.append(f"  ❌ {name} pull failed: {result.error}")
    return lines


def echo_header(report: SyncReport, remote_count: int) -> None:
    click.echo("🔄 Ecosystem Sync")
    click.echo(f"   Branch: {report.branch}")
    click.echo(f"   Commit: {report.commit_short} — {report.commit_message}")
    click.echo(f"   Remotes: {remote_count}")
    if report.mode != "live":
        click.echo(f"   Mode: {report.mode}")
    click.echo()


def echo_outcomes(outcomes: List[SyncOutcome]) -> None:
    """Outcomes grouped under one header per category, in reporting order."""
    groups: Dict[RemoteCategory, List[SyncOutcome]] = {}
    for outcome in outcomes:
        groups.setdefault(outcome.remote.category, []).append(outcome)

    for category, items in groups.items():
        click.echo(_HEADERS[category](len(items)))
        for outcome in items:
            click.echo(outcome_line(outcome))
        click.echo()


def echo_externals(results: List[ExternalResult]) -> None:
    if not results:
        return
    click.echo("📱 External references")
    for result in results:
        for line in external_lines(result):
            click.echo(line)
    click.echo()


def echo_summary(report: SyncReport) -> None:
    click.echo(RULE)
    click.echo("📊 Sync Summary")
    click.echo(f"   Total remotes: {report.total}")
    click.echo(f"   ✅ Pushed:     {report.pushed}")
    click.echo(f"   ⏭️  In sync:    {report.in_sync}")
    if report.excluded:
        click.echo(f"   ⏭️  Excluded:   {report.excluded}")
    click.echo(f"   ❌ Failed:     {report.failed}")

    if report.failed_remotes:
        click.echo()
        click.echo("   Failed remotes:")
        for name in report.failed_remotes:
            click.echo(f"   - {name}")

    click.echo(RULE)
