"""
CLI status commands — inspect the last report and the remote categories.

Usage:
    ecosync status [--report PATH] [--json]
    ecosync remotes [--json]
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from ..errors import GitCommandError, PreconditionError
from ..fleet.aggregator import ExitStatus, exit_status, load_report
from ..fleet.registry import RemoteRegistry
from ..git.backend import SubprocessGit
from . import context_config, render


@click.command("status")
@click.option("--report", "report_file", type=click.Path(path_type=Path),
              help="Status file to read")
@click.option("--json", "as_json", is_flag=True, help="Output raw JSON")
@click.pass_context
def status(ctx: click.Context, report_file: Optional[Path], as_json: bool) -> None:
    """Show the result of the last sync run without re-running it."""
    root: Path = ctx.obj["root"]

    try:
        path = report_file or context_config(ctx).resolve_report_path(root)
    except PreconditionError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        ctx.exit(ExitStatus.PRECONDITION_FAILED)
        return

    try:
        report = load_report(path)
    except FileNotFoundError:
        click.secho(f"No sync report at {path}. Run `ecosync sync` first.", fg="yellow", err=True)
        ctx.exit(ExitStatus.PRECONDITION_FAILED)
        return
    except (json.JSONDecodeError, ValidationError) as e:
        click.secho(f"❌ Unreadable sync report {path}: {e}", fg="red", err=True)
        ctx.exit(ExitStatus.PRECONDITION_FAILED)
        return

    if as_json:
        click.echo(json.dumps(report.to_json_dict(), indent=2))
    else:
        click.echo(f"Last sync:    {report.timestamp} ({report.mode})")
        click.echo(f"Commit:       {report.commit_short} — {report.commit_message}")
        click.echo(f"Branch:       {report.branch}")
        click.echo()
        render.echo_summary(report)
        for ext in report.external:
            click.echo(f"   {ext.name}: {ext.status}")

    ctx.exit(exit_status(report))


@click.command("remotes")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def remotes(ctx: click.Context, as_json: bool) -> None:
    """List configured remotes and how each one is classified."""
    root: Path = ctx.obj["root"]

    try:
        config = context_config(ctx)
        git = SubprocessGit(root)
        if not git.is_repository():
            click.secho(f"❌ Not a git repository: {root}", fg="red", err=True)
            ctx.exit(ExitStatus.PRECONDITION_FAILED)
            return
        classified = RemoteRegistry.from_config(config).build(git.list_remotes())
    except (PreconditionError, GitCommandError) as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        ctx.exit(ExitStatus.PRECONDITION_FAILED)
        return

    if as_json:
        click.echo(json.dumps(
            [{"name": r.name, "category": r.category.value} for r in classified],
            indent=2,
        ))
        return

    if not classified:
        click.echo("No remotes configured.")
        return
    for remote in classified:
        click.echo(f"  {remote.name:<25} {remote.category.value}")
