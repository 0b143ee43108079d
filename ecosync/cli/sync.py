"""
CLI sync command — push HEAD's branch to every managed remote.

Usage:
    ecosync sync              # Push to all remotes
    ecosync sync --dry-run    # Show what would be pushed, don't push
    ecosync sync --verify     # Only verify sync status, no push
    ecosync sync --force      # Force push (use after history rewrite)

Exit codes:
    0 — All remotes in sync (or pushed)
    1 — One or more remotes failed
    2 — Precondition failure (not a repo, no remotes, bad config)
    3 — All remotes in sync but the status file could not be written
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click

from ..errors import PreconditionError
from ..fleet.aggregator import ExitStatus
from ..fleet.runner import FleetSync
from ..models.outcome import SyncMode
from . import context_config, render


@click.command("sync")
@click.option("--dry-run", is_flag=True, help="Show what would be pushed, don't push")
@click.option("--verify", is_flag=True, help="Only verify sync status, never push")
@click.option("--force", is_flag=True, help="Force push (only after a history rewrite)")
@click.option("--report", "report_file", type=click.Path(path_type=Path),
              help="Where to write the status file")
@click.option("--workers", type=int, help="Max remotes processed concurrently")
@click.option("--timeout", type=float, help="Per-remote probe timeout in seconds")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.pass_context
def sync(
    ctx: click.Context,
    dry_run: bool,
    verify: bool,
    force: bool,
    report_file: Optional[Path],
    workers: Optional[int],
    timeout: Optional[float],
    as_json: bool,
) -> None:
    """Sync the branch to all flavor remotes and verify convergence."""
    root: Path = ctx.obj["root"]
    mode = SyncMode.from_flags(dry_run=dry_run, verify=verify)

    try:
        config = context_config(ctx).with_overrides(
            max_workers=workers,
            probe_timeout=timeout,
        )
        fleet = FleetSync(root, config)
        report_path = report_file or config.resolve_report_path(root)
        run = fleet.run(mode, force=force, report_path=report_path)
    except PreconditionError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        ctx.exit(ExitStatus.PRECONDITION_FAILED)
        return

    if as_json:
        data = run.report.to_json_dict()
        data["remotes"] = [o.to_dict() for o in run.outcomes]
        click.echo(json.dumps(data, indent=2))
    else:
        render.echo_header(run.report, len(run.outcomes))
        render.echo_outcomes(run.outcomes)
        render.echo_summary(run.report)
        click.echo()
        render.echo_externals(run.externals)

    if run.report_error:
        click.secho(f"❌ {run.report_error}", fg="red", err=True)

    ctx.exit(run.exit_status)
