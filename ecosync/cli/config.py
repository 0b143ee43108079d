"""
CLI config command — validate ecosync configuration.

Usage:
    ecosync check-config
"""

from __future__ import annotations

from pathlib import Path

import click

from ..config.validator import LEVEL_ERROR, ConfigValidator
from ..errors import GitCommandError, PreconditionError
from ..fleet.aggregator import ExitStatus
from ..git.backend import SubprocessGit
from . import context_config


@click.command("check-config")
@click.pass_context
def check_config(ctx: click.Context) -> None:
    """Check remote categories, timeouts and external clones."""
    root: Path = ctx.obj["root"]

    try:
        config = context_config(ctx)
    except PreconditionError as e:
        click.secho(f"✗ {e}", fg="red")
        ctx.exit(ExitStatus.PRECONDITION_FAILED)
        return

    git = SubprocessGit(root)
    remote_names = None
    if git.is_repository():
        try:
            remote_names = git.list_remotes()
        except GitCommandError:
            remote_names = None

    click.echo("\n📋 Sync Configuration\n")
    click.echo(f"  Branch:         {config.branch}")
    click.echo(f"  Primary:        {config.primary_remote}")
    click.echo(f"  Canonical:      {config.canonical_remote or '-'}")
    click.echo(f"  Excluded:       {', '.join(config.excluded_remotes) or '-'}")
    click.echo(f"  External:       {', '.join(config.external_remotes) or '-'}")
    click.echo(f"  Externals:      {', '.join(e.name for e in config.externals) or '-'}")
    click.echo(f"  Probe timeout:  {config.probe_timeout:g}s")
    click.echo(f"  Push timeout:   {config.push_timeout:g}s")
    click.echo(f"  Workers:        {config.max_workers}")
    click.echo(f"  Report:         {config.resolve_report_path(root)}")
    click.echo()

    issues = ConfigValidator(config, remote_names).validate_all()
    if not issues:
        click.secho("  ✓ No issues found", fg="green")
        return

    for issue in issues:
        color = "red" if issue.level == LEVEL_ERROR else "yellow"
        click.secho(f"  ✗ {issue.field}", fg=color, nl=False)
        click.echo(f" — {issue.message}")

    if any(i.level == LEVEL_ERROR for i in issues):
        ctx.exit(ExitStatus.PRECONDITION_FAILED)
