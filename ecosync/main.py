"""
ecosync — CLI Entry Point

Usage:
    ecosync sync [--dry-run] [--verify] [--force]
    ecosync status
    ecosync remotes
    ecosync check-config
"""

from __future__ import annotations

# Load .env FIRST, before anything reads ECOSYNC_* or LOG_* variables
from pathlib import Path
from dotenv import load_dotenv

_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

from typing import Optional

import click

from . import __version__
from .cli.config import check_config
from .cli.status import remotes, status
from .cli.sync import sync
from .logging_config import setup_logging


@click.group()
@click.option("--repo", default=".", type=click.Path(file_okay=False, path_type=Path),
              help="Repository to sync (default: current directory)")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              help="Config file (default: <repo>/ecosync.yaml if present)")
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
@click.option("--log-format", type=click.Choice(["text", "json"]), default=None)
@click.version_option(__version__, prog_name="ecosync")
@click.pass_context
def cli(
    ctx: click.Context,
    repo: Path,
    config_path: Optional[Path],
    log_level: Optional[str],
    log_format: Optional[str],
) -> None:
    """ecosync — Keep a fleet of mirror remotes on one canonical commit."""
    setup_logging(log_level, log_format)
    ctx.ensure_object(dict)
    ctx.obj["root"] = repo.resolve()
    ctx.obj["config_path"] = config_path


cli.add_command(sync)
cli.add_command(status)
cli.add_command(remotes)
cli.add_command(check_config)


if __name__ == "__main__":
    cli()
