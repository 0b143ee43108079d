"""
CLI — click commands registered on the ecosync group in ecosync.main.
"""

from __future__ import annotations

from pathlib import Path

import click

from ..config.loader import SyncConfig, load_config


def context_config(ctx: click.Context) -> SyncConfig:
    """Load config for the repo selected on the group (cached on ctx.obj)."""
    if "config" not in ctx.obj:
        root: Path = ctx.obj["root"]
        ctx.obj["config"] = load_config(root, ctx.obj.get("config_path"))
    return ctx.obj["config"]
