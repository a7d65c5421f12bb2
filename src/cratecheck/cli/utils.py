"""Shared CLI helpers."""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import click
from rich.table import Table

from cratecheck.config.models import CrateCheckConfig
from cratecheck.core.errors import CrateCheckError
from cratecheck.core.progress import get_console
from cratecheck.diff.differ import FileDiffStats
from cratecheck.git.errors import GitError


def get_config(ctx: click.Context) -> CrateCheckConfig:
    obj = ctx.find_object(dict) or {}
    config = obj.get("config")
    return config if isinstance(config, CrateCheckConfig) else CrateCheckConfig()


@contextmanager
def cli_errors() -> Iterator[None]:
    """Report domain failures as a one-line error and exit status 1."""
    try:
        yield
    except (CrateCheckError, GitError) as e:
        raise click.ClickException(str(e)) from e


def echo_json(payload: dict[str, Any]) -> None:
    click.echo(json.dumps(payload, indent=2))


def print_file_stats(stats: FileDiffStats) -> None:
    """Table of differing paths, one row per file."""
    console = get_console()
    rows = [
        *(("added", "green", p) for p in sorted(stats.files_added)),
        *(("modified", "yellow", p) for p in sorted(stats.files_modified)),
        *(("deleted", "dim", p) for p in sorted(stats.files_deleted)),
    ]
    if not rows:
        return
    table = Table(show_header=False, box=None, padding=(0, 1), pad_edge=False)
    table.add_column(style="bold")
    table.add_column()
    for change, style, path in rows:
        table.add_row(f"[{style}]{change}[/{style}]", path)
    console.print()
    console.print(table)
