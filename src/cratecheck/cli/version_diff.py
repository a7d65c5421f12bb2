"""cratecheck version-diff / published-diff commands - what changed between two releases."""

import click

from cratecheck.cli.utils import cli_errors, echo_json, get_config, print_file_stats
from cratecheck.core.progress import pluralize, spinner, status
from cratecheck.diff import SourceDiffAnalyzer, VersionDiffInfo
from cratecheck.workspace import Workspace


def _render(name: str, old: str, new: str, info: VersionDiffInfo) -> None:
    summary = info.stats()
    status(
        f"{name} {old} → {new}: {pluralize(summary.files_changed, 'file')} changed, "
        f"+{summary.insertions} -{summary.deletions}",
        style="info",
    )
    print_file_stats(info.file_diff_stats())


@click.command()
@click.argument("name")
@click.argument("old")
@click.argument("new")
@click.option("--repository", "repository_url", required=True, help="Upstream repository URL")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def version_diff_command(
    ctx: click.Context, name: str, old: str, new: str, repository_url: str, as_json: bool
) -> None:
    """Diff the upstream sources of NAME between releases OLD and NEW."""
    config = get_config(ctx)
    with cli_errors(), Workspace(config) as workspace:
        with spinner(f"Cloning {repository_url}"):
            repository = workspace.materialize_clone(name, repository_url)
        with spinner(f"Resolving {name} {old} and {new}"):
            info = SourceDiffAnalyzer(workspace).version_diff(name, repository, old, new)
        # The diff reads from the workspace, so render before it is released
        if as_json:
            echo_json({"name": name, "version_a": old, "version_b": new, **info.to_dict()})
        else:
            _render(name, old, new, info)


@click.command()
@click.argument("name")
@click.argument("old")
@click.argument("new")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def published_diff_command(ctx: click.Context, name: str, old: str, new: str, as_json: bool) -> None:
    """Diff the crates.io tarballs of NAME versions OLD and NEW."""
    config = get_config(ctx)
    with cli_errors(), Workspace(config) as workspace:
        with spinner(f"Downloading {name} {old} and {new}"):
            info = SourceDiffAnalyzer(workspace).published_version_diff(name, old, new)
        if as_json:
            echo_json({"name": name, "version_a": old, "version_b": new, **info.to_dict()})
        else:
            _render(name, old, new, info)
