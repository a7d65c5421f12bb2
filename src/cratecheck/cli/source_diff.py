"""cratecheck source-diff command - published crate vs. upstream release commit."""

import click

from cratecheck.cli.utils import cli_errors, echo_json, get_config, print_file_stats
from cratecheck.core.progress import pluralize, spinner, status
from cratecheck.diff import (
    CommitNotFound,
    Compared,
    CrateSourceDiffReport,
    ManifestNotFound,
    NoRepository,
    SourceDiffAnalyzer,
)
from cratecheck.workspace import Workspace


def _render(report: CrateSourceDiffReport) -> None:
    outcome = report.outcome
    label = f"{report.name} {report.version}"
    if isinstance(outcome, NoRepository):
        status(f"{label}: no repository url, nothing to compare", style="warning")
    elif isinstance(outcome, CommitNotFound):
        status(f"{label}: release commit not found", style="warning")
    elif isinstance(outcome, ManifestNotFound):
        status(
            f"{label}: Cargo.toml for {report.name} not found at {outcome.commit[:12]}",
            style="warning",
        )
    elif isinstance(outcome, Compared):
        stats = outcome.stats
        if stats.is_different:
            changed = len(stats.files_added) + len(stats.files_modified)
            status(
                f"{label}: {pluralize(changed, 'file')} differ from {outcome.commit[:12]}",
                style="error",
            )
        else:
            status(f"{label}: matches {outcome.commit[:12]}", style="success")
        print_file_stats(stats)


@click.command()
@click.argument("name")
@click.argument("version")
@click.option("--repository", "repository_url", help="Upstream repository URL")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def source_diff_command(
    ctx: click.Context, name: str, version: str, repository_url: str | None, as_json: bool
) -> None:
    """Compare the published NAME VERSION with its upstream release commit.

    Without --repository there is nothing to compare against and the
    report says so.
    """
    config = get_config(ctx)
    with cli_errors(), Workspace(config) as workspace:
        analyzer = SourceDiffAnalyzer(workspace)
        with spinner(f"Analyzing {name} {version}"):
            report = analyzer.analyze_crate_source_diff(name, version, repository_url)

    if as_json:
        echo_json(report.to_dict())
    else:
        _render(report)
