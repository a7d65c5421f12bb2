"""cratecheck CLI - compare published crates with their upstream source."""

import click

from cratecheck.cli.source_diff import source_diff_command
from cratecheck.cli.version_diff import published_diff_command, version_diff_command
from cratecheck.config import load_config
from cratecheck.core.errors import ConfigError
from cratecheck.core.logging import configure_logging, set_request_id


@click.group()
@click.version_option(version="0.1.0", prog_name="cratecheck")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """cratecheck - Check published crates against their upstream repositories."""
    try:
        config = load_config()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    logging_config = config.logging
    if verbose:
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)
    set_request_id()

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config


cli.add_command(source_diff_command, name="source-diff")
cli.add_command(version_diff_command, name="version-diff")
cli.add_command(published_diff_command, name="published-diff")


if __name__ == "__main__":
    cli()
