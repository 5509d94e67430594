"""fluxtree CLI entry point."""

import click

from fluxtree.config import FluxSettings, configure_logging


@click.group()
@click.option(
    "--log-level",
    default=None,
    help="Log level (default: FLUXTREE_LOG_LEVEL or WARNING).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None):
    """fluxtree: container tree maintenance for content records."""
    settings = FluxSettings.from_env()
    if log_level:
        settings.log_level = log_level.upper()
    configure_logging(settings.log_level)
    ctx.obj = settings


# Register subcommand groups
from fluxtree.cli.cache_cmd import cache  # noqa: E402
from fluxtree.cli.tables_cmd import tables  # noqa: E402
from fluxtree.cli.tree_cmd import tree  # noqa: E402

cli.add_command(cache)
cli.add_command(tables)
cli.add_command(tree)
