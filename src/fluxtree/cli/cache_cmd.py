"""Provider cache commands."""

import click

from fluxtree.cli.common import load_tables
from fluxtree.config import FluxSettings
from fluxtree.providers.cache import CacheSweeper
from fluxtree.providers.registry import ProviderRegistry


@click.group()
def cache():
    """Provider cache commands."""
    pass


@cache.command()
@click.option("--command", "cache_command", default="all", help="Cache command passed to providers.")
@click.pass_obj
def clear(settings: FluxSettings, cache_command: str):
    """Ask every installed provider to clear its caches."""
    loader = load_tables(settings)
    ProviderRegistry.load_entry_points()

    table_names = loader.list_tables()
    count = sum(len(ProviderRegistry.resolve(name)) for name in table_names)
    CacheSweeper().sweep(table_names, cache_command)
    click.echo(f"Cleared caches of {count} provider(s) across {len(table_names)} table(s)")
