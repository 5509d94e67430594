"""Table metadata commands."""

import click

from fluxtree.cli.common import load_tables
from fluxtree.config import FluxSettings


@click.group()
def tables():
    """Table metadata commands."""
    pass


@tables.command("list")
@click.pass_obj
def list_tables(settings: FluxSettings):
    """List configured tables and their field counts."""
    loader = load_tables(settings)
    names = loader.list_tables()
    if not names:
        click.echo(f"No tables configured in {settings.metadata_path}")
        return

    for name in names:
        table = loader.tables[name]
        click.echo(f"{name} ({len(table.fields)} fields, type field: {table.type_field})")
