"""Shared helpers for CLI commands."""

import click

from fluxtree.config import FluxSettings
from fluxtree.metadata.loader import TableLoader
from fluxtree.persistence.adapter import RecordStore, StoreError
from fluxtree.persistence.config import open_store as open_record_store


def load_tables(settings: FluxSettings) -> TableLoader:
    """Load table metadata, exiting when the metadata directory is missing."""
    if not settings.metadata_path.exists():
        click.echo(f"Error: Metadata directory not found at {settings.metadata_path}", err=True)
        raise SystemExit(1)
    loader = TableLoader(settings.metadata_path)
    try:
        loader.load_all()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    return loader


def open_store(settings: FluxSettings, loader: TableLoader) -> RecordStore:
    """Connect to the configured database, creating and checking every table."""
    tables = [loader.tables[name] for name in loader.list_tables()]
    try:
        return open_record_store(settings.database, tables)
    except StoreError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
