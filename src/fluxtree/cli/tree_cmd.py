"""Container tree commands: check and move."""

import click

from fluxtree.cli.common import load_tables, open_store
from fluxtree.config import FluxSettings
from fluxtree.content.coordinator import MoveCoordinator
from fluxtree.content.targets import MoveTarget
from fluxtree.core.types import COLUMN_FIELD, CONTENT_TABLE, PARENT_FIELD, SORTING_FIELD
from fluxtree.datahandler.context import OperationContext
from fluxtree.persistence.adapter import StoreError
from fluxtree.tree.guard import TreeGuard


@click.group()
def tree():
    """Container tree commands."""
    pass


@tree.command()
@click.option("--table", default=CONTENT_TABLE, show_default=True, help="Table to scan.")
@click.pass_obj
def check(settings: FluxSettings, table: str):
    """Report parent loops already present in stored records."""
    loader = load_tables(settings)
    store = open_store(settings, loader)
    try:
        cycles = TreeGuard(store).find_cycles(table)
    except StoreError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)
    finally:
        store.close()

    if not cycles:
        click.echo(click.style(f"No cycles in {table}", fg="green"))
        return

    for cycle in cycles:
        path = " -> ".join(str(uid) for uid in cycle + cycle[:1])
        click.echo(click.style(f"Cycle: {path}", fg="red"))
    click.echo(f"{len(cycles)} cycle(s) found in {table}")
    raise SystemExit(1)


@tree.command()
@click.argument("uid", type=int)
@click.option("--after", "after_uid", type=int, default=None, help="Insert after this record.")
@click.option("--column", type=int, default=None, help="Move to the top of this page column.")
@click.option("--table", default=CONTENT_TABLE, show_default=True)
@click.option("--workspace", type=int, default=None, help="Draft workspace (default: FLUXTREE_WORKSPACE).")
@click.pass_obj
def move(
    settings: FluxSettings,
    uid: int,
    after_uid: int | None,
    column: int | None,
    table: str,
    workspace: int | None,
):
    """Move record UID, keeping workspace versions in step."""
    if (after_uid is None) == (column is None):
        raise click.UsageError("Pass exactly one of --after or --column.")

    target = MoveTarget.after(after_uid) if after_uid is not None else MoveTarget.column(column)
    context = OperationContext(workspace=settings.workspace if workspace is None else workspace)

    loader = load_tables(settings)
    store = open_store(settings, loader)
    try:
        outcome = MoveCoordinator(store).move(table, uid, target, context)
    except StoreError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)
    finally:
        store.close()

    for message in context.messages.messages:
        colour = "red" if message in context.messages.errors() else "yellow"
        click.echo(click.style(message.message, fg=colour))

    if outcome.rejected:
        raise SystemExit(1)

    record = outcome.record
    click.echo(
        f"Moved {table}:{uid} "
        f"(parent={record.get(PARENT_FIELD)}, column='{record.get(COLUMN_FIELD)}', "
        f"sorting={record.get(SORTING_FIELD)})"
    )
    if outcome.version:
        click.echo(f"Synchronized workspace version {outcome.version.get('uid')}")
