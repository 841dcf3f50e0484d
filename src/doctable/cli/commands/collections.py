"""Collection management commands."""

from typing import Annotated

import typer

from doctable.cli.context import CLIContext
from doctable.cli.output import OutputFormatter

app = typer.Typer(help="Manage collections (create, rename, drop, size accounting)")


@app.command("create")
def collection_create(
    ctx: typer.Context,
    database: Annotated[str, typer.Argument(help="Database name")],
    collection: Annotated[str, typer.Argument(help="Collection name")],
    if_not_exists: Annotated[
        bool,
        typer.Option("--if-not-exists", help="Skip creation if the collection exists"),
    ] = False,
) -> None:
    """Create a collection table and its metadata record.

    Examples:

        doctable collection create shop orders
        doctable collection create shop orders.2024 --if-not-exists
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        store = cli_ctx.get_store()
        created = store.create_collection(database, collection, if_not_exists=if_not_exists)
        formatter.print_success(
            f"Collection created: {database}.{collection}",
            {"table": created.qualified_table_name},
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e
    finally:
        cli_ctx.close()


@app.command("list")
def collection_list(
    ctx: typer.Context,
    database: Annotated[str, typer.Argument(help="Database name")],
) -> None:
    """List the collections of a database."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        names = cli_ctx.get_store().list_collections(database)
        formatter.print_table(
            f"Collections in {database}",
            [{"name": name} for name in names],
            ["name"],
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e
    finally:
        cli_ctx.close()


@app.command("info")
def collection_info(
    ctx: typer.Context,
    database: Annotated[str, typer.Argument(help="Database name")],
    collection: Annotated[str, typer.Argument(help="Collection name")],
) -> None:
    """Show table name, document count and stored size of a collection."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        info = cli_ctx.get_store().collection(database, collection).info()
        formatter.print_collection_info(info)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e
    finally:
        cli_ctx.close()


@app.command("rename")
def collection_rename(
    ctx: typer.Context,
    database: Annotated[str, typer.Argument(help="Database name")],
    collection: Annotated[str, typer.Argument(help="Current collection name")],
    new_collection: Annotated[str, typer.Argument(help="New collection name")],
    new_database: Annotated[
        str | None,
        typer.Option("--to-database", help="Target database (must equal the current one)"),
    ] = None,
) -> None:
    """Rename a collection, keeping its documents and positions.

    Examples:

        doctable collection rename shop orders orders_archived
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        renamed = cli_ctx.get_store().rename_collection(
            database, collection, new_database or database, new_collection
        )
        formatter.print_success(
            f"Collection renamed: {database}.{collection} → {database}.{new_collection}",
            {"table": renamed.qualified_table_name},
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e
    finally:
        cli_ctx.close()


@app.command("drop")
def collection_drop(
    ctx: typer.Context,
    database: Annotated[str, typer.Argument(help="Database name")],
    collection: Annotated[str, typer.Argument(help="Collection name")],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation"),
    ] = False,
) -> None:
    """Drop a collection and all of its documents."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    if not force and not cli_ctx.json_output:
        typer.confirm(f"Drop collection {database}.{collection}?", abort=True)

    try:
        cli_ctx.get_store().drop_collection(database, collection)
        formatter.print_success(f"Collection dropped: {database}.{collection}")
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e
    finally:
        cli_ctx.close()


@app.command("size")
def collection_size(
    ctx: typer.Context,
    database: Annotated[str, typer.Argument(help="Database name")],
    collection: Annotated[str, typer.Argument(help="Collection name")],
    add: Annotated[
        int | None,
        typer.Option("--add", help="Byte delta to add to the running size (may be negative)"),
    ] = None,
) -> None:
    """Show or adjust the stored byte size of a collection.

    Examples:

        doctable collection size shop orders
        doctable collection size shop orders --add 120
        doctable collection size shop orders --add=-50
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        target = cli_ctx.get_store().collection(database, collection)
        if add is not None:
            target.update_stored_byte_size(add)
        formatter.print_success(
            f"Stored size of {database}.{collection}",
            {"datasize": target.get_stored_byte_size()},
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e
    finally:
        cli_ctx.close()
