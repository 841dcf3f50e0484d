"""Document commands: insert, find, count, update, delete."""

from typing import Annotated

import typer

from doctable.cli.context import CLIContext
from doctable.cli.output import OutputFormatter
from doctable.cli.parsing import parse_json_object, parse_sort, read_json_file, read_jsonl_file

app = typer.Typer(help="Manage documents of a collection")

DatabaseArg = Annotated[str, typer.Argument(help="Database name")]
CollectionArg = Annotated[str, typer.Argument(help="Collection name")]


@app.command("insert")
def doc_insert(
    ctx: typer.Context,
    database: DatabaseArg,
    collection: CollectionArg,
    document_json: Annotated[
        str | None,
        typer.Argument(help="Document as JSON string"),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--from-file", "-f", help="Load documents from JSON/JSONL file"),
    ] = None,
    batch: Annotated[
        bool,
        typer.Option("--batch", help="Insert every line of a JSONL file"),
    ] = False,
) -> None:
    """Insert document(s) and print their positions.

    Examples:

        doctable doc insert shop orders '{"_id": "o-1", "total": 42}'
        doctable doc insert shop orders --from-file orders.jsonl --batch
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        if from_file:
            documents = read_jsonl_file(from_file) if batch else [read_json_file(from_file)]
        elif document_json:
            documents = [parse_json_object(document_json, "document")]
        else:
            raise typer.BadParameter("Either provide a document as JSON string or use --from-file")

        target = cli_ctx.get_store().collection(database, collection)
        positions = [target.insert(document) for document in documents]
        if len(positions) == 1:
            formatter.print_success("Inserted document", {"position": positions[0]})
        else:
            formatter.print_success(
                f"Inserted {len(positions)} documents",
                {"count": len(positions), "positions": positions[:5]},
            )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e
    finally:
        cli_ctx.close()


@app.command("find")
def doc_find(
    ctx: typer.Context,
    database: DatabaseArg,
    collection: CollectionArg,
    query: Annotated[
        str | None,
        typer.Option(
            "--query",
            "-q",
            help='Filter as JSON, e.g. \'{"age": {"op": "gt", "value": 30}}\'',
        ),
    ] = None,
    sort: Annotated[
        str | None,
        typer.Option(
            "--sort",
            "-s",
            help="Sort as JSON object or field:dir list ($natural for position)",
        ),
    ] = None,
    skip: Annotated[int, typer.Option("--skip", help="Matches to skip")] = 0,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum matches (0 = all)")] = 0,
) -> None:
    """Find documents matching a filter.

    Examples:

        doctable doc find shop orders
        doctable doc find shop orders -q '{"status": "open"}' --sort total:-1 -n 10
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        filters = parse_json_object(query, "query") if query else None
        target = cli_ctx.get_store().collection(database, collection)
        documents = target.find(filters, sort=parse_sort(sort), skip=skip, limit=limit)
        formatter.print_documents(documents, target.id_field)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e
    finally:
        cli_ctx.close()


@app.command("count")
def doc_count(
    ctx: typer.Context,
    database: DatabaseArg,
    collection: CollectionArg,
) -> None:
    """Count the documents of a collection."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        count = cli_ctx.get_store().collection(database, collection).count()
        formatter.print_success(f"{database}.{collection}", {"count": count})
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e
    finally:
        cli_ctx.close()


@app.command("position")
def doc_position(
    ctx: typer.Context,
    database: DatabaseArg,
    collection: CollectionArg,
    document_json: Annotated[str, typer.Argument(help="Document (or just its identifier) as JSON")],
) -> None:
    """Look up the position of a document by its identifier field.

    Examples:

        doctable doc position shop orders '{"_id": "o-1"}'
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        document = parse_json_object(document_json, "document")
        position = (
            cli_ctx.get_store()
            .collection(database, collection)
            .find_position_by_identifier(document)
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e
    finally:
        cli_ctx.close()

    if position is None:
        formatter.print_error(Exception(f"Document not found: {document_json}"))
        raise typer.Exit(code=1)
    formatter.print_success("Found document", {"position": position})


@app.command("update")
def doc_update(
    ctx: typer.Context,
    database: DatabaseArg,
    collection: CollectionArg,
    document_json: Annotated[str, typer.Argument(help="Full replacement document as JSON")],
) -> None:
    """Replace the stored document with the same identifier.

    Examples:

        doctable doc update shop orders '{"_id": "o-1", "status": "shipped"}'
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        document = parse_json_object(document_json, "document")
        target = cli_ctx.get_store().collection(database, collection)
        target.update_by_identifier(document)
        formatter.print_success(f"Document updated in {database}.{collection}")
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e
    finally:
        cli_ctx.close()


@app.command("delete")
def doc_delete(
    ctx: typer.Context,
    database: DatabaseArg,
    collection: CollectionArg,
    position: Annotated[int, typer.Argument(help="Position of the document")],
) -> None:
    """Delete the document at a position (no error if it is already gone)."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        cli_ctx.get_store().collection(database, collection).delete_by_position(position)
        formatter.print_success(f"Document deleted: {position}")
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1) from e
    finally:
        cli_ctx.close()
