"""Output formatting for CLI commands."""

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from doctable.core.types import CollectionInfo
from doctable.exceptions import DocTableError, UnsupportedOperation

console = Console()


class OutputFormatter:
    """Formats output for terminal or JSON mode."""

    def __init__(self, json_mode: bool = False) -> None:
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
        """
        self.json_mode = json_mode

    def print_table(
        self,
        title: str,
        data: list[dict[str, Any]],
        columns: list[str],
    ) -> None:
        """Print data as Rich table or JSON array."""
        if self.json_mode:
            print(json.dumps(data, default=str, indent=2))
        else:
            table = Table(title=title, show_header=True, header_style="bold magenta")
            for col in columns:
                table.add_column(col)
            for row in data:
                table.add_row(*[str(row.get(col, "")) for col in columns])
            console.print(table)

    def print_documents(self, documents: list[dict[str, Any]], id_field: str) -> None:
        """Print scanned documents.

        Args:
            documents: Decoded documents in scan order
            id_field: Identifier field shown in the first column
        """
        if self.json_mode:
            print(json.dumps(documents, default=str, indent=2))
            return

        table = Table(
            title=f"{len(documents)} document(s)", show_header=True, header_style="bold magenta"
        )
        table.add_column(id_field)
        table.add_column("Document")
        for document in documents:
            table.add_row(
                str(document.get(id_field, "")),
                json.dumps(document, default=str, ensure_ascii=False),
            )
        console.print(table)

    def print_collection_info(self, info: CollectionInfo) -> None:
        """Print collection summary."""
        if self.json_mode:
            print(json.dumps(info.model_dump(), default=str, indent=2))
        else:
            console.print(f"\n[bold]Collection:[/bold] {info.database}.{info.collection}")
            console.print(f"Table: {info.table}")
            console.print(f"Identifier field: {info.id_field}")
            if info.count is not None:
                console.print(f"Documents: {info.count:,}")
            if info.stored_byte_size is not None:
                console.print(f"Stored bytes: {info.stored_byte_size:,}")

    def print_success(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Print success message."""
        if self.json_mode:
            output = {"success": True, "message": message}
            if details:
                output.update(details)
            print(json.dumps(output, default=str, indent=2))
        else:
            console.print(f"✓ {message}", style="green")
            if details:
                for key, value in details.items():
                    console.print(f"  {key}: {value}", style="dim")

    def print_error(self, error: Exception) -> None:
        """Print error message."""
        if self.json_mode:
            if isinstance(error, (DocTableError, UnsupportedOperation)):
                print(json.dumps(error.to_dict(), default=str, indent=2))
            else:
                print(json.dumps({"error": str(error)}, indent=2))
        else:
            error_text = str(error)
            if isinstance(error, DocTableError) and error.context:
                context_str = "\n".join(f"{k}: {v}" for k, v in error.context.items())
                error_text = f"{error_text}\n\n{context_str}"

            title = "Not supported" if isinstance(error, UnsupportedOperation) else "Error"
            panel = Panel(
                error_text,
                title=f"[red]{title}[/red]",
                border_style="red",
            )
            console.print(panel)
