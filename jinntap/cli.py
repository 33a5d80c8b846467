"""Command-line interface for jinntap."""

import json
import logging
import sys
from pathlib import Path

import ruamel.yaml
import typer
from rich.console import Console
from rich.table import Table

from jinntap import __version__
from jinntap.errors import Diagnostics, SchemaDefinitionError
from jinntap.logging_config import setup_logging
from jinntap.models import document_from_dict
from jinntap.parser import DocumentParser
from jinntap.schema.compiler import load_registry
from jinntap.serializer import DocumentSerializer

app = typer.Typer(
    name="jinntap",
    help="Compile element schemas and convert documents to and from XML.",
)
console = Console()
err_console = Console(stderr=True)

SCHEMA_OPTION = typer.Option(
    None,
    "--schema",
    "-s",
    help="Schema definition file (YAML or JSON; default: bundled schema)",
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Trace compilation and document walks"),
) -> None:
    """Compile element schemas and convert documents to and from XML."""
    setup_logging(logging.DEBUG if verbose else logging.ERROR)


def _report(diagnostics: Diagnostics) -> None:
    for diagnostic in diagnostics:
        err_console.print(f"[yellow]{diagnostic.kind.value}[/yellow] {diagnostic.message}")


def _load(schema: Path | None, diagnostics: Diagnostics):
    try:
        return load_registry(schema, diagnostics=diagnostics)
    except SchemaDefinitionError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1) from e


@app.command("compile")
def compile_command(
    schema: Path | None = typer.Argument(
        None,
        help="Schema definition file (default: bundled schema)",
    ),
) -> None:
    """Compile a schema and list the resulting element types."""
    diagnostics = Diagnostics()
    registry = _load(schema, diagnostics)

    table = Table(title="Element types")
    table.add_column("Name", style="bold")
    table.add_column("Tag")
    table.add_column("Archetype")
    table.add_column("Content")
    table.add_column("Attributes")
    table.add_column("Commands")
    table.add_column("Shortcuts")

    for descriptor in registry:
        if descriptor.is_builtin:
            continue
        table.add_row(
            descriptor.name,
            descriptor.tag or "",
            descriptor.archetype.value,
            descriptor.content_model.expression,
            ", ".join(a.name for a in descriptor.attributes),
            ", ".join(descriptor.commands),
            ", ".join(descriptor.shortcuts),
        )

    console.print(table)
    _report(diagnostics)
    if diagnostics:
        raise typer.Exit(1)


@app.command()
def serialize(
    document: Path = typer.Argument(..., help="Document tree as JSON"),
    schema: Path | None = SCHEMA_OPTION,
) -> None:
    """Serialize a JSON document tree to XML."""
    diagnostics = Diagnostics()
    registry = _load(schema, diagnostics)

    with open(document, "r", encoding="utf-8") as f:
        tree = document_from_dict(json.load(f))

    sys.stdout.write(DocumentSerializer(registry).serialize(tree, diagnostics))
    _report(diagnostics)


@app.command()
def parse(
    source: Path = typer.Argument(..., help="XML file to parse"),
    schema: Path | None = SCHEMA_OPTION,
) -> None:
    """Parse XML into a document tree and print it as YAML."""
    diagnostics = Diagnostics()
    registry = _load(schema, diagnostics)

    document = DocumentParser(registry).parse(source.read_text(encoding="utf-8"), diagnostics)

    yaml = ruamel.yaml.YAML()
    yaml.default_flow_style = False
    yaml.dump(document.to_dict(), sys.stdout)
    _report(diagnostics)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"jinntap {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
