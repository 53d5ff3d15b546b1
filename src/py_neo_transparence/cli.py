# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

# We wrap the settings import in a try-except block to provide a nicer
# error message if an environment variable holds an invalid value.
try:
    from .config import settings
except Exception as e:
    console = Console()
    console.print(Panel(
        f"[bold red]Configuration Error:[/bold red]\n{e}\n\nPlease check the [bold cyan]PYNEOTRANSPARENCE_*[/bold cyan] environment variables and your .env file.",
        title="[bold red]Initialization Failed[/bold red]",
        border_style="red"
    ))
    exit(1)

from .entities import EntityImport, get_entity_import
from .loader import Neo4jLoader, create_driver


app = typer.Typer(
    name="py-neo-transparence",
    help="Imports French health transparency open data (companies, drugs, packages, benefits) into Neo4j.",
    no_args_is_help=True,
)
console = Console()


def _run_import(
    entity: EntityImport,
    defined_in: Path,
    to_graph: str,
    username: Optional[str],
    password: Optional[str],
    batch_size: int,
):
    """Connects to the graph, imports the file and always releases the driver."""
    console.print(Panel(f"[bold cyan]Importing {entity.name} from {defined_in}[/bold cyan]", border_style="cyan"))
    driver = None
    try:
        driver = create_driver(to_graph, username, password)
        loader = Neo4jLoader(driver=driver, database=settings.neo4j_database)
        report = loader.import_file(entity, defined_in, batch_size, encoding=settings.source_encoding)
        console.print(Panel(
            f"[bold green]Imported {report.rows} rows in {report.batches} batches.[/bold green]",
            title="[bold green]Import Complete[/bold green]"
        ))
    except Exception as e:
        console.print_exception()
        console.print(Panel(f"[bold red]An error occurred during the {entity.name} import: {e}", title="[bold red]Error[/bold red]"))
        raise typer.Exit(code=1)
    finally:
        if driver:
            driver.close()


@app.command(name="companies", help="Import companies with their business segments and addresses.")
def companies(
    defined_in: Path = typer.Option(..., "--defined-in", "-f", exists=True, dir_okay=False, readable=True, help="Path to the companies CSV file."),
    to_graph: str = typer.Option(..., "--to-graph", "-b", help="Neo4j Bolt URI."),
    username: Optional[str] = typer.Option(None, "--username", "-u", help="Neo4j username."),
    password: Optional[str] = typer.Option(None, "--password", "-p", help="Neo4j password."),
    batch_size: int = typer.Option(settings.batch_size, "--batch-size", "-s", min=1, help="Advanced: rows per transaction."),
):
    _run_import(get_entity_import("companies", locale=settings.locale), defined_in, to_graph, username, password, batch_size)


@app.command(name="packages", help="Import drug packages and link them to their drugs.")
def packages(
    defined_in: Path = typer.Option(..., "--defined-in", "-f", exists=True, dir_okay=False, readable=True, help="Path to the packages TSV file."),
    to_graph: str = typer.Option(..., "--to-graph", "-b", help="Neo4j Bolt URI."),
    username: Optional[str] = typer.Option(None, "--username", "-u", help="Neo4j username."),
    password: Optional[str] = typer.Option(None, "--password", "-p", help="Neo4j password."),
    batch_size: int = typer.Option(settings.batch_size, "--batch-size", "-s", min=1, help="Advanced: rows per transaction."),
):
    _run_import(get_entity_import("packages", locale=settings.locale), defined_in, to_graph, username, password, batch_size)


@app.command(name="drugs", help="Import drugs and link them to their labs by fuzzy name matching.")
def drugs(
    defined_in: Path = typer.Option(..., "--defined-in", "-f", exists=True, dir_okay=False, readable=True, help="Path to the drugs TSV file."),
    to_graph: str = typer.Option(..., "--to-graph", "-b", help="Neo4j Bolt URI."),
    username: Optional[str] = typer.Option(None, "--username", "-u", help="Neo4j username."),
    password: Optional[str] = typer.Option(None, "--password", "-p", help="Neo4j password."),
    batch_size: int = typer.Option(settings.batch_size, "--batch-size", "-s", min=1, help="Advanced: rows per transaction."),
    lab_similarity: float = typer.Option(
        settings.lab_name_similarity,
        "--lab-similarity",
        min=0.0,
        max=1.0,
        help="A lab name must score strictly above this to be linked to an existing company."
    ),
):
    entity = get_entity_import("drugs", locale=settings.locale, lab_name_similarity=lab_similarity)
    _run_import(entity, defined_in, to_graph, username, password, batch_size)


@app.command(name="benefits", help="Import benefits given by labs to individual health professionals.")
def benefits(
    defined_in: Path = typer.Option(..., "--defined-in", "-f", exists=True, dir_okay=False, readable=True, help="Path to the benefits CSV file."),
    to_graph: str = typer.Option(..., "--to-graph", "-b", help="Neo4j Bolt URI."),
    username: Optional[str] = typer.Option(None, "--username", "-u", help="Neo4j username."),
    password: Optional[str] = typer.Option(None, "--password", "-p", help="Neo4j password."),
    batch_size: int = typer.Option(settings.batch_size, "--batch-size", "-s", min=1, help="Advanced: rows per transaction."),
):
    _run_import(get_entity_import("benefits", locale=settings.locale), defined_in, to_graph, username, password, batch_size)


if __name__ == "__main__":
    app()
