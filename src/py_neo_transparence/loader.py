# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
from pathlib import Path
from typing import List, Optional, TextIO

from neo4j import Driver, GraphDatabase, Session
from pydantic import BaseModel
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from .batching import batch
from .config import settings
from .entities import EntityImport
from .models import ImportReport
from .parser import open_source

console = Console()


def create_driver(uri: str, username: Optional[str] = None, password: Optional[str] = None) -> Driver:
    """
    Creates a driver for `uri` and checks the server is reachable.
    Without a username the connection is unauthenticated.
    """
    auth = (username, password or "") if username is not None else None
    driver = GraphDatabase.driver(uri, auth=auth)
    try:
        driver.verify_connectivity()
    except Exception:
        driver.close()
        raise
    return driver


class Neo4jLoader:
    """
    Runs the batched import of one source file into Neo4j.

    One session is held for the whole run. Schema statements are ensured
    first, then every batch of rows is written and committed in its own
    explicit transaction. A failing batch aborts the run: batches committed
    before it stay in the graph and nothing is retried.
    """

    def __init__(self, driver: Driver, database: Optional[str] = None):
        self._driver = driver
        self.database = database or settings.neo4j_database

    def ensure_schema(self, session: Session, entity: EntityImport):
        """Creates the constraints and indexes `entity` relies on, if missing."""
        console.log(f"Ensuring constraints and indexes for [bold cyan]{entity.name}[/bold cyan]...")
        for statement in entity.schema_statements:
            session.run(statement).consume()
        console.log("[green]Constraints and indexes are in place.[/green]")

    def _write_batch(self, session: Session, entity: EntityImport, rows: List[BaseModel]):
        with session.begin_transaction() as tx:
            entity.write_batch(tx, rows)
            tx.commit()

    def run_import(self, entity: EntityImport, source: TextIO, batch_size: Optional[int] = None) -> ImportReport:
        """
        Imports every qualifying row of `source`, `batch_size` rows per commit.
        The caller owns `source`; see `import_file` for the path-based variant.
        """
        batch_size = settings.batch_size if batch_size is None else batch_size
        report = ImportReport(entity=entity.name)
        console.log(f"Starting {entity.name} import with batches of {batch_size} rows...")

        with self._driver.session(database=self.database) as session:
            self.ensure_schema(session, entity)
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                TimeElapsedColumn(),
                console=console,
                transient=True,
            ) as progress:
                task = progress.add_task(f"Importing {entity.name}...", total=None)
                for rows in batch(entity.rows(source), batch_size):
                    self._write_batch(session, entity, rows)
                    report.batches += 1
                    report.rows += len(rows)
                    progress.update(task, description=f"Importing {entity.name}... {report.rows} rows")
                    console.log(f"Committed batch {report.batches} ({len(rows)} rows).")

        console.log(f"[green]Imported {report.rows} {entity.name} rows in {report.batches} batches.[/green]")
        return report

    def import_file(
        self,
        entity: EntityImport,
        path: Path,
        batch_size: Optional[int] = None,
        encoding: Optional[str] = None,
    ) -> ImportReport:
        """Opens `path`, imports it and closes it, whether the import succeeds or not."""
        with open_source(path, encoding or settings.source_encoding) as source:
            return self.run_import(entity, source, batch_size)
