# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
"""
Streams positional delimited files as dictionaries.

The open-data extracts are not self-describing: each one is read through a
sparse column projection (column index -> field name) and every column that
is not projected is dropped. Records are produced lazily, one line at a time,
from a text stream owned by the caller.
"""
import csv
from pathlib import Path
from typing import Dict, Iterator, Mapping, TextIO

from .errors import MalformedRowError
from .models import SourceFormat


def open_source(path: Path, encoding: str = "utf-8") -> TextIO:
    """Opens a source file the way the csv module expects it (no newline translation)."""
    return open(path, "r", encoding=encoding, newline="")


def read_records(
    source: TextIO,
    columns: Mapping[int, str],
    source_format: SourceFormat,
) -> Iterator[Dict[str, str]]:
    """
    Yields one ``{field_name: raw_value}`` record per non-empty line of ``source``.

    Raises MalformedRowError on the first line that has fewer fields than the
    highest projected column requires. The stream is consumed forward only and
    is never closed here.
    """
    required_fields = max(columns) + 1 if columns else 0
    reader = csv.reader(
        source,
        delimiter=source_format.delimiter,
        quotechar=source_format.quotechar,
    )
    if source_format.skip_header:
        next(reader, None)

    for row in reader:
        if not row:
            continue
        if len(row) < required_fields:
            raise MalformedRowError(
                f"Expected at least {required_fields} fields, found {len(row)}",
                context={"line": reader.line_num},
            )
        yield {name: row[index] for index, name in columns.items()}
