"""
Table ingestion.

Parses text copied from Google Sheets / Excel (TSV, or CSV) into a Table:
- Cells wrapped in double quotes may contain tabs and newlines
- ``""`` inside a quoted cell is an escaped quote
- Columns split on the delimiter, rows on newlines outside quotes
"""

import csv
import io
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import pandas as pd
from loguru import logger

from copysift.core.errors import TableFormatError
from copysift.core.models import Table

MAX_HEADER_CELL_LENGTH = 100
_DIGITS = re.compile(r"^\d+$")

TEXT_EXTENSIONS = {".tsv", ".csv", ".txt"}


def detect_delimiter(text: str) -> str:
    return "\t" if "\t" in text else ","


def looks_like_header(row: Sequence[str]) -> bool:
    """Short, non-numeric cells are taken as column names."""
    return all(len(c) < MAX_HEADER_CELL_LENGTH and not _DIGITS.match(c) for c in row)


def parse_table(text: str, delimiter: Optional[str] = None) -> Table:
    """
    Parse pasted spreadsheet text into a Table.

    Args:
        text: Raw clipboard text
        delimiter: Column delimiter; detected from the text when omitted

    Returns:
        Table with every row padded to the widest row. Rows whose cells are
        all empty are dropped.
    """
    raw = (text or "").strip()
    if not raw:
        return Table()

    delimiter = delimiter or detect_delimiter(raw)
    reader = csv.reader(io.StringIO(raw, newline=""), delimiter=delimiter, quotechar='"')
    rows = [[cell.strip() for cell in row] for row in reader]
    rows = [row for row in rows if any(row)]
    if not rows:
        return Table()

    width = max(len(r) for r in rows)
    has_header = len(rows) > 1 and looks_like_header(rows[0])
    if has_header:
        headers, body = rows[0], rows[1:]
    else:
        headers, body = [f"col{i + 1}" for i in range(width)], rows

    logger.debug(
        f"Parsed table: {len(body)} rows x {width} columns "
        f"(delimiter={delimiter!r}, header={'yes' if has_header else 'generated'})"
    )
    return Table.from_values(body, headers=headers)


def from_records(records: Sequence[Dict[str, Any]], columns: Optional[Sequence[str]] = None) -> Table:
    """Build a Table from a list of dicts (one dict per row)."""
    if not records:
        return Table(headers=list(columns or []))
    df = pd.DataFrame.from_records(list(records), columns=list(columns) if columns else None)
    return from_dataframe(df)


def from_dataframe(df: pd.DataFrame) -> Table:
    df = df.fillna("").astype(str)
    headers = [str(c) for c in df.columns]
    return Table.from_values(df.values.tolist(), headers=headers)


def load_table(path: Union[str, Path], delimiter: Optional[str] = None) -> Table:
    """
    Load a Table from a file.

    ``.tsv``/``.csv``/``.txt`` go through ``parse_table``; ``.parquet`` and
    ``.jsonl`` are read with pandas.
    """
    path = str(path)
    if not os.path.exists(path):
        raise TableFormatError(f"File not found: {path}")

    ext = os.path.splitext(path)[1].lower()
    logger.debug(f"Loading table from {path}")

    if ext in TEXT_EXTENSIONS:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
        if delimiter is None and ext == ".csv":
            delimiter = ","
        return parse_table(content, delimiter=delimiter)
    if ext == ".parquet":
        return from_dataframe(pd.read_parquet(path))
    if ext == ".jsonl":
        return from_dataframe(pd.read_json(path, lines=True))

    raise TableFormatError(f"Unsupported table format: {ext or path}")
