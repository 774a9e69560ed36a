"""
Table export.

Serializes highlighted tables as TSV (plain-text clipboard flavor), as an
HTML table with inline background colors that spreadsheet apps keep on
paste, or as a pandas DataFrame.
"""

import html
from typing import List, Literal, Optional, Sequence

import pandas as pd

from copysift.components.colors import contrast_color
from copysift.components.matching.aggregator import matched_rows, row_summary
from copysift.core.models import Cell, Query, Table

RowFilter = Literal["all", "highlighted", "unhighlighted"]

NOTE_HEADER = "note"

HEADER_STYLE = "font-weight:bold;background-color:#333333;color:#ffffff;padding:4px 8px;border:1px solid #cccccc;"
PLAIN_STYLE = "padding:4px 8px;border:1px solid #cccccc;color:#000000;"
NOTE_STYLE = "padding:4px 8px;border:1px solid #cccccc;color:#333333;font-size:12px;"


def filter_rows(table: Table, mode: RowFilter = "all") -> List[List[Cell]]:
    if mode == "all":
        return list(table.rows)
    if mode == "highlighted":
        return [row for row in table.rows if any(c.highlights for c in row)]
    if mode == "unhighlighted":
        return [row for row in table.rows if not any(c.highlights for c in row)]
    raise ValueError(f"Unknown row filter: {mode}")


def rows_for_query(table: Table, query_id: str) -> List[List[Cell]]:
    return [table.rows[i] for i in matched_rows(table, query_id)]


def _escape(text: str) -> str:
    return html.escape(text, quote=False)


def _cell_background(cell: Cell, query_id: Optional[str]) -> str:
    if query_id is None:
        return cell.highlights[0].color if cell.highlights else ""
    hit = next((h for h in cell.highlights if h.query_id == query_id), None)
    return hit.color if hit else ""


def to_tsv(
    table: Table,
    rows: Optional[Sequence[Sequence[Cell]]] = None,
    queries: Sequence[Query] = (),
    include_notes: bool = True,
) -> str:
    """Header line plus one tab-separated line per row."""
    rows = table.rows if rows is None else rows
    header = "\t".join(table.headers) + (f"\t{NOTE_HEADER}" if include_notes else "")
    lines = [header]
    for row in rows:
        line = "\t".join(cell.value for cell in row)
        if include_notes:
            line += "\t" + row_summary(row, queries)
        lines.append(line)
    return "\n".join(lines) + "\n"


def to_html(
    table: Table,
    rows: Optional[Sequence[Sequence[Cell]]] = None,
    queries: Sequence[Query] = (),
    include_notes: bool = True,
    query_id: Optional[str] = None,
) -> str:
    """
    HTML table with one inline background color per highlighted cell.

    Args:
        table: Source table (for headers)
        rows: Rows to export, all rows when omitted
        queries: Query list used for the note summaries
        include_notes: Append the note column
        query_id: Color only this query's highlights
    """
    rows = table.rows if rows is None else rows
    parts = ["<table>", "<tr>"]
    for header in table.headers:
        parts.append(f'<td style="{HEADER_STYLE}">{_escape(header)}</td>')
    if include_notes:
        parts.append(f'<td style="{HEADER_STYLE}">{NOTE_HEADER}</td>')
    parts.append("</tr>")

    for row in rows:
        parts.append("<tr>")
        for cell in row:
            bg = _cell_background(cell, query_id)
            if bg:
                style = f"background-color:{bg};color:{contrast_color(bg)};padding:4px 8px;border:1px solid #cccccc;"
            else:
                style = PLAIN_STYLE
            parts.append(f'<td style="{style}">{_escape(cell.value)}</td>')
        if include_notes:
            parts.append(f'<td style="{NOTE_STYLE}">{_escape(row_summary(row, queries))}</td>')
        parts.append("</tr>")

    parts.append("</table>")
    return "".join(parts)


def to_dataframe(table: Table, queries: Sequence[Query] = ()) -> pd.DataFrame:
    """Values plus ``note`` and ``max_similarity`` columns."""
    records = []
    for row in table.rows:
        record = {header: cell.value for header, cell in zip(table.headers, row)}
        record[NOTE_HEADER] = row_summary(row, queries)
        record["max_similarity"] = max((c.max_similarity for c in row), default=0)
        records.append(record)
    return pd.DataFrame(records, columns=list(table.headers) + [NOTE_HEADER, "max_similarity"])
