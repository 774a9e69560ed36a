"""
Copy Search Server - Shingle Jaccard search and duplicate clustering

This MCP server exposes the copysift engines as tools:
- find_duplicates: group near-duplicate rows of one column
- search_similar: highlight rows matching one or more queries
- compare_texts: similarity of two strings
"""

import os
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from copysift.config import load_config
from copysift.core.models import Table
from copysift.io.exporter import to_dataframe
from copysift.server import SiftServer
from copysift.session import CopySearchSession
from copysift.similarity import jaccard, shingles, to_percent

server = SiftServer(
    "copy_search",
    parameter_file=os.path.join(os.path.dirname(__file__), "parameters.yml")
)


def _session(table: Table, threshold: Optional[float], shingle_size: Optional[int], **overrides) -> CopySearchSession:
    config = load_config(threshold=threshold, shingle_size=shingle_size, **overrides)
    session = CopySearchSession(config)
    session.load(table)
    return session


@server.tool()
def find_duplicates(
    data: Any,
    column: Union[int, str] = 0,
    threshold: Optional[float] = None,
    shingle_size: Optional[int] = None,
    return_rows: bool = False,
) -> Dict[str, Any]:
    """
    Cluster near-duplicate rows of one column using shingle Jaccard + Union-Find.

    Args:
        data: Records, file path, or pasted TSV/CSV text
        column: Column index or header name to compare
        threshold: Minimum Jaccard similarity (0-1) to link two rows; parameters.yml or settings default
        shingle_size: Characters per shingle; parameters.yml or settings default
        return_rows: Also return every row with its note

    Returns:
        Duplicate groups (rows, color, size) and optionally the annotated rows
    """
    table = server.get_table(data)
    if table.is_empty:
        return {"groups": [], "message": "no rows"}

    session = _session(table, threshold, shingle_size)
    groups = session.auto_dedup(table.resolve_column(column))

    logger.info(f"find_duplicates: {len(groups)} groups over {len(table)} rows")
    result: Dict[str, Any] = {
        "groups": [g.to_json() for g in groups],
        "message": f"{len(groups)} duplicate groups" if groups else "no duplicates found",
    }
    if return_rows:
        result["rows"] = to_dataframe(session.table).to_dict(orient="records")
    return result


@server.tool()
def search_similar(
    data: Any,
    queries: List[str],
    column: Union[int, str] = "all",
    mode: Optional[str] = None,
    threshold: Optional[float] = None,
    shingle_size: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Highlight cells matching each query and report matched rows per query.

    Args:
        data: Records, file path, or pasted TSV/CSV text
        queries: Search texts
        column: Column index, header name, or "all"
        mode: "contains" (substring) or "similar" (shingle Jaccard)
        threshold: Minimum similarity for "similar" mode
        shingle_size: Characters per shingle

    Returns:
        Per-query matched row counts and the matched rows with notes
    """
    table = server.get_table(data)
    session = _session(table, threshold, shingle_size, mode=mode)
    if not table.is_empty:
        session.set_search_column(table.resolve_column(column))

    for text in queries:
        session.add_query(text)
    counts = session.run_all()

    frame = to_dataframe(session.table, session.queries)
    matched = frame.iloc[session.matched_row_indices()]
    return {
        "counts": [{"query": q.text, "color": q.color, "rows": counts.get(q.id, 0)} for q in session.queries],
        "rows": matched.to_dict(orient="records"),
    }


@server.tool()
def compare_texts(text_a: str, text_b: str, shingle_size: Optional[int] = None) -> Dict[str, Any]:
    """
    Jaccard similarity of two texts' character shingles.

    Returns:
        Raw similarity and the rounded percentage
    """
    n = load_config(shingle_size=shingle_size).shingle_size
    similarity = jaccard(shingles(text_a, n), shingles(text_b, n))
    return {"similarity": round(similarity, 4), "percent": to_percent(similarity)}


if __name__ == "__main__":
    server.run()
