from .exporter import filter_rows, rows_for_query, to_dataframe, to_html, to_tsv
from .loader import from_dataframe, from_records, load_table, parse_table

__all__ = [
    "filter_rows",
    "from_dataframe",
    "from_records",
    "load_table",
    "parse_table",
    "rows_for_query",
    "to_dataframe",
    "to_html",
    "to_tsv",
]
