"""
CLI for copysift - near-duplicate search over spreadsheet text
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table as RichTable

from copysift import __version__
from copysift.config import load_config
from copysift.core.errors import CopySiftError
from copysift.io.exporter import filter_rows, to_dataframe, to_html, to_tsv
from copysift.io.loader import load_table, parse_table
from copysift.session import CopySearchSession
from copysift.utils.logging import setup_logging

console = Console()

_threshold_option = click.option(
    "--threshold", "-t", type=float, default=None,
    help="Jaccard threshold 0-1 [env: COPYSIFT_THRESHOLD]",
)
_shingle_option = click.option(
    "--shingle-size", type=int, default=None,
    help="Characters per shingle [env: COPYSIFT_SHINGLE_SIZE]",
)
_config_option = click.option(
    "--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False), default=None,
    help="YAML settings file",
)
_output_option = click.option(
    "--output", "-o", type=click.Path(dir_okay=False), default=None,
    help="Write the annotated table (.tsv, .html or .json)",
)


def _open_session(source: str, config_path: Optional[str], verbose: bool = False, **overrides) -> CopySearchSession:
    config = load_config(config_path, **overrides)
    setup_logging(config.log_level, verbose=verbose)
    session = CopySearchSession(config)
    if source == "-":
        session.load(parse_table(sys.stdin.read()))
    else:
        session.load(load_table(source))
    return session


def _write_output(session: CopySearchSession, output: str, highlighted_only: bool) -> None:
    path = Path(output)
    rows = filter_rows(session.table, "highlighted" if highlighted_only else "all")
    suffix = path.suffix.lower()
    if suffix == ".html":
        path.write_text(to_html(session.table, rows, session.queries), encoding="utf-8")
    elif suffix == ".json":
        records = to_dataframe(session.table, session.queries).to_dict(orient="records")
        if highlighted_only:
            records = [records[i] for i in session.matched_row_indices()]
        path.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8")
    else:
        path.write_text(to_tsv(session.table, rows, session.queries), encoding="utf-8")
    console.print(f"[green]✓[/green] Wrote {len(rows)} rows to {path}")


def _print_rows(session: CopySearchSession, column, limit: int) -> None:
    table = RichTable(show_header=True, header_style="bold cyan")
    table.add_column("Row", justify="right")
    table.add_column("Value")
    table.add_column("Best %", justify="right")
    table.add_column("Note")

    indices = session.matched_row_indices()
    for ri in indices[:limit]:
        row = session.table.rows[ri]
        cells = [row[column]] if isinstance(column, int) else [c for c in row if c.highlights]
        cell = next((c for c in cells if c.highlights), cells[0] if cells else None)
        if cell is None:
            continue
        color = cell.highlights[0].color if cell.highlights else "white"
        value = cell.value if len(cell.value) <= 80 else cell.value[:77] + "..."
        note = " | ".join(c.note for c in row if c.note)
        table.add_row(str(ri), f"[{color}]{escape(value)}[/]", str(cell.max_similarity), escape(note))

    console.print(table)
    if len(indices) > limit:
        console.print(f"[dim]... {len(indices) - limit} more rows[/dim]")


@click.group()
@click.version_option(version=__version__)
def main():
    """copysift CLI - shingle Jaccard search and duplicate clustering for pasted tables"""
    pass


@main.command()
def info():
    """Show tool information"""
    console.print("[bold blue]copysift: near-duplicate copy search[/bold blue]")
    console.print(f"Version: {__version__}")
    console.print("\nAlgorithms:")
    console.print("  - [bold]Shingles[/bold]: character n-grams of normalized text (default n=3)")
    console.print("  - [bold]Jaccard[/bold]: exact |A∩B| / |A∪B| over shingle sets")
    console.print("  - [bold]Union-Find[/bold]: transitive duplicate grouping")


@main.command()
@click.argument("source", type=click.Path(allow_dash=True))
@click.option("--column", "-k", default="0", show_default=True, help="Column index or header name")
@_threshold_option
@_shingle_option
@_config_option
@_output_option
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def dedup(source, column, threshold, shingle_size, config_path, output, verbose):
    """Find groups of near-duplicate rows in one column of SOURCE ('-' for stdin)."""
    try:
        session = _open_session(source, config_path, threshold=threshold, shingle_size=shingle_size, verbose=verbose)
        col = session.table.resolve_column(column)
        groups = session.auto_dedup(col)
    except CopySiftError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)

    if not groups:
        console.print("[green]✓[/green] No duplicates found")
        return

    table = RichTable(show_header=True, header_style="bold magenta")
    table.add_column("Group", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Rows")
    table.add_column("Example")
    for group in groups:
        example = session.table.rows[group.rows[0]][col].value
        table.add_row(
            f"[{group.color}]{group.index + 1}[/]",
            str(group.size),
            ", ".join(str(r) for r in group.rows),
            escape(example if len(example) <= 60 else example[:57] + "..."),
        )
    console.print(table)

    total = sum(g.size for g in groups)
    console.print(f"\n[bold]{len(groups)}[/bold] duplicate groups, {total} rows")

    if output:
        _write_output(session, output, highlighted_only=False)


@main.command()
@click.argument("source", type=click.Path(allow_dash=True))
@click.option("--query", "-q", "queries", multiple=True, required=True, help="Search text (repeatable)")
@click.option("--column", "-k", default="all", show_default=True, help="Column index, header name or 'all'")
@click.option("--mode", "-m", type=click.Choice(["contains", "similar"]), default=None,
              help="Search mode [env: COPYSIFT_MODE]")
@_threshold_option
@_shingle_option
@_config_option
@_output_option
@click.option("--limit", default=50, show_default=True, help="Max rows to print")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def search(source, queries, column, mode, threshold, shingle_size, config_path, output, limit, verbose):
    """Highlight rows of SOURCE matching each --query ('-' for stdin)."""
    try:
        session = _open_session(
            source, config_path, threshold=threshold, shingle_size=shingle_size, mode=mode, verbose=verbose,
        )
        col = session.set_search_column(session.table.resolve_column(column))
        for text in queries:
            session.add_query(text)
        counts = session.run_all()
    except CopySiftError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)

    for query in session.queries:
        console.print(f"[{query.color}]■[/] {escape(query.text)}: [bold]{counts.get(query.id, 0)}[/bold] rows")
    console.print()
    _print_rows(session, col, limit)

    if output:
        _write_output(session, output, highlighted_only=True)


@main.command()
@click.option("--transport", default="stdio", show_default=True, help="MCP transport")
def serve(transport):
    """Run the copy_search MCP tool server"""
    from copysift.servers.copy_search.server import server

    logger.info(f"Starting copy_search server ({transport})")
    server.run(transport=transport)


if __name__ == "__main__":
    main()
