"""
Rendering functions for repodriver output.

This module handles all pretty-printing and table formatting.
Commands return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import Any, Dict, List, Optional

console = Console()


def render_table(headers: List[str], rows: List[List[str]], title: Optional[str] = None) -> None:
    """
    Render a generic table with the given headers and rows.

    Args:
        headers: List of column headers
        rows: List of rows, where each row is a list of values
        title: Optional table title
    """
    if not rows:
        console.print("[yellow]No data to display.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    for header in headers:
        table.add_column(header)

    for row in rows:
        table.add_row(*[str(val) for val in row])

    console.print(table)


def render_refs_table(refs: List[Dict[str, Any]], title: str) -> None:
    """Render tag or branch listings as name/commit rows."""
    render_table(
        ['Name', 'Commit'],
        [[ref['name'], ref['commit']] for ref in refs],
        title=title
    )


def render_record(record: Dict[str, Any], title: Optional[str] = None) -> None:
    """Render a flat key/value view of a record."""
    rows = []
    for key, value in record.items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                rows.append([f"{key}.{sub_key}", sub_value])
        else:
            rows.append([key, '' if value is None else value])
    render_table(['Field', 'Value'], rows, title=title)
