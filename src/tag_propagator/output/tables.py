"""Rich table rendering helpers."""

from __future__ import annotations

from typing import Any, Sequence

from rich.table import Table
from rich.text import Text

# Colour for each manifest / publish status value
STATUS_STYLES = {
    "updated": "green",
    "published": "green",
    "unchanged": "dim",
    "no-op": "dim",
    "skipped": "yellow",
    "publish-failed": "bold red",
}


def status_cell(value: Any) -> Text:
    """Render a status enum (or its string value) in its colour."""
    text = str(getattr(value, "value", value))
    return Text(text, style=STATUS_STYLES.get(text, ""))


def make_table(
    title: str | None,
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
    *,
    show_lines: bool = False,
) -> Table:
    """Build a Rich Table from column headers and row data.

    Cells that are already Rich ``Text`` are kept as-is.
    """
    table = Table(title=title, show_lines=show_lines)
    for col in columns:
        table.add_column(col, no_wrap=False)
    for row in rows:
        table.add_row(*(
            cell if isinstance(cell, Text) else str(cell) if cell is not None else ""
            for cell in row
        ))
    return table


def kv_table(data: dict[str, Any], *, title: str | None = None) -> Table:
    """Render a key-value dict as a two-column table; lists are comma-joined."""
    table = Table(title=title, show_header=False, show_lines=False)
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Value")
    for key, value in data.items():
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value)
        table.add_row(key, str(value) if value is not None else "")
    return table
