"""Manifest diff utilities — coloured unified diff for dry runs."""

from __future__ import annotations

import difflib

from rich.console import Console
from rich.syntax import Syntax


def unified_diff(path: str, before: str, after: str) -> str:
    """Unified diff of a manifest's text before and after a tag update."""
    lines = difflib.unified_diff(
        before.splitlines(keepends=True),
        after.splitlines(keepends=True),
        fromfile=f"a/{path}",
        tofile=f"b/{path}",
        lineterm="",
    )
    return "\n".join(line.rstrip() for line in lines)


def show_diff(path: str, before: str, after: str, console: Console) -> None:
    """Print a coloured diff, or a note when the manifest would not change."""
    diff_text = unified_diff(path, before, after)
    if not diff_text:
        console.print(f"[green]No differences for {path}.[/]")
        return
    console.print(Syntax(diff_text, "diff", theme="monokai", line_numbers=False))
