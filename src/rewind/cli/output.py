"""Output formatting utilities for the CLI."""

from __future__ import annotations

import json
from typing import Any

import click


def print_table(headers: list[str], rows: list[list[str]]) -> None:
    """Print a bordered ASCII table sized to its widest cells."""
    if not headers:
        return

    col_widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(headers)]):
            col_widths[i] = max(col_widths[i], len(str(cell)))

    def _fmt_row(cells: list[str]) -> str:
        parts = [str(cell).ljust(col_widths[i]) for i, cell in enumerate(cells)]
        return "| " + " | ".join(parts) + " |"

    separator = "+-" + "-+-".join("-" * w for w in col_widths) + "-+"

    click.echo(separator)
    click.echo(_fmt_row(headers))
    click.echo(separator)
    for row in rows:
        padded = list(row) + [""] * (len(headers) - len(row))
        click.echo(_fmt_row(padded[: len(headers)]))
    click.echo(separator)


def print_json(data: Any, *, err: bool = False) -> None:
    """Print data as formatted JSON to stdout, or stderr with ``err``."""
    click.echo(json.dumps(data, indent=2, default=str), err=err)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    click.echo(f"Error: {message}", err=True)


def print_detail(label: str, value: Any) -> None:
    click.echo(f"  {label}: {value}")


def print_list(title: str, items: list[str]) -> None:
    if not items:
        return
    click.echo(f"{title}:")
    for item in items:
        click.echo(f"  - {item}")
