"""Command group: count-session export."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from palletcount.commands._base import CountGroup

if TYPE_CHECKING:
    from palletcount.commands._context import AppContext

_EXPORT_EXAMPLES = """\
  palletcount export session <session-id> --output count.csv
  palletcount export session <session-id> --output count.json --format json"""


@click.group(cls=CountGroup, examples=_EXPORT_EXAMPLES)
def export() -> None:
    """Export count sessions in portable formats."""


@export.command()
@click.argument("session_id")
@click.option(
    "--output",
    "output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Destination file.",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["csv", "json"], case_sensitive=False),
    default=None,
    help="Output format. Defaults to [export] default_format.",
)
@click.pass_obj
def session(app: AppContext, session_id: str, output: Path, fmt: str | None) -> None:
    """Write one session's items and totals to a file."""
    from palletcount.services.export import ExportService

    app.emit(ExportService(app.store).export_session(session_id, output, fmt=fmt))
