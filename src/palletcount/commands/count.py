"""Command group: count sessions (start, add, preview, show, total, ...)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from palletcount.commands._base import CountGroup, QuantityCommand

if TYPE_CHECKING:
    from datetime import datetime

    from palletcount.commands._context import AppContext

_COUNT_EXAMPLES = """\
  palletcount count start
  palletcount count add <session-id> BR-350 --pallets 2 --layers 3 --units 5
  palletcount count add <session-id> "loose cans" --units 17
  palletcount count total <session-id>
  palletcount count finalize <session-id>"""


@click.group(cls=CountGroup, examples=_COUNT_EXAMPLES)
def count() -> None:
    """Record and total inventory count sessions."""


@count.command(
    examples="""\
  palletcount count start
  palletcount count start --date 2026-10-18"""
)
@click.option(
    "--date",
    "date_",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Count date (YYYY-MM-DD). Defaults to today.",
)
@click.pass_obj
def start(app: AppContext, date_: datetime | None) -> None:
    """Open a new count session."""
    from palletcount.services.counting import CountService

    date = date_.date().isoformat() if date_ is not None else None
    app.emit(CountService(app.store).start(date=date))


@count.command(name="list")
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List count sessions, newest first."""
    from palletcount.services.counting import CountService

    app.emit(CountService(app.store).list_sessions())


@count.command(
    cls=QuantityCommand,
    examples="""\
  palletcount count add <session-id> BR-350 --pallets 1 --packs 4
  palletcount count add <session-id> "Brahma Lata 350ml" --layers 2
  palletcount count add <session-id> anything --product-id <product-id> --units 3"""
)
@click.argument("session_id")
@click.argument("text")
@click.pass_obj
def add(
    app: AppContext,
    session_id: str,
    text: str,
    product_id: str | None,
    **quantities: int,
) -> None:
    """Add a line item. TEXT is matched exactly against product code or name."""
    from palletcount.services.counting import CountService

    app.emit(
        CountService(app.store).add_item(
            session_id,
            text,
            quantities,
            product_id=product_id,
        )
    )


@count.command(cls=QuantityCommand)
@click.argument("text")
@click.pass_obj
def preview(
    app: AppContext,
    text: str,
    product_id: str | None,
    **quantities: int,
) -> None:
    """Show the unit total for TEXT and quantities without recording it."""
    from palletcount.services.counting import CountService

    app.emit(
        CountService(app.store).preview(
            text,
            quantities,
            product_id=product_id,
        )
    )


@count.command()
@click.argument("session_id")
@click.pass_obj
def show(app: AppContext, session_id: str) -> None:
    """Show a session with all of its items."""
    from palletcount.services.counting import CountService

    app.emit(CountService(app.store).get(session_id))


@count.command()
@click.argument("session_id")
@click.pass_obj
def total(app: AppContext, session_id: str) -> None:
    """Print the session's total in units."""
    from palletcount.services.counting import CountService

    app.emit(CountService(app.store).total(session_id))


@count.command()
@click.argument("session_id")
@click.pass_obj
def breakdown(app: AppContext, session_id: str) -> None:
    """Print unit totals per product; free-text items are grouped."""
    from palletcount.services.counting import CountService

    app.emit(CountService(app.store).breakdown(session_id))


@count.command()
@click.argument("session_id")
@click.pass_obj
def finalize(app: AppContext, session_id: str) -> None:
    """Mark a session as finalized. No items can be added afterwards."""
    from palletcount.services.counting import CountService

    app.emit(CountService(app.store).finalize(session_id))
