"""Subcommand modules for palletcount.

Provides register_commands() which uses deferred imports to keep
``palletcount --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups on the root CLI group."""
    from palletcount.commands.count import count
    from palletcount.commands.export import export
    from palletcount.commands.product import product

    cli.add_command(product)
    cli.add_command(count)
    cli.add_command(export)
