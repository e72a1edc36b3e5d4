"""Click base classes shared by the palletcount command groups.

``--examples`` prints a command's usage examples and exits, so ``--help``
stays short. :class:`QuantityCommand` adds the four granularity flags
(and ``--product-id``) to every command that takes a count entry.
"""

from __future__ import annotations

from typing import Any

import click

QUANTITY_FIELDS: tuple[str, ...] = ("pallets", "layers", "packs", "units")

_QUANTITY_HELP = {
    "pallets": "Pallets.",
    "layers": "Layers (lastros).",
    "packs": "Packs.",
    "units": "Loose units.",
}


def _examples_option(examples: str) -> click.Option:
    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=show_examples,
        help="Show usage examples.",
    )


class CountCommand(click.Command):
    """Command that accepts ``examples=`` and exposes them via ``--examples``."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option(examples))


class QuantityCommand(CountCommand):
    """Command taking ``--product-id`` and ``--pallets/--layers/--packs/--units``.

    Negative values are passed through so the engine can reject them with
    ``INVALID_QUANTITY`` rather than a usage error.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.params.append(
            click.Option(
                ["--product-id"],
                default=None,
                help="Pick this product explicitly instead of matching the text.",
            )
        )
        for name in QUANTITY_FIELDS:
            self.params.append(
                click.Option(
                    [f"--{name}"],
                    type=int,
                    default=0,
                    show_default=True,
                    help=_QUANTITY_HELP[name],
                )
            )


class CountGroup(click.Group):
    """Group whose subcommands default to :class:`CountCommand`."""

    command_class = CountCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option(examples))
