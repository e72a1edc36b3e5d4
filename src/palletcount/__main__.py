"""Allow ``python -m palletcount``."""

from palletcount.cli import cli

cli()
