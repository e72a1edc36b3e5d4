"""Command group: catalog products (add, search, list, show)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from palletcount.commands._base import CountGroup

if TYPE_CHECKING:
    from palletcount.commands._context import AppContext

_PRODUCT_EXAMPLES = """\
  palletcount product add BR-350 "Brahma Lata 350ml" \\
      --units-per-pack 12 --packs-per-layer 10 --layers-per-pallet 8
  palletcount product search brahma
  palletcount product list
  palletcount --json product show 3f2a..."""


@click.group(cls=CountGroup, examples=_PRODUCT_EXAMPLES)
def product() -> None:
    """Manage catalog products and their packaging factors."""


@product.command(
    examples="""\
  palletcount product add BR-350 "Brahma Lata 350ml" \\
      --units-per-pack 12 --packs-per-layer 10 --layers-per-pallet 8"""
)
@click.argument("code")
@click.argument("name")
@click.option("--units-per-pack", type=int, required=True, help="Units in one pack.")
@click.option("--packs-per-layer", type=int, required=True, help="Packs in one layer.")
@click.option("--layers-per-pallet", type=int, required=True, help="Layers in one pallet.")
@click.pass_obj
def add(
    app: AppContext,
    code: str,
    name: str,
    units_per_pack: int,
    packs_per_layer: int,
    layers_per_pallet: int,
) -> None:
    """Register a product with its packaging factors."""
    from palletcount.services.catalog import CatalogService

    app.emit(
        CatalogService(app.store).add_product(
            code,
            name,
            units_per_pack=units_per_pack,
            packs_per_layer=packs_per_layer,
            layers_per_pallet=layers_per_pallet,
        )
    )


@product.command(
    examples="""\
  palletcount product search BR-350
  palletcount product search lata"""
)
@click.argument("query")
@click.pass_obj
def search(app: AppContext, query: str) -> None:
    """Find products whose code or name contains QUERY."""
    from palletcount.services.catalog import CatalogService

    app.emit(CatalogService(app.store).search(query))


@product.command(name="list")
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List all products ordered by code."""
    from palletcount.services.catalog import CatalogService

    app.emit(CatalogService(app.store).list_products())


@product.command()
@click.argument("product_id")
@click.pass_obj
def show(app: AppContext, product_id: str) -> None:
    """Show one product with derived units per layer and pallet."""
    from palletcount.services.catalog import CatalogService

    app.emit(CatalogService(app.store).get_product(product_id))
