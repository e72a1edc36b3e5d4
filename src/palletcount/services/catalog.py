"""CatalogService — product registration and search.

Search is the product-search collaborator of the matching engine: it
returns an ordered snapshot of candidates that the caller feeds to
:func:`palletcount.domain.matching.resolve`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import case, func, insert, or_, select
from sqlalchemy.exc import IntegrityError

from palletcount.domain.errors import InvalidFactorError
from palletcount.domain.packaging import PackagingFactors
from palletcount.domain.products import Product
from palletcount.infrastructure.database.schema import products
from palletcount.services._helpers import now_iso
from palletcount.services.base import BaseService
from palletcount.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from sqlalchemy import Connection, Row

logger = logging.getLogger(__name__)


def product_from_row(row: Row[Any]) -> Product:
    """Build a :class:`Product` from a ``products`` row."""
    return Product(
        id=row.id,
        code=row.code,
        name=row.name,
        factors=PackagingFactors(
            units_per_pack=row.units_per_pack,
            packs_per_layer=row.packs_per_layer,
            layers_per_pallet=row.layers_per_pallet,
        ),
        created_at=row.created_at,
    )


def fetch_product(conn: Connection, product_id: str) -> Product | None:
    row = conn.execute(select(products).where(products.c.id == product_id)).first()
    return product_from_row(row) if row is not None else None


def search_candidates(
    conn: Connection,
    query: str,
    *,
    min_query_length: int,
    limit: int,
) -> list[Product]:
    """Return products whose code or name contains *query*.

    Containment is tested on casefolded text with ``instr``, so ``%`` and
    ``_`` in *query* are literal. Queries shorter than *min_query_length*
    (after stripping) never hit the database. Exact code/name matches sort
    first, then by code, so a full-length match is never pushed out by
    *limit*.
    """
    needle = query.strip()
    if len(needle) < min_query_length:
        logger.debug("Search skipped: %r shorter than %d", needle, min_query_length)
        return []

    folded = needle.casefold()
    code_key = func.casefold(products.c.code)
    name_key = func.casefold(products.c.name)
    exact_first = case((or_(code_key == folded, name_key == folded), 0), else_=1)
    rows = conn.execute(
        select(products)
        .where(
            or_(
                func.instr(code_key, folded) > 0,
                func.instr(name_key, folded) > 0,
            )
        )
        .order_by(exact_first, products.c.code)
        .limit(limit)
    ).all()
    return [product_from_row(r) for r in rows]


class CatalogService(BaseService):
    """Register and look up catalog products."""

    def add_product(
        self,
        code: str,
        name: str,
        *,
        units_per_pack: int,
        packs_per_layer: int,
        layers_per_pallet: int,
    ) -> ServiceResult:
        """Register a product with its packaging factors."""
        op = "add_product"
        code = code.strip()
        name = name.strip()
        if not code or not name:
            return self._fail(op, ErrorCode.MISSING_NAME, "Product code and name are required")

        try:
            factors = PackagingFactors(
                units_per_pack=units_per_pack,
                packs_per_layer=packs_per_layer,
                layers_per_pallet=layers_per_pallet,
            )
        except InvalidFactorError as exc:
            return self._fail_from(op, exc)

        product = Product(
            id=self._new_id(),
            code=code,
            name=name,
            factors=factors,
            created_at=now_iso(),
        )
        try:
            with self._store.transaction() as conn:
                conn.execute(
                    insert(products).values(
                        id=product.id,
                        code=product.code,
                        name=product.name,
                        units_per_pack=factors.units_per_pack,
                        packs_per_layer=factors.packs_per_layer,
                        layers_per_pallet=factors.layers_per_pallet,
                        created_at=product.created_at,
                    )
                )
        except IntegrityError:
            return self._fail(
                op,
                ErrorCode.DUPLICATE_CODE,
                f"A product with code {code!r} already exists",
                code=code,
            )

        logger.debug("Registered product %s (%s)", product.id, product.code)
        return ServiceResult(ok=True, op=op, data=product.to_dict())

    def get_product(self, product_id: str) -> ServiceResult:
        op = "get_product"
        with self._store.transaction() as conn:
            product = fetch_product(conn, product_id)
        if product is None:
            return self._fail(
                op, ErrorCode.NOT_FOUND, f"No product with id {product_id!r}", id=product_id
            )
        return ServiceResult(ok=True, op=op, data=product.to_dict())

    def search(self, query: str) -> ServiceResult:
        """Search products by code or name (case-insensitive substring).

        ``meta`` echoes the ``[search]`` timing knobs so an interactive
        front-end can debounce keystrokes without reading the config file.
        """
        op = "search_products"
        cfg = self._store.settings.search
        with self._store.transaction() as conn:
            found = search_candidates(
                conn,
                query,
                min_query_length=cfg.min_query_length,
                limit=cfg.max_results,
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "query": query,
                "count": len(found),
                "items": [p.to_dict() for p in found],
            },
            meta={
                "debounce_ms": cfg.debounce_ms,
                "min_query_length": cfg.min_query_length,
            },
        )

    def list_products(self) -> ServiceResult:
        op = "list_products"
        with self._store.transaction() as conn:
            rows = conn.execute(select(products).order_by(products.c.code)).all()
        items = [product_from_row(r).to_dict() for r in rows]
        return ServiceResult(ok=True, op=op, data={"count": len(items), "items": items})
