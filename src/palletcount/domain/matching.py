"""Product match resolution and entry selection state.

:func:`resolve` decides whether typed text names a catalog product
exactly. :class:`ProductEntry` holds the text plus any selected product,
and drops the selection as soon as the text diverges from it.

Known ambiguity: when several candidates match (by code or by name),
the first one in candidate order wins. There is no precedence between a
code match and a name match. Callers that need determinism must order
candidates themselves (the catalog search orders by code).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Final

from palletcount.domain.packaging import PackagingFactors
from palletcount.domain.products import Product


@dataclass(frozen=True)
class ExactMatch:
    """The query names exactly this product."""

    product: Product


@dataclass(frozen=True)
class _NoMatch:
    """The query names no candidate; treat it as free text."""

    def __repr__(self) -> str:
        return "NoMatch"


NoMatch: Final = _NoMatch()

ResolvedMatch = ExactMatch | _NoMatch


def _key(text: str) -> str:
    return text.casefold()


def resolve(query: str, candidates: Iterable[Product]) -> ResolvedMatch:
    """Resolve *query* against *candidates* by exact code or name.

    Comparison is case-insensitive equality, never substring or prefix.
    An empty query is evaluated like any other string.
    """
    wanted = _key(query)
    for product in candidates:
        if _key(product.code) == wanted or _key(product.name) == wanted:
            return ExactMatch(product)
    return NoMatch


@dataclass(frozen=True)
class ProductEntry:
    """Snapshot of one product-entry form: typed text plus selection.

    The selection caches which product's factors apply. Every transition
    returns a new snapshot.
    """

    text: str = ""
    selected: Product | None = None

    @property
    def factors(self) -> PackagingFactors | None:
        return self.selected.factors if self.selected is not None else None

    @property
    def is_resolved(self) -> bool:
        return self.selected is not None

    def edit(self, text: str) -> ProductEntry:
        """Change the typed text. A changed text clears the selection."""
        if text == self.text:
            return self
        return ProductEntry(text=text, selected=None)

    def select(self, product: Product) -> ProductEntry:
        """Explicitly pick *product*; the text becomes its name."""
        return ProductEntry(text=product.name, selected=product)

    def apply(self, match: ResolvedMatch) -> ProductEntry:
        """Auto-select an exact match unless a product is already selected."""
        if isinstance(match, ExactMatch) and self.selected is None:
            return self.select(match.product)
        return self

    def clear(self) -> ProductEntry:
        return replace(self, text="", selected=None)
