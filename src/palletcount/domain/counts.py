"""Count aggregation — line items and count sessions.

Pure functions over immutable values. Appending returns a new session;
the input session is never mutated. Whether a finalized session may
still receive items is decided by the persistence layer, not here.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from palletcount.domain.errors import DuplicateItemError, MissingNameError
from palletcount.domain.matching import ProductEntry
from palletcount.domain.products import Product
from palletcount.domain.quantities import QuantityInput, compute_total


@dataclass(frozen=True)
class LineItem:
    """One finalized product entry within a session.

    A resolved item carries ``product``; an unresolved one carries
    ``free_text`` and a total equal to its ``units`` field.
    """

    id: str
    quantities: QuantityInput
    total_units: int
    product: Product | None = None
    free_text: str | None = None
    created_at: str = ""

    @property
    def product_id(self) -> str | None:
        return self.product.id if self.product is not None else None

    @property
    def display_name(self) -> str:
        if self.product is not None:
            return self.product.name
        return self.free_text or ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_code": self.product.code if self.product is not None else None,
            "name": self.display_name,
            "free_text": self.free_text,
            **self.quantities.to_dict(),
            "total_units": self.total_units,
        }


@dataclass(frozen=True)
class CountSession:
    """One inventory-counting event owning an ordered list of items."""

    id: str
    date: str
    finalized: bool = False
    items: tuple[LineItem, ...] = field(default_factory=tuple)
    created_at: str = ""
    export_path: str | None = None

    def to_dict(self, *, include_items: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "date": self.date,
            "finalized": self.finalized,
            "created_at": self.created_at,
            "export_path": self.export_path,
            "item_count": len(self.items),
            "total_units": session_total(self),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


def build_line_item(
    item_id: str,
    entry: ProductEntry,
    quantities: QuantityInput,
    *,
    created_at: str = "",
) -> LineItem:
    """Finalize one product-entry action into a :class:`LineItem`.

    Raises:
        MissingNameError: If the entry text is blank.
        InvalidQuantityError: If any quantity component is negative.
    """
    name = entry.text.strip()
    if not name:
        raise MissingNameError()

    conversion = compute_total(quantities, entry.factors)
    return LineItem(
        id=item_id,
        quantities=quantities,
        total_units=conversion.total,
        product=entry.selected,
        free_text=None if entry.selected is not None else name,
        created_at=created_at,
    )


def append_item(session: CountSession, item: LineItem) -> CountSession:
    """Return *session* with *item* appended to its items.

    Raises:
        DuplicateItemError: If an item with the same id is already present.
    """
    if any(existing.id == item.id for existing in session.items):
        raise DuplicateItemError(item.id, session.id)
    return replace(session, items=(*session.items, item))


def session_total(session: CountSession) -> int:
    """Sum of ``total_units`` over every item in *session*."""
    return sum(item.total_units for item in session.items)


def per_product_breakdown(session: CountSession) -> dict[str | None, int]:
    """Summed ``total_units`` per product id; free text under ``None``."""
    totals: dict[str | None, int] = {}
    for item in session.items:
        key = item.product_id
        totals[key] = totals.get(key, 0) + item.total_units
    return totals


def finalize_session(session: CountSession) -> CountSession:
    """Mark *session* finalized. One-way; idempotent when already final."""
    if session.finalized:
        return session
    return replace(session, finalized=True)
