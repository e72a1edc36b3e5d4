"""CountService — count-session lifecycle and line-item recording.

This is the persistence collaborator of the aggregation engine. The
domain functions compute; this service loads a session, applies them,
and stores the outcome. It is also where "a finalized session is
read-only" is enforced.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, select, update

from palletcount.config.logging import operation_context
from palletcount.domain.counts import (
    CountSession,
    LineItem,
    append_item,
    build_line_item,
    finalize_session,
    per_product_breakdown,
    session_total,
)
from palletcount.domain.errors import CountError
from palletcount.domain.matching import ProductEntry, resolve
from palletcount.domain.packaging import PackagingFactors
from palletcount.domain.products import Product
from palletcount.domain.quantities import QuantityInput, compute_total
from palletcount.infrastructure.database.schema import count_sessions, line_items, products
from palletcount.services._helpers import now_iso, parse_iso_date, today_iso
from palletcount.services.base import BaseService
from palletcount.services.catalog import fetch_product, search_candidates
from palletcount.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from sqlalchemy import Connection

logger = logging.getLogger(__name__)

_FREE_TEXT_WARNING = "No product matched; pallets, layers and packs are ignored for free text"


class NotFoundError(Exception):
    """A session or product id does not exist in the store."""

    def __init__(self, kind: str, ident: str) -> None:
        self.kind = kind
        self.ident = ident
        super().__init__(f"No {kind} with id {ident!r}")


def load_session(conn: Connection, session_id: str) -> CountSession:
    """Rebuild a :class:`CountSession` and its ordered items from the store.

    Raises:
        NotFoundError: If no session has *session_id*.
    """
    row = conn.execute(select(count_sessions).where(count_sessions.c.id == session_id)).first()
    if row is None:
        raise NotFoundError("session", session_id)

    item_rows = conn.execute(
        select(
            line_items,
            products.c.code.label("product_code"),
            products.c.name.label("product_name"),
            products.c.units_per_pack,
            products.c.packs_per_layer,
            products.c.layers_per_pallet,
            products.c.created_at.label("product_created_at"),
        )
        .select_from(line_items.outerjoin(products, line_items.c.product_id == products.c.id))
        .where(line_items.c.session_id == session_id)
        .order_by(line_items.c.position)
    ).all()

    items: list[LineItem] = []
    for r in item_rows:
        product = None
        if r.product_id is not None:
            product = Product(
                id=r.product_id,
                code=r.product_code,
                name=r.product_name,
                factors=PackagingFactors(
                    units_per_pack=r.units_per_pack,
                    packs_per_layer=r.packs_per_layer,
                    layers_per_pallet=r.layers_per_pallet,
                ),
                created_at=r.product_created_at,
            )
        items.append(
            LineItem(
                id=r.id,
                quantities=QuantityInput(
                    pallets=r.pallets, layers=r.layers, packs=r.packs, units=r.units
                ),
                total_units=r.total_units,
                product=product,
                free_text=r.free_text,
                created_at=r.created_at,
            )
        )

    return CountSession(
        id=row.id,
        date=row.date,
        finalized=bool(row.finalized),
        items=tuple(items),
        created_at=row.created_at,
        export_path=row.export_path,
    )


class CountService(BaseService):
    """Start, fill, total and finalize count sessions."""

    def _resolve_entry(
        self,
        conn: Connection,
        text: str,
        product_id: str | None,
    ) -> ProductEntry:
        """Turn typed text (and an optional explicit pick) into an entry.

        An explicit *product_id* behaves like picking a suggestion; the
        entry text becomes the product's name. Otherwise the text is
        searched and an exact code/name match is auto-selected.
        """
        entry = ProductEntry().edit(text)
        if product_id is not None:
            product = fetch_product(conn, product_id)
            if product is None:
                raise NotFoundError("product", product_id)
            return entry.select(product)

        cfg = self._store.settings.search
        candidates = search_candidates(
            conn,
            text,
            min_query_length=cfg.min_query_length,
            limit=cfg.max_results,
        )
        return entry.apply(resolve(text.strip(), candidates))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self, *, date: str | None = None) -> ServiceResult:
        """Open a new, empty count session.

        *date* must be a real ``YYYY-MM-DD`` calendar date; it defaults to
        today (UTC).
        """
        op = "session_start"
        if date is None:
            date = today_iso()
        else:
            try:
                date = parse_iso_date(date)
            except ValueError:
                return self._fail(
                    op,
                    ErrorCode.INVALID_DATE,
                    f"Invalid count date {date!r}; expected YYYY-MM-DD",
                    date=date,
                )

        session = CountSession(id=self._new_id(), date=date, created_at=now_iso())
        with operation_context(op, session_id=session.id):
            with self._store.transaction() as conn:
                conn.execute(
                    insert(count_sessions).values(
                        id=session.id,
                        date=session.date,
                        finalized=0,
                        created_at=session.created_at,
                    )
                )
            logger.debug("Started count session for %s", session.date)
        return ServiceResult(ok=True, op=op, data=session.to_dict(include_items=False))

    def list_sessions(self) -> ServiceResult:
        """All sessions, newest date first, with item counts and totals."""
        op = "list_sessions"
        with self._store.transaction() as conn:
            rows = conn.execute(
                select(
                    count_sessions,
                    func.count(line_items.c.id).label("item_count"),
                    func.coalesce(func.sum(line_items.c.total_units), 0).label("total_units"),
                )
                .select_from(
                    count_sessions.outerjoin(
                        line_items, line_items.c.session_id == count_sessions.c.id
                    )
                )
                .group_by(count_sessions.c.id)
                .order_by(count_sessions.c.date.desc(), count_sessions.c.created_at.desc())
            ).all()
        items = [
            {
                "id": r.id,
                "date": r.date,
                "finalized": bool(r.finalized),
                "item_count": r.item_count,
                "total_units": r.total_units,
            }
            for r in rows
        ]
        return ServiceResult(ok=True, op=op, data={"count": len(items), "items": items})

    def get(self, session_id: str) -> ServiceResult:
        op = "get_session"
        try:
            with self._store.transaction() as conn:
                session = load_session(conn, session_id)
        except NotFoundError as exc:
            return self._fail(op, ErrorCode.NOT_FOUND, str(exc), id=exc.ident)
        return ServiceResult(ok=True, op=op, data=session.to_dict())

    def preview(
        self,
        text: str,
        quantities: dict[str, int],
        *,
        product_id: str | None = None,
    ) -> ServiceResult:
        """Resolve *text* and compute the total without recording anything."""
        op = "preview"
        try:
            qty = QuantityInput(**quantities)
            with self._store.transaction() as conn:
                entry = self._resolve_entry(conn, text, product_id)
            conversion = compute_total(qty, entry.factors)
        except CountError as exc:
            return self._fail_from(op, exc)
        except NotFoundError as exc:
            return self._fail(op, ErrorCode.NOT_FOUND, str(exc), id=exc.ident)

        warnings: list[str] = []
        if entry.selected is None and (qty.pallets or qty.layers or qty.packs):
            warnings.append(_FREE_TEXT_WARNING)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "text": entry.text,
                "resolved": entry.is_resolved,
                "product": entry.selected.to_dict() if entry.selected is not None else None,
                **qty.to_dict(),
                **conversion.to_dict(),
            },
            warnings=warnings,
        )

    def add_item(
        self,
        session_id: str,
        text: str,
        quantities: dict[str, int],
        *,
        product_id: str | None = None,
    ) -> ServiceResult:
        """Record one line item at the end of *session_id*."""
        with operation_context("add_item", session_id=session_id, product_id=product_id):
            return self._add_item(session_id, text, quantities, product_id=product_id)

    def _add_item(
        self,
        session_id: str,
        text: str,
        quantities: dict[str, int],
        *,
        product_id: str | None,
    ) -> ServiceResult:
        op = "add_item"
        warnings: list[str] = []
        try:
            qty = QuantityInput(**quantities)
            with self._store.transaction() as conn:
                session = load_session(conn, session_id)
                if session.finalized:
                    return self._fail(
                        op,
                        ErrorCode.SESSION_FINALIZED,
                        f"Session {session_id!r} is finalized and read-only",
                        id=session_id,
                    )

                entry = self._resolve_entry(conn, text, product_id)
                item = build_line_item(self._new_id(), entry, qty, created_at=now_iso())
                updated = append_item(session, item)

                conn.execute(
                    insert(line_items).values(
                        id=item.id,
                        session_id=session.id,
                        position=len(updated.items) - 1,
                        product_id=item.product_id,
                        free_text=item.free_text,
                        total_units=item.total_units,
                        created_at=item.created_at,
                        **qty.to_dict(),
                    )
                )
        except CountError as exc:
            return self._fail_from(op, exc)
        except NotFoundError as exc:
            return self._fail(op, ErrorCode.NOT_FOUND, str(exc), id=exc.ident)

        if item.product is None and (qty.pallets or qty.layers or qty.packs):
            warnings.append(_FREE_TEXT_WARNING)
        logger.debug("Appended item %s (%d units)", item.id, item.total_units)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "session_id": session.id,
                "position": len(updated.items) - 1,
                "resolved": item.product is not None,
                "session_total": session_total(updated),
                **item.to_dict(),
            },
            warnings=warnings,
        )

    def total(self, session_id: str) -> ServiceResult:
        op = "session_total"
        try:
            with self._store.transaction() as conn:
                session = load_session(conn, session_id)
        except NotFoundError as exc:
            return self._fail(op, ErrorCode.NOT_FOUND, str(exc), id=exc.ident)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": session.id,
                "item_count": len(session.items),
                "total_units": session_total(session),
            },
        )

    def breakdown(self, session_id: str) -> ServiceResult:
        """Per-product unit totals; free-text items share one bucket."""
        op = "breakdown"
        try:
            with self._store.transaction() as conn:
                session = load_session(conn, session_id)
        except NotFoundError as exc:
            return self._fail(op, ErrorCode.NOT_FOUND, str(exc), id=exc.ident)

        labels: dict[str | None, dict[str, Any]] = {}
        for item in session.items:
            if item.product_id not in labels:
                labels[item.product_id] = {
                    "code": item.product.code if item.product is not None else None,
                    "name": item.product.name if item.product is not None else "(free text)",
                }
        rows = [
            {"product_id": pid, **labels[pid], "total_units": units}
            for pid, units in per_product_breakdown(session).items()
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": session.id,
                "items": rows,
                "total_units": session_total(session),
            },
        )

    def finalize(self, session_id: str) -> ServiceResult:
        """Close *session_id* for further edits. Idempotent."""
        with operation_context("finalize", session_id=session_id):
            return self._finalize(session_id)

    def _finalize(self, session_id: str) -> ServiceResult:
        op = "finalize"
        warnings: list[str] = []
        try:
            with self._store.transaction() as conn:
                session = load_session(conn, session_id)
                if session.finalized:
                    warnings.append(f"Session {session_id!r} was already finalized")
                final = finalize_session(session)
                conn.execute(
                    update(count_sessions)
                    .where(count_sessions.c.id == session_id)
                    .values(finalized=1)
                )
        except NotFoundError as exc:
            return self._fail(op, ErrorCode.NOT_FOUND, str(exc), id=exc.ident)

        logger.debug("Finalized count session")
        return ServiceResult(
            ok=True,
            op=op,
            data=final.to_dict(include_items=False),
            warnings=warnings,
        )

