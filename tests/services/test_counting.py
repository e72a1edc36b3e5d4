"""Tests for CountService — sessions, line items, totals and finalization."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from palletcount.infrastructure.store import CountStore
from palletcount.services.counting import CountService, NotFoundError, load_session
from tests.conftest import add_product, qty, start_session


@pytest.fixture
def beer(store: CountStore) -> dict:
    """Product with 10 units/pack, 5 packs/layer, 20 layers/pallet."""
    return add_product(store, "BR-350", "Brahma Lata 350ml")


class TestStart:
    def test_defaults_to_today(self, store: CountStore) -> None:
        from palletcount.services._helpers import today_iso

        result = CountService(store).start()
        assert result.ok
        assert result.op == "session_start"
        assert result.data["date"] == today_iso()
        assert result.data["finalized"] is False
        assert result.data["item_count"] == 0
        assert result.data["total_units"] == 0
        assert "items" not in result.data

    def test_explicit_date_and_id(self, store: CountStore, id_factory: Callable[[], str]) -> None:
        result = CountService(store, id_factory=id_factory).start(date="2024-03-01")
        assert result.data["id"] == "id-0001"
        assert result.data["date"] == "2024-03-01"

    def test_date_is_normalized(self, store: CountStore) -> None:
        result = CountService(store).start(date=" 2024-1-5 ")
        assert result.ok
        assert result.data["date"] == "2024-01-05"

    @pytest.mark.parametrize("date", ["banana", "18/10/2026", "2024-02-30", ""])
    def test_invalid_date_rejected(self, store: CountStore, date: str) -> None:
        result = CountService(store).start(date=date)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_DATE"
        assert result.error.detail == {"date": date}
        assert CountService(store).list_sessions().data["count"] == 0

    def test_sessions_are_independent(self, store: CountStore, beer: dict) -> None:
        s1 = start_session(store)
        s2 = start_session(store)
        svc = CountService(store)
        svc.add_item(s1["id"], "BR-350", qty(pallets=1))
        assert svc.total(s1["id"]).data["total_units"] == 1000
        assert svc.total(s2["id"]).data["total_units"] == 0


class TestAddItem:
    def test_exact_code_resolves(self, store: CountStore, beer: dict) -> None:
        session = start_session(store)
        result = CountService(store).add_item(session["id"], "br-350", qty(pallets=1))
        assert result.ok
        assert result.op == "add_item"
        assert result.data["resolved"] is True
        assert result.data["product_id"] == beer["id"]
        assert result.data["name"] == "Brahma Lata 350ml"
        assert result.data["total_units"] == 1000
        assert result.data["session_total"] == 1000
        assert result.warnings == []

    def test_exact_name_resolves(self, store: CountStore, beer: dict) -> None:
        session = start_session(store)
        result = CountService(store).add_item(
            session["id"], "  brahma lata 350ML ", qty(layers=1, packs=2, units=3)
        )
        assert result.data["resolved"] is True
        assert result.data["total_units"] == 73

    def test_accented_name_resolves_across_case(self, store: CountStore) -> None:
        water = add_product(
            store,
            "AG-1",
            "ÁGUA MINERAL",
            units_per_pack=6,
            packs_per_layer=10,
            layers_per_pallet=5,
        )
        session = start_session(store)
        result = CountService(store).add_item(session["id"], "água mineral", qty(pallets=1))
        assert result.ok
        assert result.data["resolved"] is True
        assert result.data["product_id"] == water["id"]
        assert result.data["total_units"] == 300
        assert result.warnings == []

    def test_partial_text_is_free_text(self, store: CountStore, beer: dict) -> None:
        session = start_session(store)
        result = CountService(store).add_item(session["id"], "brahma", qty(units=17))
        assert result.ok
        assert result.data["resolved"] is False
        assert result.data["product_id"] is None
        assert result.data["free_text"] == "brahma"
        assert result.data["total_units"] == 17

    def test_free_text_ignores_larger_units_with_warning(self, store: CountStore) -> None:
        session = start_session(store)
        result = CountService(store).add_item(
            session["id"], "loose cans", qty(pallets=2, packs=3, units=4)
        )
        assert result.ok
        assert result.data["total_units"] == 4
        assert len(result.warnings) == 1
        assert "ignored" in result.warnings[0]

    def test_explicit_product_id(self, store: CountStore, beer: dict) -> None:
        session = start_session(store)
        result = CountService(store).add_item(
            session["id"], "whatever I typed", qty(packs=1), product_id=beer["id"]
        )
        assert result.data["resolved"] is True
        assert result.data["name"] == beer["name"]
        assert result.data["total_units"] == 10

    def test_explicit_product_id_not_found(self, store: CountStore) -> None:
        session = start_session(store)
        result = CountService(store).add_item(
            session["id"], "x", qty(units=1), product_id="missing"
        )
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
        assert result.error.detail == {"id": "missing"}

    def test_unknown_session(self, store: CountStore) -> None:
        result = CountService(store).add_item("nope", "x", qty(units=1))
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"

    def test_negative_quantity_rejected_and_not_recorded(
        self, store: CountStore, beer: dict
    ) -> None:
        session = start_session(store)
        svc = CountService(store)
        result = svc.add_item(session["id"], "BR-350", qty(layers=-1))
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_QUANTITY"
        assert result.error.detail == {"field": "layers", "value": -1}
        assert svc.total(session["id"]).data["item_count"] == 0

    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_text_rejected(self, store: CountStore, text: str) -> None:
        session = start_session(store)
        result = CountService(store).add_item(session["id"], text, qty(units=1))
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "MISSING_NAME"

    def test_positions_and_running_total(self, store: CountStore, beer: dict) -> None:
        session = start_session(store)
        svc = CountService(store)
        first = svc.add_item(session["id"], "BR-350", qty(layers=1))
        second = svc.add_item(session["id"], "loose", qty(units=5))
        assert first.data["position"] == 0
        assert second.data["position"] == 1
        assert second.data["session_total"] == 105

    def test_finalized_session_rejects_items(self, store: CountStore) -> None:
        session = start_session(store)
        svc = CountService(store)
        svc.finalize(session["id"])
        result = svc.add_item(session["id"], "late", qty(units=1))
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "SESSION_FINALIZED"
        assert svc.total(session["id"]).data["item_count"] == 0

    def test_item_total_is_snapshot(self, store: CountStore, beer: dict) -> None:
        """Stored totals come back unchanged when the session is reloaded."""
        session = start_session(store)
        CountService(store).add_item(session["id"], "BR-350", qty(pallets=2, units=1))
        with store.transaction() as conn:
            loaded = load_session(conn, session["id"])
        assert loaded.items[0].total_units == 2001
        assert loaded.items[0].product is not None
        assert loaded.items[0].product.factors.units_per_pallet == 1000


class TestPreview:
    def test_resolved(self, store: CountStore, beer: dict) -> None:
        result = CountService(store).preview("BR-350", qty(pallets=1, layers=1, packs=2, units=3))
        assert result.ok
        assert result.op == "preview"
        assert result.data["resolved"] is True
        assert result.data["product"]["code"] == "BR-350"
        assert result.data["text"] == "Brahma Lata 350ml"
        assert result.data["total"] == 1073
        assert result.data["breakdown"] == {
            "from_pallets": 1000,
            "from_layers": 50,
            "from_packs": 20,
            "from_units": 3,
        }

    def test_free_text(self, store: CountStore) -> None:
        result = CountService(store).preview("mystery", qty(packs=4, units=2))
        assert result.data["resolved"] is False
        assert result.data["product"] is None
        assert result.data["total"] == 2
        assert result.warnings

    def test_invalid_quantity(self, store: CountStore) -> None:
        result = CountService(store).preview("x", qty(units=-3))
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_QUANTITY"

    def test_records_nothing(self, store: CountStore, beer: dict) -> None:
        session = start_session(store)
        svc = CountService(store)
        svc.preview("BR-350", qty(pallets=1))
        assert svc.total(session["id"]).data["item_count"] == 0


class TestGetAndList:
    def test_get_returns_items_in_order(self, store: CountStore, beer: dict) -> None:
        session = start_session(store)
        svc = CountService(store)
        svc.add_item(session["id"], "loose", qty(units=1))
        svc.add_item(session["id"], "BR-350", qty(packs=1))
        result = svc.get(session["id"])
        assert result.ok
        assert result.op == "get_session"
        assert [i["name"] for i in result.data["items"]] == ["loose", "Brahma Lata 350ml"]
        assert result.data["total_units"] == 11
        assert result.data["export_path"] is None

    def test_get_not_found(self, store: CountStore) -> None:
        result = CountService(store).get("nope")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"

    def test_list_sessions_newest_first(self, store: CountStore, beer: dict) -> None:
        old = start_session(store, date="2024-01-01")
        new = start_session(store, date="2024-06-01")
        CountService(store).add_item(old["id"], "BR-350", qty(layers=2))
        result = CountService(store).list_sessions()
        assert result.op == "list_sessions"
        assert result.data["count"] == 2
        assert [s["id"] for s in result.data["items"]] == [new["id"], old["id"]]
        assert result.data["items"][1]["item_count"] == 1
        assert result.data["items"][1]["total_units"] == 100
        assert result.data["items"][0]["total_units"] == 0

    def test_load_session_raises(self, store: CountStore) -> None:
        with store.transaction() as conn, pytest.raises(NotFoundError):
            load_session(conn, "nope")


class TestTotals:
    def test_total(self, store: CountStore, beer: dict) -> None:
        session = start_session(store)
        svc = CountService(store)
        svc.add_item(session["id"], "BR-350", qty(pallets=1))
        svc.add_item(session["id"], "loose", qty(units=7))
        result = svc.total(session["id"])
        assert result.op == "session_total"
        assert result.data == {"id": session["id"], "item_count": 2, "total_units": 1007}

    def test_total_not_found(self, store: CountStore) -> None:
        result = CountService(store).total("nope")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"

    def test_breakdown_groups_free_text(self, store: CountStore, beer: dict) -> None:
        other = add_product(store, "SK-600", "Skol Garrafa 600ml", units_per_pack=12)
        session = start_session(store)
        svc = CountService(store)
        svc.add_item(session["id"], "BR-350", qty(packs=1))
        svc.add_item(session["id"], "loose a", qty(units=3))
        svc.add_item(session["id"], "SK-600", qty(packs=1))
        svc.add_item(session["id"], "br-350", qty(units=5))
        svc.add_item(session["id"], "loose b", qty(units=4))
        result = svc.breakdown(session["id"])
        assert result.ok
        assert result.data["items"] == [
            {"product_id": beer["id"], "code": "BR-350", "name": beer["name"], "total_units": 15},
            {"product_id": None, "code": None, "name": "(free text)", "total_units": 7},
            {"product_id": other["id"], "code": "SK-600", "name": other["name"], "total_units": 12},
        ]
        assert result.data["total_units"] == 34

    def test_breakdown_not_found(self, store: CountStore) -> None:
        result = CountService(store).breakdown("nope")
        assert not result.ok


class TestFinalize:
    def test_finalize(self, store: CountStore) -> None:
        session = start_session(store)
        result = CountService(store).finalize(session["id"])
        assert result.ok
        assert result.op == "finalize"
        assert result.data["finalized"] is True
        assert result.warnings == []
        assert CountService(store).get(session["id"]).data["finalized"] is True

    def test_idempotent_with_warning(self, store: CountStore) -> None:
        session = start_session(store)
        svc = CountService(store)
        svc.finalize(session["id"])
        again = svc.finalize(session["id"])
        assert again.ok
        assert again.data["finalized"] is True
        assert len(again.warnings) == 1

    def test_not_found(self, store: CountStore) -> None:
        result = CountService(store).finalize("nope")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"

    def test_finalized_session_still_readable(self, store: CountStore) -> None:
        session = start_session(store)
        svc = CountService(store)
        svc.add_item(session["id"], "loose", qty(units=9))
        svc.finalize(session["id"])
        assert svc.total(session["id"]).data["total_units"] == 9
        assert svc.breakdown(session["id"]).ok
