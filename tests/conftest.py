"""Shared pytest fixtures and test helpers for palletcount tests."""

from __future__ import annotations

import itertools
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from palletcount.config.settings import CountSettings
from palletcount.domain.packaging import PackagingFactors
from palletcount.domain.products import Product
from palletcount.infrastructure.database.engine import init_database
from palletcount.infrastructure.store import CountStore


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Iterator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path / ".palletcount" / "palletcount.db")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def store_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary directory the store lives under, free of env overrides."""
    monkeypatch.delenv("PALLETCOUNT_CONFIG", raising=False)
    return tmp_path


@pytest.fixture
def store(store_root: Path) -> Iterator[CountStore]:
    """Fully initialized store on a temp directory."""
    settings = CountSettings.from_cli(root=store_root)
    s = CountStore(settings)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Deterministic identifier source: id-0001, id-0002, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter):04d}"


@pytest.fixture
def _isolated_store(store_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp root so the CLI creates an isolated store.

    Use via ``@pytest.mark.usefixtures("_isolated_store")`` on command test
    classes.
    """
    monkeypatch.chdir(store_root)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def make_product(
    code: str = "BR-350",
    name: str = "Brahma Lata 350ml",
    *,
    product_id: str | None = None,
    units_per_pack: int = 10,
    packs_per_layer: int = 5,
    layers_per_pallet: int = 20,
) -> Product:
    """Build an in-memory product (10/5/20 factors unless overridden)."""
    return Product(
        id=product_id or f"p-{code.lower()}",
        code=code,
        name=name,
        factors=PackagingFactors(units_per_pack, packs_per_layer, layers_per_pallet),
    )


def add_product(store: CountStore, code: str, name: str, **factors: Any) -> dict[str, Any]:
    """Register a product via CatalogService, asserting success."""
    from palletcount.services.catalog import CatalogService

    factors = {"units_per_pack": 10, "packs_per_layer": 5, "layers_per_pallet": 20} | factors
    result = CatalogService(store).add_product(code, name, **factors)
    assert result.ok, result.error
    return result.data


def start_session(store: CountStore, **kwargs: Any) -> dict[str, Any]:
    """Start a count session via CountService, asserting success."""
    from palletcount.services.counting import CountService

    result = CountService(store).start(**kwargs)
    assert result.ok, result.error
    return result.data


def qty(pallets: int = 0, layers: int = 0, packs: int = 0, units: int = 0) -> dict[str, int]:
    return {"pallets": pallets, "layers": layers, "packs": packs, "units": units}
