"""Quantity conversion — counts at four granularities to a unit total.

Pure functions, no infrastructure dependencies. :func:`compute_total`
re-checks every component even though :class:`QuantityInput` validates
on construction.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

from palletcount.domain.errors import InvalidFactorError, InvalidQuantityError
from palletcount.domain.packaging import PackagingFactors

QUANTITY_FIELDS: tuple[str, ...] = ("pallets", "layers", "packs", "units")


def _check_quantity(field: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidQuantityError(field, value)


@dataclass(frozen=True)
class QuantityInput:
    """A snapshot of counted quantities at each granularity."""

    pallets: int = 0
    layers: int = 0
    packs: int = 0
    units: int = 0

    def __post_init__(self) -> None:
        for name in QUANTITY_FIELDS:
            _check_quantity(name, getattr(self, name))

    def __add__(self, other: object) -> QuantityInput:
        if not isinstance(other, QuantityInput):
            return NotImplemented
        return QuantityInput(
            pallets=self.pallets + other.pallets,
            layers=self.layers + other.layers,
            packs=self.packs + other.packs,
            units=self.units + other.units,
        )

    def to_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class UnitBreakdown:
    """Per-level contribution to a unit total."""

    from_pallets: int = 0
    from_layers: int = 0
    from_packs: int = 0
    from_units: int = 0

    @property
    def total(self) -> int:
        return self.from_pallets + self.from_layers + self.from_packs + self.from_units

    def to_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Conversion:
    """Result of :func:`compute_total`."""

    total: int
    breakdown: UnitBreakdown

    def to_dict(self) -> dict[str, object]:
        return {"total": self.total, "breakdown": self.breakdown.to_dict()}


def compute_total(
    quantities: QuantityInput,
    factors: PackagingFactors | None,
) -> Conversion:
    """Convert *quantities* into a unit total using *factors*.

    Without factors (free-text entry) pallets, layers and packs have no
    unit meaning and contribute 0; only ``units`` is taken at face value.

    Raises:
        InvalidQuantityError: If any quantity component is negative.
        InvalidFactorError: If *factors* is not a ``PackagingFactors``.
    """
    for name in QUANTITY_FIELDS:
        _check_quantity(name, getattr(quantities, name))

    if factors is None:
        breakdown = UnitBreakdown(from_units=quantities.units)
        return Conversion(total=breakdown.total, breakdown=breakdown)

    if not isinstance(factors, PackagingFactors):
        raise InvalidFactorError("factors", factors)

    breakdown = UnitBreakdown(
        from_pallets=quantities.pallets * factors.units_per_pallet,
        from_layers=quantities.layers * factors.units_per_layer,
        from_packs=quantities.packs * factors.units_per_pack,
        from_units=quantities.units,
    )
    return Conversion(total=breakdown.total, breakdown=breakdown)
