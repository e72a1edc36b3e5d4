"""Packaging factors — per-product conversion ratios between granularities.

Four nested granularities, largest to smallest::

    pallet -> layer (lastro) -> pack (pacote) -> unit (unidade)

A product carries the three ratios between adjacent levels. Every other
ratio is derived from them, so there is exactly one source of truth.
"""

from __future__ import annotations

from dataclasses import dataclass

from palletcount.domain.errors import InvalidFactorError


def _require_positive_int(field: str, value: object) -> int:
    # bool is an int subclass but never a meaningful factor
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidFactorError(field, value)
    return value


@dataclass(frozen=True)
class PackagingFactors:
    """Immutable conversion factors for a single product.

    Raises:
        InvalidFactorError: If any factor is not an integer >= 1.
    """

    units_per_pack: int
    packs_per_layer: int
    layers_per_pallet: int

    def __post_init__(self) -> None:
        _require_positive_int("units_per_pack", self.units_per_pack)
        _require_positive_int("packs_per_layer", self.packs_per_layer)
        _require_positive_int("layers_per_pallet", self.layers_per_pallet)

    @property
    def units_per_layer(self) -> int:
        return self.units_per_pack * self.packs_per_layer

    @property
    def units_per_pallet(self) -> int:
        return self.units_per_layer * self.layers_per_pallet

    def to_dict(self) -> dict[str, int]:
        """Serialize the factors plus derived constants for reporting."""
        return {
            "units_per_pack": self.units_per_pack,
            "packs_per_layer": self.packs_per_layer,
            "layers_per_pallet": self.layers_per_pallet,
            "units_per_layer": self.units_per_layer,
            "units_per_pallet": self.units_per_pallet,
        }
