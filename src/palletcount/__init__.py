"""palletcount — inventory counting across pallets, layers, packs and units."""

__version__ = "0.1.0"
