"""Catalog product entity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from palletcount.domain.packaging import PackagingFactors


@dataclass(frozen=True)
class Product:
    """A catalog product with its packaging factors.

    Identity is ``id``. ``code`` and ``name`` are search keys only; they
    are not guaranteed unique.
    """

    id: str
    code: str
    name: str
    factors: PackagingFactors
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "created_at": self.created_at,
            **self.factors.to_dict(),
        }
