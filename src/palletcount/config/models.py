"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, palletcount.toml only
contains overrides. A fresh directory needs no config file at all.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

ExportFormat = Literal["csv", "json"]


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    directory: str = ".palletcount"
    filename: str = "palletcount.db"


class SearchConfig(BaseModel):
    """[search] section.

    ``debounce_ms`` is the quiescence window interactive front-ends wait
    before issuing a lookup. The CLI issues one lookup per invocation
    and does not use it.
    """

    model_config = {"frozen": True}

    min_query_length: int = Field(default=1, ge=0)
    max_results: int = Field(default=20, ge=1)
    debounce_ms: int = Field(default=300, ge=0)


class ExportConfig(BaseModel):
    """[export] section."""

    model_config = {"frozen": True}

    default_format: ExportFormat = "csv"
    csv_delimiter: str = Field(default=",", min_length=1, max_length=1)
