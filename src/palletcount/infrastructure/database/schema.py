"""SQLAlchemy Core table definitions for the palletcount database."""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
)

metadata = MetaData()

products = Table(
    "products",
    metadata,
    Column("id", Text, primary_key=True),
    Column("code", Text, nullable=False, unique=True),
    Column("name", Text, nullable=False),
    Column("units_per_pack", Integer, nullable=False),
    Column("packs_per_layer", Integer, nullable=False),
    Column("layers_per_pallet", Integer, nullable=False),
    Column("created_at", Text, nullable=False),
    CheckConstraint("units_per_pack >= 1", name="ck_products_units_per_pack"),
    CheckConstraint("packs_per_layer >= 1", name="ck_products_packs_per_layer"),
    CheckConstraint("layers_per_pallet >= 1", name="ck_products_layers_per_pallet"),
)

count_sessions = Table(
    "count_sessions",
    metadata,
    Column("id", Text, primary_key=True),
    Column("date", Text, nullable=False),
    Column("finalized", Integer, nullable=False, default=0, server_default="0"),
    Column("export_path", Text),
    Column("created_at", Text, nullable=False),
)

line_items = Table(
    "line_items",
    metadata,
    Column("id", Text, primary_key=True),
    Column("session_id", Text, ForeignKey("count_sessions.id"), nullable=False),
    Column("position", Integer, nullable=False),
    Column("product_id", Text, ForeignKey("products.id")),  # NULL for free text
    Column("free_text", Text),
    Column("pallets", Integer, nullable=False, default=0, server_default="0"),
    Column("layers", Integer, nullable=False, default=0, server_default="0"),
    Column("packs", Integer, nullable=False, default=0, server_default="0"),
    Column("units", Integer, nullable=False, default=0, server_default="0"),
    Column("total_units", Integer, nullable=False),
    Column("created_at", Text, nullable=False),
)

Index("ix_products_name", products.c.name)
Index("ix_count_sessions_date", count_sessions.c.date)
Index("ix_line_items_session", line_items.c.session_id, line_items.c.position)
Index("ix_line_items_product", line_items.c.product_id)
