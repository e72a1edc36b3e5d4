"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from palletcount.output.console import create_console, format_units, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from palletcount.services.result import ServiceResult

# Ops whose quiet output is a number rather than an id.
_QUIET_TOTALS: dict[str, str] = {
    "session_total": "total_units",
    "breakdown": "total_units",
    "preview": "total",
}

# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    total_key = _QUIET_TOTALS.get(result.op)
    if total_key is not None and total_key in result.data:
        return str(result.data[total_key])

    items = result.data.get("items")
    if items and isinstance(items, list):
        ids = [str(item.get("id", "")) for item in items if isinstance(item, dict)]
        if any(ids):
            return "\n".join(i for i in ids if i)

    if "id" in result.data:
        return str(result.data["id"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="pc.ok")
    op = Text(f"  {result.op}", style="pc.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="pc.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="pc.id")
    elif key == "code":
        v = Text(str(value), style="pc.code")
    elif key == "name":
        v = Text(str(value), style="pc.name")
    elif key.endswith("total") or key == "total_units":
        v = Text(format_units(value) if isinstance(value, int) else str(value), style="pc.units")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _breakdown_line(data: dict[str, Any]) -> str:
    """``Pallets: 1,000  Packs: 20`` — non-zero contributions only."""
    breakdown = data.get("breakdown") or {}
    parts = []
    for key, label in (
        ("from_pallets", "Pallets"),
        ("from_layers", "Layers"),
        ("from_packs", "Packs"),
        ("from_units", "Units"),
    ):
        value = breakdown.get(key, 0)
        if value:
            parts.append(f"{label}: {format_units(value)}")
    return "  ".join(parts)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="pc.error")
    op = Text(f"  {result.op}", style="pc.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Catalog renderers ─────────────────────────────────────────────────


def _render_product(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render add_product / get_product with factors and derived constants."""
    _status_line(console, result)
    d = result.data
    for key in ("id", "code", "name"):
        if key in d:
            _field(console, key, d[key])
    _field(
        console,
        "factors",
        f"{d['units_per_pack']} unit/pack, {d['packs_per_layer']} pack/layer, "
        f"{d['layers_per_pallet']} layer/pallet",
    )
    _field(console, "units_per_layer", format_units(d["units_per_layer"]))
    _field(console, "units_per_pallet", format_units(d["units_per_pallet"]))
    if verbose:
        _field(console, "created_at", d.get("created_at", ""))
        _render_meta(console, result)


def _render_product_table(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    """Render search_products / list_products as a table."""
    items = result.data.get("items", [])
    if not items:
        console.print(Text("No products found.", style="dim"))
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Code", style="pc.code", no_wrap=True)
    table.add_column("Name", style="pc.name")
    table.add_column("Unit/Pack", justify="right")
    table.add_column("Pack/Layer", justify="right")
    table.add_column("Layer/Pallet", justify="right")
    table.add_column("Unit/Pallet", justify="right", style="pc.units")
    if verbose:
        table.add_column("ID", style="pc.id")

    for item in items:
        row = [
            str(item["code"]),
            str(item["name"]),
            str(item["units_per_pack"]),
            str(item["packs_per_layer"]),
            str(item["layers_per_pallet"]),
            format_units(item["units_per_pallet"]),
        ]
        if verbose:
            row.append(str(item["id"]))
        table.add_row(*row)
    console.print(table)


# ── Count renderers ───────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render session_start / finalize results."""
    _status_line(console, result)
    for key in ("id", "date", "finalized", "item_count", "total_units"):
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose:
        _render_meta(console, result)


def _render_session_table(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(Text("No count sessions.", style="dim"))
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="pc.id", no_wrap=True)
    table.add_column("Date")
    table.add_column("Status")
    table.add_column("Items", justify="right")
    table.add_column("Total Units", justify="right", style="pc.units")
    for item in items:
        table.add_row(
            str(item["id"]),
            str(item["date"]),
            "finalized" if item["finalized"] else "open",
            str(item["item_count"]),
            format_units(item["total_units"]),
        )
    console.print(table)


def _render_session(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render get_session as a header panel plus an items table."""
    d = result.data
    status = "finalized" if d["finalized"] else "open"
    header = Text()
    header.append(f"{d['date']}  ", style="bold")
    header.append(status, style="pc.warning" if d["finalized"] else "pc.ok")
    header.append(f"\nid: {d['id']}", style="dim")
    if d.get("export_path"):
        header.append(f"\nexport: {d['export_path']}", style="dim")
    console.print(Panel(header, title="Count Session", expand=False))

    items = d.get("items", [])
    if items:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Code", style="pc.code", no_wrap=True)
        table.add_column("Name")
        table.add_column("Pallets", justify="right")
        table.add_column("Layers", justify="right")
        table.add_column("Packs", justify="right")
        table.add_column("Units", justify="right")
        table.add_column("Total", justify="right", style="pc.units")
        if verbose:
            table.add_column("ID", style="pc.id")
        for pos, item in enumerate(items, start=1):
            name = Text(str(item["name"]), style="pc.free" if item["product_id"] is None else "")
            row: list[Any] = [
                str(pos),
                str(item["product_code"] or "—"),
                name,
                str(item["pallets"]),
                str(item["layers"]),
                str(item["packs"]),
                str(item["units"]),
                format_units(item["total_units"]),
            ]
            if verbose:
                row.append(str(item["id"]))
            table.add_row(*row)
        console.print(table)
    else:
        console.print(Text("  (no items)", style="dim"))

    _field(console, "total_units", d["total_units"])


def _render_item(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render add_item with its resolution outcome and totals."""
    _status_line(console, result)
    d = result.data
    _field(console, "id", d["id"])
    _field(console, "name", d["name"])
    if d["resolved"]:
        _field(console, "code", d["product_code"])
    else:
        console.print(Text("  (free text — no packaging factors applied)", style="pc.free"))
    _field(console, "total_units", d["total_units"])
    _field(console, "session_total", d["session_total"])
    if verbose:
        _render_meta(console, result)


def _render_preview(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    product = d.get("product")
    if product:
        _field(console, "name", product["name"])
        _field(console, "code", product["code"])
    else:
        _field(console, "name", d["text"])
        console.print(Text("  (free text — no packaging factors applied)", style="pc.free"))
    _field(console, "total_units", d["total"])
    line = _breakdown_line(d)
    if line:
        console.print(Text(f"  {line}", style="dim"))


def _render_total(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("id", "item_count", "total_units"):
        _field(console, key, result.data[key])


def _render_breakdown(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Code", style="pc.code", no_wrap=True)
    table.add_column("Name")
    table.add_column("Total Units", justify="right", style="pc.units")
    for item in items:
        name_style = "pc.free" if item["product_id"] is None else ""
        table.add_row(
            str(item["code"] or "—"),
            Text(str(item["name"]), style=name_style),
            format_units(item["total_units"]),
        )
    console.print(table)
    _field(console, "total_units", result.data["total_units"])


def _render_export(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("id", "output_file", "format", "item_count", "total_units"):
        if key in result.data:
            _field(console, key, result.data[key])


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Catalog
    "add_product": _render_product,
    "get_product": _render_product,
    "search_products": _render_product_table,
    "list_products": _render_product_table,
    # Counting
    "session_start": _render_mutation,
    "finalize": _render_mutation,
    "list_sessions": _render_session_table,
    "get_session": _render_session,
    "add_item": _render_item,
    "preview": _render_preview,
    "session_total": _render_total,
    "breakdown": _render_breakdown,
    # Export
    "export_session": _render_export,
}
