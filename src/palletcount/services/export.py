"""ExportService — write a count session to CSV or JSON.

The export path is recorded on the session so the last export can be
found again; this is the only write allowed on a finalized session.
"""

from __future__ import annotations

import contextlib
import csv
import json
import logging
from pathlib import Path
from typing import get_args

from sqlalchemy import update

from palletcount.config.logging import operation_context
from palletcount.config.models import ExportFormat
from palletcount.domain.counts import CountSession, per_product_breakdown, session_total
from palletcount.infrastructure.database.schema import count_sessions
from palletcount.services.base import BaseService
from palletcount.services.counting import NotFoundError, load_session
from palletcount.services.result import ErrorCode, ServiceResult

logger = logging.getLogger(__name__)

CSV_COLUMNS: tuple[str, ...] = (
    "position",
    "product_code",
    "name",
    "pallets",
    "layers",
    "packs",
    "units",
    "total_units",
)


def _write_csv(session: CountSession, path: Path, *, delimiter: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as fh:
        writer = csv.writer(fh, delimiter=delimiter)
        writer.writerow(CSV_COLUMNS)
        for position, item in enumerate(session.items, start=1):
            row = item.to_dict()
            writer.writerow(
                [
                    position,
                    row["product_code"] or "",
                    row["name"],
                    row["pallets"],
                    row["layers"],
                    row["packs"],
                    row["units"],
                    row["total_units"],
                ]
            )


def _write_json(session: CountSession, path: Path) -> None:
    payload = session.to_dict()
    payload["breakdown"] = [
        {"product_id": pid, "total_units": units}
        for pid, units in per_product_breakdown(session).items()
    ]
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


class ExportService(BaseService):
    """Export count sessions in portable formats."""

    def export_session(
        self,
        session_id: str,
        output: Path,
        *,
        fmt: str | None = None,
    ) -> ServiceResult:
        """Write *session_id* to *output* as ``csv`` or ``json``.

        The format defaults to ``[export] default_format``. The file is
        written next to *output* under a temporary name and then moved into
        place, so a failed export never leaves a truncated file behind.
        """
        with operation_context("export_session", session_id=session_id):
            return self._export(session_id, output, fmt=fmt)

    def _export(self, session_id: str, output: Path, *, fmt: str | None) -> ServiceResult:
        op = "export_session"
        cfg = self._store.settings.export
        fmt = (fmt or cfg.default_format).lower()
        if fmt not in get_args(ExportFormat):
            return self._fail(
                op,
                ErrorCode.INVALID_FORMAT,
                f"Unsupported export format {fmt!r}",
                format=fmt,
            )

        output = output.resolve()
        tmp = output.with_name(f".{output.name}.tmp")
        try:
            with self._store.transaction() as conn:
                session = load_session(conn, session_id)
                output.parent.mkdir(parents=True, exist_ok=True)
                if fmt == "csv":
                    _write_csv(session, tmp, delimiter=cfg.csv_delimiter)
                else:
                    _write_json(session, tmp)
                tmp.replace(output)
                conn.execute(
                    update(count_sessions)
                    .where(count_sessions.c.id == session_id)
                    .values(export_path=str(output))
                )
        except NotFoundError as exc:
            return self._fail(op, ErrorCode.NOT_FOUND, str(exc), id=exc.ident)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            logger.debug("Export to %s failed: %s", output, exc)
            return self._fail(
                op,
                ErrorCode.EXPORT_FAILED,
                f"Cannot write {output}: {exc.strerror or exc}",
                path=str(output),
            )

        logger.debug("Exported to %s", output)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": session.id,
                "output_file": str(output),
                "format": fmt,
                "item_count": len(session.items),
                "total_units": session_total(session),
            },
        )
