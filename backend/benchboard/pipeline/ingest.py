# backend/benchboard/pipeline/ingest.py
"""
Excel ingestion: workbook bytes -> raw rows -> canonical records -> bulk upsert
-> one ExcelUpload audit row (-> dashboard metrics refresh for resources).

Stages:
  read_workbook(content, file_name)      pandas/openpyxl, blank cells dropped
  excel_mapper.map_rows(rows, kind)      alias resolution + date/number coercion
  crud.upsert_resources / upsert_rrfs    chunked INSERT ... ON CONFLICT DO UPDATE
  crud.create_excel_upload               append-only audit
"""

from __future__ import annotations

import io
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd
from sqlalchemy.orm import Session

from ..core.exceptions import IngestError
from ..db import crud
from .dashboard import refresh_metrics
from .excel_mapper import RECORD_KINDS, map_rows

logger = logging.getLogger(__name__)


@dataclass
class IngestReport:
    kind: str
    file_name: str
    received: int
    mapped: int
    skipped: int
    rows_affected: int
    upload_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        return {
            "kind": d["kind"],
            "fileName": d["file_name"],
            "received": d["received"],
            "mapped": d["mapped"],
            "skipped": d["skipped"],
            "rowsAffected": d["rows_affected"],
            "uploadId": d["upload_id"],
        }


def read_workbook(content: Union[bytes, io.BytesIO], file_name: str = "", sheet: Union[int, str] = 0) -> List[Dict[str, Any]]:
    """
    Parse the first (or named) sheet into row dicts keyed by header text.
    CSV is accepted when the file name says so. Blank cells are dropped so the
    mapper sees them as absent.
    """
    buf = content if isinstance(content, io.BytesIO) else io.BytesIO(content)
    try:
        if file_name.lower().endswith(".csv"):
            df = pd.read_csv(buf)
        else:
            df = pd.read_excel(buf, sheet_name=sheet)
    except Exception as exc:  # ValueError, BadZipFile, XLRDError, ParserError ...
        raise IngestError(f"Could not read workbook {file_name or '<upload>'}: {exc}") from exc

    rows: List[Dict[str, Any]] = []
    for rec in df.to_dict(orient="records"):
        row = {str(k).strip(): v for k, v in rec.items() if not _is_empty_cell(v)}
        if row:
            rows.append(row)
    logger.info("Read %d row(s) from %s", len(rows), file_name or "<upload>")
    return rows


def _is_empty_cell(v: Any) -> bool:
    try:
        return bool(pd.isna(v))
    except (TypeError, ValueError):
        return False


def ingest_rows(
    session: Session,
    rows: Sequence[Mapping[str, Any]],
    kind: str,
    file_name: str,
    file_size: Optional[int] = None,
    uploaded_by: Optional[str] = None,
    batch_size: Optional[int] = None,
) -> IngestReport:
    if kind not in RECORD_KINDS:
        raise IngestError(f"Unknown upload kind {kind!r}; expected one of {', '.join(RECORD_KINDS)}")

    mapping = map_rows(rows, kind)  # type: ignore[arg-type]
    if kind == "resource":
        affected = crud.upsert_resources(session, mapping.records, batch_size)
    else:
        affected = crud.upsert_rrfs(session, mapping.records, batch_size)

    upload = crud.create_excel_upload(session, {
        "fileName": file_name,
        "fileSize": file_size,
        "uploadedBy": uploaded_by,
        "rowsProcessed": len(mapping.records),
        "status": "completed",
    })

    if kind == "resource":
        refresh_metrics(session)

    report = IngestReport(
        kind=kind,
        file_name=file_name,
        received=mapping.received,
        mapped=len(mapping.records),
        skipped=mapping.skipped,
        rows_affected=affected,
        upload_id=upload.id,
    )
    logger.info(
        "Ingested %s: %d received, %d mapped, %d skipped, %d affected",
        file_name, report.received, report.mapped, report.skipped, report.rows_affected,
    )
    return report


def ingest_workbook(
    session: Session,
    content: bytes,
    kind: str,
    file_name: str,
    uploaded_by: Optional[str] = None,
    batch_size: Optional[int] = None,
) -> IngestReport:
    rows = read_workbook(content, file_name)
    return ingest_rows(
        session, rows, kind, file_name,
        file_size=len(content), uploaded_by=uploaded_by, batch_size=batch_size,
    )


__all__ = ["IngestReport", "read_workbook", "ingest_rows", "ingest_workbook"]
