# backend/benchboard/db/crud.py
"""
Data access for resources, RRFs, upload audit rows and dashboard metrics.

Bulk writes (`upsert_resources`, `upsert_rrfs`) take canonical camelCase
records (as produced by pipeline.excel_mapper or the API schemas) and write
them in chunks: one multi-row INSERT ... ON CONFLICT DO UPDATE per chunk,
committed on its own. A failing chunk raises and stops the loop; chunks
already committed stay applied.

Usage:
    with db.session_scope() as s:
        affected = upsert_resources(s, records)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from sqlalchemy import delete, desc, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from ..core.config import DEFAULT_OPTIONS
from ..core.utils import is_blank, now_utc, parse_date_value, to_int, to_text
from .models import (
    RESOURCE_COLUMNS,
    RESOURCE_CORE_COLUMNS,
    RRF,
    RRF_COLUMNS,
    DashboardMetrics,
    ExcelUpload,
    Resource,
    to_camel,
)

logger = logging.getLogger(__name__)

_DATE_COLUMNS = {
    "joining_date", "allocation_start_date", "allocation_end_date", "relieving_date", "resigned_on",
}
_INT_COLUMNS = {"total_exp", "vam_exp", "experience_required"}

_DIALECT_INSERTS: Dict[str, Callable[..., Any]] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


# ----------------- Row building -----------------

def _column_value(column: str, value: Any) -> Any:
    if is_blank(value):
        return None
    if column in _DATE_COLUMNS:
        return parse_date_value(value)
    if column in _INT_COLUMNS:
        return to_int(value)
    return to_text(value)


def _to_row(record: Dict[str, Any], columns: Sequence[str]) -> Dict[str, Any]:
    """camelCase record -> {column: value} in table column order."""
    return {c: _column_value(c, record.get(to_camel(c))) for c in columns}


def _resource_row(record: Dict[str, Any], columns: Sequence[str] = RESOURCE_COLUMNS) -> Dict[str, Any]:
    row = _to_row(record, columns)
    row["vamid"] = str(record.get("vamid") or "").strip()
    return row


def _rrf_row(record: Dict[str, Any]) -> Dict[str, Any]:
    row = _to_row(record, RRF_COLUMNS)
    row["rrf_id"] = str(record.get("rrfId") or "").strip()
    row["status"] = row["status"] or "open"
    return row


def iter_chunks(rows: Sequence[Dict[str, Any]], size: int) -> Iterator[Sequence[Dict[str, Any]]]:
    if size <= 0:
        raise ValueError("batch size must be positive")
    for i in range(0, len(rows), size):
        yield rows[i:i + size]


def _last_per_key(rows: Iterable[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    # a single INSERT cannot touch the same key twice, so the later row wins up front
    by_key: Dict[str, Dict[str, Any]] = {}
    for row in rows:
        by_key[row[key]] = row
    return list(by_key.values())


# ----------------- Inserts / Upserts -----------------

def dialect_insert(name: str) -> Callable[..., Any]:
    """`insert` construct with ON CONFLICT support for the named dialect."""
    try:
        return _DIALECT_INSERTS[name]
    except KeyError:
        raise NotImplementedError(f"bulk upsert is not supported on dialect {name!r}")


def _dialect_insert(session: Session) -> Callable[..., Any]:
    return dialect_insert(session.get_bind().dialect.name)


def _upsert(
    session: Session,
    table: Any,
    rows: List[Dict[str, Any]],
    key: str,
    columns: Sequence[str],
    batch_size: int,
) -> int:
    if not rows:
        return 0
    rows = _last_per_key(rows, key)
    insert = _dialect_insert(session)
    total = 0
    for n, chunk in enumerate(iter_chunks(rows, batch_size), start=1):
        stmt = insert(table).values(list(chunk))
        set_ = {c: stmt.excluded[c] for c in columns if c != key}
        set_["updated_at"] = func.now()
        stmt = stmt.on_conflict_do_update(index_elements=[key], set_=set_)
        result = session.execute(stmt)
        session.commit()
        affected = result.rowcount if result.rowcount and result.rowcount > 0 else 0
        total += affected
        logger.debug("%s chunk %d: %d row(s) affected", table.name, n, affected)
    return total


def upsert_resources(
    session: Session, records: Sequence[Dict[str, Any]], batch_size: Optional[int] = None
) -> int:
    """
    Insert or fully replace resources keyed by vamid (all 25 columns).
    Returns total rows affected across chunks.
    """
    rows = [_resource_row(r) for r in records]
    total = _upsert(
        session, Resource.__table__, rows, "vamid", RESOURCE_COLUMNS,
        batch_size or DEFAULT_OPTIONS["batch_size"],
    )
    logger.info("Upserted %d resource row(s) from %d record(s)", total, len(records))
    return total


def upsert_rrfs(
    session: Session, records: Sequence[Dict[str, Any]], batch_size: Optional[int] = None
) -> int:
    rows = [_rrf_row(r) for r in records]
    total = _upsert(
        session, RRF.__table__, rows, "rrf_id", RRF_COLUMNS,
        batch_size or DEFAULT_OPTIONS["batch_size"],
    )
    logger.info("Upserted %d RRF row(s) from %d record(s)", total, len(records))
    return total


def create_resources(session: Session, records: Sequence[Dict[str, Any]]) -> List[Resource]:
    """Upsert only the core resource columns and return the stored rows."""
    rows = [_resource_row(r, RESOURCE_CORE_COLUMNS) for r in records]
    _upsert(
        session, Resource.__table__, rows, "vamid", RESOURCE_CORE_COLUMNS,
        DEFAULT_OPTIONS["batch_size"],
    )
    return get_resources_by_vamids(session, [r["vamid"] for r in rows])


def create_rrfs(session: Session, records: Sequence[Dict[str, Any]], batch_size: Optional[int] = None) -> List[RRF]:
    upsert_rrfs(session, records, batch_size)
    ids = [str(r.get("rrfId") or "").strip() for r in records]
    q = select(RRF).where(RRF.rrf_id.in_(ids)).order_by(RRF.id).execution_options(populate_existing=True)
    return list(session.execute(q).scalars().all())


def create_excel_upload(session: Session, payload: Dict[str, Any]) -> ExcelUpload:
    """Append one audit row. Never updated afterwards."""
    row = ExcelUpload(
        file_name=str(payload["fileName"]),
        file_size=to_int(payload.get("fileSize")),
        uploaded_by=payload.get("uploadedBy") or None,
        rows_processed=to_int(payload.get("rowsProcessed")),
        status=payload.get("status") or "completed",
    )
    session.add(row)
    session.flush()
    session.refresh(row)
    return row


# ----------------- Resource queries -----------------

def list_resources(session: Session) -> List[Resource]:
    q = select(Resource).order_by(desc(Resource.created_at), desc(Resource.id))
    return list(session.execute(q).scalars().all())


def get_resource_by_vamid(session: Session, vamid: str) -> Optional[Resource]:
    q = select(Resource).where(Resource.vamid == vamid).limit(1)
    return session.execute(q).scalars().first()


def get_resources_by_vamids(session: Session, vamids: Sequence[str]) -> List[Resource]:
    if not vamids:
        return []
    q = (
        select(Resource)
        .where(Resource.vamid.in_(list(vamids)))
        .order_by(Resource.id)
        .execution_options(populate_existing=True)
    )
    return list(session.execute(q).scalars().all())


def list_vamids(session: Session) -> List[str]:
    return list(session.execute(select(Resource.vamid).order_by(Resource.id)).scalars().all())


def update_resource(session: Session, vamid: str, changes: Dict[str, Any]) -> Optional[Resource]:
    """Partial update: only keys present in `changes` are written."""
    row = get_resource_by_vamid(session, vamid)
    if row is None:
        return None
    touched = False
    for column in RESOURCE_COLUMNS[1:]:
        field = to_camel(column)
        if field in changes:
            setattr(row, column, _column_value(column, changes[field]))
            touched = True
    if touched:
        row.updated_at = now_utc()
        session.flush()
    return row


def delete_resource(session: Session, vamid: str) -> bool:
    result = session.execute(delete(Resource).where(Resource.vamid == vamid))
    return (result.rowcount or 0) > 0


# ----------------- RRF / upload queries -----------------

def list_rrfs(session: Session) -> List[RRF]:
    q = select(RRF).order_by(desc(RRF.created_at), desc(RRF.id))
    return list(session.execute(q).scalars().all())


def get_rrf(session: Session, rrf_id: str) -> Optional[RRF]:
    return session.execute(select(RRF).where(RRF.rrf_id == rrf_id).limit(1)).scalars().first()


def list_excel_uploads(session: Session) -> List[ExcelUpload]:
    q = select(ExcelUpload).order_by(desc(ExcelUpload.upload_date), desc(ExcelUpload.id))
    return list(session.execute(q).scalars().all())


def get_excel_upload(session: Session, upload_id: int) -> Optional[ExcelUpload]:
    return session.get(ExcelUpload, upload_id)


# ----------------- Dashboard metrics -----------------

def get_dashboard_metrics(session: Session) -> Optional[DashboardMetrics]:
    return session.get(DashboardMetrics, 1)


def save_dashboard_metrics(session: Session, values: Dict[str, Any]) -> DashboardMetrics:
    row = session.get(DashboardMetrics, 1)
    if row is None:
        row = DashboardMetrics(id=1)
        session.add(row)
    for k, v in values.items():
        setattr(row, k, v)
    row.updated_at = now_utc()
    session.flush()
    return row


def dashboard_rows(session: Session) -> List[Dict[str, Any]]:
    """Light projection used by the dashboard aggregates."""
    q = select(Resource.joining_date, Resource.grade, Resource.primary_skill, Resource.total_exp)
    return [
        {"joiningDate": jd, "grade": g, "primarySkill": ps, "totalExp": te}
        for jd, g, ps, te in session.execute(q).all()
    ]


__all__ = [
    "iter_chunks", "dialect_insert",
    "upsert_resources", "upsert_rrfs", "create_resources", "create_rrfs", "create_excel_upload",
    "list_resources", "get_resource_by_vamid", "get_resources_by_vamids", "list_vamids",
    "update_resource", "delete_resource",
    "list_rrfs", "get_rrf", "list_excel_uploads", "get_excel_upload",
    "get_dashboard_metrics", "save_dashboard_metrics", "dashboard_rows",
]
