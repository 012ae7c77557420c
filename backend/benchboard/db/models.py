# backend/benchboard/db/models.py
"""
SQLAlchemy ORM models for the four BenchBoard tables:
- Resource: bench employee, unique by vamid
- RRF: open resource request, unique by rrf_id
- ExcelUpload: append-only audit row per ingestion
- DashboardMetrics: singleton row (id = 1) of headline numbers

Column order in RESOURCE_COLUMNS / RRF_COLUMNS matches the table definitions
and is the order the bulk writer binds values in.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List

from sqlalchemy import CheckConstraint, Date, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from .session import Base


class Resource(Base):
    __tablename__ = "resources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vamid: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    joining_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    grade: Mapped[str | None] = mapped_column(String(50), index=True)
    current_skill: Mapped[str | None] = mapped_column(String(255))
    primary_skill: Mapped[str | None] = mapped_column(String(255), index=True)
    total_exp: Mapped[int | None] = mapped_column(Integer)

    # extended HR attributes
    tsc: Mapped[str | None] = mapped_column(String(255))
    account: Mapped[str | None] = mapped_column(String(255))
    project: Mapped[str | None] = mapped_column(String(255))
    allocation_status: Mapped[str | None] = mapped_column(String(255))
    allocation_start_date: Mapped[date | None] = mapped_column(Date)
    allocation_end_date: Mapped[date | None] = mapped_column(Date)
    first_level_manager: Mapped[str | None] = mapped_column(String(255))
    designation: Mapped[str | None] = mapped_column(String(255))
    email: Mapped[str | None] = mapped_column(String(255))
    sub_dept: Mapped[str | None] = mapped_column(String(255))
    relieving_date: Mapped[date | None] = mapped_column(Date)
    resigned_on: Mapped[date | None] = mapped_column(Date)
    resignation_status: Mapped[str | None] = mapped_column(String(255))
    second_level_manager: Mapped[str | None] = mapped_column(String(255))
    vam_exp: Mapped[int | None] = mapped_column(Integer)
    account_summary: Mapped[str | None] = mapped_column(Text)
    resourcing_unit: Mapped[str | None] = mapped_column(String(255))
    workspace: Mapped[str | None] = mapped_column(String(255))

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<Resource vamid={self.vamid} name={self.name!r}>"


class RRF(Base):
    __tablename__ = "rrfs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    rrf_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    pos_title: Mapped[str | None] = mapped_column(String(255))
    role: Mapped[str | None] = mapped_column(String(255))
    account: Mapped[str | None] = mapped_column(String(255), index=True)
    project: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    skills_required: Mapped[str | None] = mapped_column(Text)
    experience_required: Mapped[int | None] = mapped_column(Integer)
    grade: Mapped[str | None] = mapped_column(String(50))
    location: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="open", server_default="open", index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<RRF rrf_id={self.rrf_id} status={self.status}>"


class ExcelUpload(Base):
    __tablename__ = "excel_uploads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int | None] = mapped_column(Integer)
    upload_date: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    uploaded_by: Mapped[str | None] = mapped_column(String(255))
    rows_processed: Mapped[int | None] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="completed", server_default="completed")


class DashboardMetrics(Base):
    __tablename__ = "dashboard_metrics"
    __table_args__ = (CheckConstraint("id = 1", name="single_row"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1, autoincrement=False)
    total_bench: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    on_bench_90_plus: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    high_experience_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    new_this_month: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    top_skill: Mapped[str | None] = mapped_column(String(255))
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)


# --- column orders (business key first) ---------------------------------------

RESOURCE_COLUMNS: List[str] = [
    "vamid", "name", "joining_date", "grade", "current_skill", "primary_skill", "total_exp",
    "tsc", "account", "project", "allocation_status", "allocation_start_date", "allocation_end_date",
    "first_level_manager", "designation", "email", "sub_dept", "relieving_date", "resigned_on",
    "resignation_status", "second_level_manager", "vam_exp", "account_summary", "resourcing_unit",
    "workspace",
]

# narrow subset written by POST /api/resources
RESOURCE_CORE_COLUMNS: List[str] = RESOURCE_COLUMNS[:7]

RRF_COLUMNS: List[str] = [
    "rrf_id", "pos_title", "role", "account", "project", "description",
    "skills_required", "experience_required", "grade", "location", "status",
]

BENCHBOARD_TABLES: List[str] = ["resources", "rrfs", "excel_uploads", "dashboard_metrics"]


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.title() for p in rest)


def _jsonable(v: Any) -> Any:
    if isinstance(v, (date, datetime)):
        return v.isoformat()
    return v


def resource_to_dict(r: Resource, full: bool = True) -> Dict[str, Any]:
    cols = RESOURCE_COLUMNS if full else RESOURCE_CORE_COLUMNS
    out: Dict[str, Any] = {"id": r.id}
    out.update({to_camel(c): _jsonable(getattr(r, c)) for c in cols})
    if full:
        out["createdAt"] = _jsonable(r.created_at)
        out["updatedAt"] = _jsonable(r.updated_at)
    return out


def rrf_to_dict(r: RRF) -> Dict[str, Any]:
    out: Dict[str, Any] = {"id": r.id}
    out.update({to_camel(c): _jsonable(getattr(r, c)) for c in RRF_COLUMNS})
    out["createdAt"] = _jsonable(r.created_at)
    out["updatedAt"] = _jsonable(r.updated_at)
    return out


def upload_to_dict(u: ExcelUpload) -> Dict[str, Any]:
    return {
        "id": u.id,
        "fileName": u.file_name,
        "fileSize": u.file_size,
        "uploadDate": _jsonable(u.upload_date),
        "uploadedBy": u.uploaded_by,
        "rowsProcessed": u.rows_processed,
        "status": u.status,
    }


def metrics_to_dict(m: DashboardMetrics) -> Dict[str, Any]:
    return {
        "totalBench": m.total_bench,
        "onBench90Plus": m.on_bench_90_plus,
        "highExperienceCount": m.high_experience_count,
        "newThisMonth": m.new_this_month,
        "topSkill": m.top_skill,
        "updatedAt": _jsonable(m.updated_at),
    }
