# backend/benchboard/api/admin.py
"""
Operational endpoints.

- POST /api/init-db   create the schema if absent (idempotent)
- GET  /api/db-test   connectivity check, server time, present tables
- GET  /api/health    liveness
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from ..core.exceptions import BenchBoardError
from ..db.init import SchemaManager
from .dependencies import get_schema
from .responses import server_error, success_response

router = APIRouter(prefix="/api", tags=["Admin"])


@router.post("/init-db")
def init_db(schema: SchemaManager = Depends(get_schema)):
    try:
        created = schema.ensure_initialized()
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to initialize database", e)
    message = "Database initialized" if created else "Database already initialized"
    return success_response(message=message, created=created)


@router.get("/db-test")
def db_test(schema: SchemaManager = Depends(get_schema)):
    try:
        with schema.database.session_scope() as s:
            now = s.execute(select(func.now())).scalar()
        tables = schema.tables()
    except SQLAlchemyError as e:
        raise server_error("Database connection failed", e)
    return success_response(
        message="Database connection OK",
        dialect=schema.database.dialect,
        currentTime=str(now),
        tables=tables,
    )


@router.get("/health")
def health():
    return {"ok": True, "ts": datetime.now(timezone.utc).isoformat()}
