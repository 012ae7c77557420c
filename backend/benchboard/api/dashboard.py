# backend/benchboard/api/dashboard.py
"""GET /api/dashboard: stored metrics plus ageing, grade and skill breakdowns."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from ..core.exceptions import BenchBoardError
from ..db.init import SchemaManager
from ..pipeline.dashboard import dashboard_snapshot, refresh_metrics
from .dependencies import get_schema
from .responses import server_error, success_response

router = APIRouter(prefix="/api", tags=["Dashboard"])


@router.get("/dashboard")
def get_dashboard(schema: SchemaManager = Depends(get_schema)):
    try:
        schema.ensure_initialized()
        return schema.run(dashboard_snapshot)
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to build dashboard", e)


@router.post("/dashboard/refresh")
def refresh_dashboard(schema: SchemaManager = Depends(get_schema)):
    try:
        schema.ensure_initialized()
        values = schema.run(refresh_metrics)
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to refresh dashboard metrics", e)
    return success_response(message="Dashboard metrics refreshed", metrics=values)
