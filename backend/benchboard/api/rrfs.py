# backend/benchboard/api/rrfs.py
"""RRF endpoints: bulk upsert by rrfId and listing."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from ..core.exceptions import BenchBoardError
from ..db import crud
from ..db.init import SchemaManager
from ..db.models import rrf_to_dict
from ..schemas import RRFsRequest
from .dependencies import get_batch_size, get_schema
from .responses import not_found, server_error, success_response

router = APIRouter(prefix="/api", tags=["RRFs"])


@router.post("/rrfs", status_code=201)
def create_rrfs(
    body: RRFsRequest,
    schema: SchemaManager = Depends(get_schema),
    batch_size: int = Depends(get_batch_size),
):
    records = [r.model_dump(mode="json") for r in body.rrfs]
    try:
        schema.ensure_initialized()
        created = schema.run(lambda s: [rrf_to_dict(r) for r in crud.create_rrfs(s, records, batch_size)])
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to create RRFs", e)
    return success_response(count=len(created), rrfs=created)


@router.get("/rrfs")
def list_rrfs(schema: SchemaManager = Depends(get_schema)):
    try:
        schema.ensure_initialized()
        return schema.run(lambda s: [rrf_to_dict(r) for r in crud.list_rrfs(s)])
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to fetch RRFs", e)


@router.get("/rrfs/{rrf_id}")
def get_rrf(rrf_id: str, schema: SchemaManager = Depends(get_schema)):
    try:
        schema.ensure_initialized()
        row = schema.run(lambda s: _dict_or_none(crud.get_rrf(s, rrf_id)))
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to fetch RRF", e)
    if row is None:
        raise not_found("RRF not found", {"rrfId": rrf_id})
    return row


def _dict_or_none(row):
    return rrf_to_dict(row) if row is not None else None
