# backend/benchboard/api/resources.py
"""
Resource endpoints.

- POST /api/resources            one object or an array; core-column upsert by vamid
- GET  /api/resources            all resources, newest first
- GET/PATCH/DELETE /api/resources/{vamid}
- POST /api/bench-resources      {resources: [...]} full-column bulk upsert
"""

from __future__ import annotations

from typing import List, Union

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from ..core.exceptions import BenchBoardError
from ..db import crud
from ..db.init import SchemaManager
from ..db.models import resource_to_dict
from ..pipeline.dashboard import refresh_metrics
from ..schemas import BenchResourcesRequest, ResourceIn, ResourcePatch
from .dependencies import get_batch_size, get_schema
from .responses import not_found, server_error, success_response

router = APIRouter(prefix="/api", tags=["Resources"])


@router.post("/resources", status_code=201)
def create_resources(
    body: Union[List[ResourceIn], ResourceIn],
    schema: SchemaManager = Depends(get_schema),
):
    items = body if isinstance(body, list) else [body]
    records = [r.model_dump(mode="json") for r in items]

    def _write(s):
        rows = crud.create_resources(s, records)
        refresh_metrics(s)
        return [resource_to_dict(r, full=False) for r in rows]

    try:
        schema.ensure_initialized()
        created = schema.run(_write)
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to create resources", e)
    return {"data": created}


@router.get("/resources")
def list_resources(schema: SchemaManager = Depends(get_schema)):
    try:
        schema.ensure_initialized()
        rows = schema.run(lambda s: [resource_to_dict(r) for r in crud.list_resources(s)])
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to fetch resources", e)
    return {"data": rows}


@router.get("/resources/{vamid}")
def get_resource(vamid: str, schema: SchemaManager = Depends(get_schema)):
    try:
        schema.ensure_initialized()
        row = schema.run(lambda s: _dict_or_none(crud.get_resource_by_vamid(s, vamid)))
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to fetch resource", e)
    if row is None:
        raise not_found("Resource not found", {"vamid": vamid})
    return {"data": row}


@router.patch("/resources/{vamid}")
def update_resource(vamid: str, body: ResourcePatch, schema: SchemaManager = Depends(get_schema)):
    changes = body.model_dump(mode="json", exclude_unset=True)

    def _update(s):
        row = crud.update_resource(s, vamid, changes)
        if row is not None:
            refresh_metrics(s)
        return _dict_or_none(row)

    try:
        schema.ensure_initialized()
        row = schema.run(_update)
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to update resource", e)
    if row is None:
        raise not_found("Resource not found", {"vamid": vamid})
    return {"data": row}


@router.delete("/resources/{vamid}")
def delete_resource(vamid: str, schema: SchemaManager = Depends(get_schema)):
    def _delete(s):
        deleted = crud.delete_resource(s, vamid)
        if deleted:
            refresh_metrics(s)
        return deleted

    try:
        schema.ensure_initialized()
        deleted = schema.run(_delete)
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to delete resource", e)
    if not deleted:
        raise not_found("Resource not found", {"vamid": vamid})
    return success_response(message=f"Deleted resource {vamid}")


@router.post("/bench-resources", status_code=201)
def save_bench_resources(
    body: BenchResourcesRequest,
    schema: SchemaManager = Depends(get_schema),
    batch_size: int = Depends(get_batch_size),
):
    records = [r.model_dump(mode="json") for r in body.resources]

    def _write(s):
        affected = crud.upsert_resources(s, records, batch_size)
        refresh_metrics(s)
        return affected

    try:
        schema.ensure_initialized()
        rows_affected = schema.run(_write)
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to save bench resources", e)
    return success_response(
        message=f"Successfully saved {rows_affected} resource(s) to database",
        rowsAffected=rows_affected,
    )


def _dict_or_none(row):
    return resource_to_dict(row) if row is not None else None
