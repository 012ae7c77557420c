# backend/benchboard/api/uploads.py
"""
Excel upload endpoints.

- POST /api/excel-uploads      record an audit row (client-side ingestion)
- GET  /api/excel-uploads      audit rows, newest first
- POST /api/uploads/{kind}     server-side ingestion of an .xlsx/.xlsm/.csv file
                               (kind: resource | rrf)
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.exc import SQLAlchemyError

from ..core.exceptions import BenchBoardError, IngestError
from ..db import crud
from ..db.init import SchemaManager
from ..db.models import upload_to_dict
from ..pipeline.excel_mapper import RECORD_KINDS
from ..pipeline.ingest import ingest_workbook
from ..schemas import ExcelUploadIn
from .dependencies import get_batch_size, get_schema
from .responses import bad_request, not_found, server_error

router = APIRouter(prefix="/api", tags=["Uploads"])
logger = logging.getLogger(__name__)

ALLOWED_SUFFIXES = (".xlsx", ".xlsm", ".csv")


@router.post("/excel-uploads", status_code=201)
def create_excel_upload(body: ExcelUploadIn, schema: SchemaManager = Depends(get_schema)):
    payload = body.model_dump()
    try:
        schema.ensure_initialized()
        upload = schema.run(lambda s: upload_to_dict(crud.create_excel_upload(s, payload)))
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to create Excel upload record", e)
    upload["fileType"] = body.fileType
    return upload


@router.get("/excel-uploads")
def list_excel_uploads(schema: SchemaManager = Depends(get_schema)):
    try:
        schema.ensure_initialized()
        return schema.run(lambda s: [upload_to_dict(u) for u in crud.list_excel_uploads(s)])
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to fetch Excel uploads", e)


@router.get("/excel-uploads/{upload_id}")
def get_excel_upload(upload_id: int, schema: SchemaManager = Depends(get_schema)):
    try:
        schema.ensure_initialized()
        upload = schema.run(lambda s: _dict_or_none(crud.get_excel_upload(s, upload_id)))
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to fetch Excel upload", e)
    if upload is None:
        raise not_found("Excel upload not found", {"id": upload_id})
    return upload


@router.post("/uploads/{kind}", status_code=201)
def upload_workbook(
    kind: str,
    file: UploadFile = File(...),
    uploaded_by: Optional[str] = Form(default=None),
    schema: SchemaManager = Depends(get_schema),
    batch_size: int = Depends(get_batch_size),
):
    """
    Read the first sheet, map rows (invalid rows are skipped and counted),
    upsert them by business key and record one audit row.
    """
    if kind not in RECORD_KINDS:
        raise bad_request("Unknown upload kind", {"kind": kind, "expected": list(RECORD_KINDS)})
    file_name = file.filename or "upload.xlsx"
    if not file_name.lower().endswith(ALLOWED_SUFFIXES):
        raise bad_request("Unsupported file type", {"fileName": file_name, "expected": list(ALLOWED_SUFFIXES)})

    content = file.file.read()
    if not content:
        raise bad_request("Uploaded file is empty", {"fileName": file_name})

    try:
        schema.ensure_initialized()
        report = schema.run(lambda s: ingest_workbook(
            s, content, kind, file_name, uploaded_by=uploaded_by, batch_size=batch_size,
        ))
    except IngestError as e:
        logger.warning("Rejected upload %s: %s", file_name, e)
        raise bad_request(str(e))
    except (SQLAlchemyError, BenchBoardError) as e:
        raise server_error("Failed to ingest workbook", e)
    return report.to_dict()


def _dict_or_none(row):
    return upload_to_dict(row) if row is not None else None
