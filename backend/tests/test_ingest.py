"""Tests for workbook reading and the ingest pipeline."""

from __future__ import annotations

import io

import pandas as pd
import pytest

from benchboard.core.exceptions import IngestError
from benchboard.db import crud
from benchboard.pipeline.ingest import ingest_rows, ingest_workbook, read_workbook


def xlsx_bytes(rows) -> bytes:
    buf = io.BytesIO()
    pd.DataFrame(rows).to_excel(buf, index=False)
    return buf.getvalue()


BENCH_ROWS = [
    {"VAMID": "VAM1", "Name": "A", "Joining Date": 45000, "Primary Skill": "Python"},
    {"Name": "B"},
]


def test_read_workbook_drops_blank_cells():
    rows = read_workbook(xlsx_bytes(BENCH_ROWS), "bench.xlsx")
    assert len(rows) == 2
    assert rows[0]["VAMID"] == "VAM1"
    assert rows[1] == {"Name": "B"}


def test_read_csv():
    rows = read_workbook(b"RRF ID,Role\nRRF-1,Backend\n", "rrfs.csv")
    assert rows == [{"RRF ID": "RRF-1", "Role": "Backend"}]


def test_unreadable_workbook():
    with pytest.raises(IngestError):
        read_workbook(b"definitely not a spreadsheet", "bench.xlsx")


def test_ingest_workbook_end_to_end(session):
    report = ingest_workbook(session, xlsx_bytes(BENCH_ROWS), "resource", "bench.xlsx", uploaded_by="hr@example.com")
    session.commit()

    assert (report.received, report.mapped, report.skipped) == (2, 1, 1)
    assert report.rows_affected == 1
    assert report.to_dict()["uploadId"] == report.upload_id

    stored = crud.get_resource_by_vamid(session, "VAM1")
    assert stored.joining_date.isoformat() == "2023-03-15"
    assert stored.primary_skill == "Python"

    upload = crud.get_excel_upload(session, report.upload_id)
    assert upload.file_name == "bench.xlsx"
    assert upload.rows_processed == 1
    assert upload.uploaded_by == "hr@example.com"
    assert crud.get_dashboard_metrics(session).total_bench == 1


def test_ingest_rrf_rows(session):
    rows = [{"RRF ID": "RRF-1", "POS Title": "Data Engineer"}, {"RRF ID": "RRF-2", "Role": "QA"}, {"Role": "x"}]
    report = ingest_rows(session, rows, "rrf", "rrfs.xlsx")
    session.commit()
    assert report.mapped == 2
    assert report.skipped == 1
    assert {r.rrf_id for r in crud.list_rrfs(session)} == {"RRF-1", "RRF-2"}


def test_ingest_unknown_kind(session):
    with pytest.raises(IngestError):
        ingest_rows(session, [], "manager", "x.xlsx")
