"""Tests for header alias resolution and row mapping."""

from __future__ import annotations

from datetime import datetime

import pytest

from benchboard.pipeline.excel_mapper import (
    RESOURCE_ALIASES,
    map_resource_row,
    map_row,
    map_rows,
    map_rrf_row,
    resolve,
)


def test_maps_one_resource_and_skips_incomplete_row():
    rows = [{"VAMID": "VAM1", "Name": "A", "Joining Date": 45000}, {"Name": "B"}]
    report = map_rows(rows, "resource")
    assert report.skipped == 1
    assert report.received == 2
    assert len(report.records) == 1
    record = report.records[0]
    assert record["vamid"] == "VAM1"
    assert record["name"] == "A"
    assert record["joiningDate"] == "2023-03-15"


def test_first_non_blank_alias_wins():
    row = {"VAMID": "  ", "VAM ID": "VAM2", "VAM_ID": "VAM3", "Name": "X", "Joining Date": "2024-01-02"}
    assert map_resource_row(row)["vamid"] == "VAM2"
    assert resolve({"Full Name": "Y", "FullName": "Z"}, RESOURCE_ALIASES["name"]) == "Y"


def test_serial_and_text_dates_map_identically():
    by_serial = map_resource_row({"VAMID": "V", "Name": "N", "Joining Date": 45000})
    by_text = map_resource_row({"VAMID": "V", "Name": "N", "JoiningDate": "15-Mar-2023"})
    by_cell = map_resource_row({"VAMID": "V", "Name": "N", "Date of Joining": datetime(2023, 3, 15)})
    assert by_serial["joiningDate"] == by_text["joiningDate"] == by_cell["joiningDate"] == "2023-03-15"


def test_numeric_fields_never_nan():
    row = {"VAMID": "V", "Name": "N", "Joining Date": "2024-01-01", "Total Exp": "n/a", "VAM Exp": float("nan")}
    record = map_resource_row(row)
    assert record["totalExp"] is None
    assert record["vamExp"] is None
    row["Total Exp"] = "12"
    assert map_resource_row(row)["totalExp"] == 12


def test_numeric_vamid_becomes_text():
    record = map_resource_row({"VAMID": 1011.0, "Name": "N", "Joining Date": "2024-01-01"})
    assert record["vamid"] == "1011"


def test_unparseable_joining_date_skips_row():
    assert map_resource_row({"VAMID": "V", "Name": "N", "Joining Date": "someday"}) is None
    assert map_resource_row({"VAMID": "V", "Name": "N"}) is None


def test_optional_dates_dropped_when_unparseable():
    record = map_resource_row({
        "VAMID": "V", "Name": "N", "Joining Date": "2024-01-01",
        "Relieving Date": "tbd", "Allocation End Date": 45100,
    })
    assert record["relievingDate"] is None
    assert record["allocationEndDate"] == "2023-06-23"


def test_rrf_rows():
    record = map_rrf_row({"RRF ID": "RRF-9", "POS Title": "Data Engineer", "Experience Required": "5"})
    assert record["rrfId"] == "RRF-9"
    assert record["posTitle"] == "Data Engineer"
    assert record["experienceRequired"] == 5
    assert record["status"] == "open"
    assert map_rrf_row({"POS Title": "No id"}) is None


def test_unknown_kind():
    with pytest.raises(ValueError):
        map_row({"VAMID": "V"}, "manager")
