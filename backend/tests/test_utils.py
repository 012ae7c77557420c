"""Tests for cell coercion, date decoding and loose JSON parsing."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from benchboard.core.utils import (
    excel_serial_to_date,
    iso_date,
    is_blank,
    json_loose,
    parse_date_value,
    to_int,
    to_text,
)


def test_excel_serials_use_1900_date_system():
    assert excel_serial_to_date(1) == date(1900, 1, 1)
    assert excel_serial_to_date(59) == date(1900, 2, 28)
    assert excel_serial_to_date(61) == date(1900, 3, 1)
    assert excel_serial_to_date(45000) == date(2023, 3, 15)


def test_excel_serial_drops_time_fraction():
    assert excel_serial_to_date(45000.75) == date(2023, 3, 15)


def test_excel_serial_out_of_range():
    assert excel_serial_to_date(-1) is None
    assert excel_serial_to_date(float("nan")) is None


def test_serial_and_text_give_same_date():
    assert iso_date(45000) == iso_date("2023-03-15") == iso_date("15 March 2023") == "2023-03-15"


def test_parse_date_value_accepts_decoded_cells():
    assert parse_date_value(datetime(2024, 5, 1, 13, 30)) == date(2024, 5, 1)
    assert parse_date_value(date(2024, 5, 1)) == date(2024, 5, 1)
    assert parse_date_value("not a date") is None
    assert parse_date_value(True) is None


@pytest.mark.parametrize("value", [None, "", "   ", float("nan")])
def test_blank_cells(value):
    assert is_blank(value)


def test_to_int():
    assert to_int("7") == 7
    assert to_int(6.6) == 7
    assert to_int("n/a") is None
    assert to_int(float("nan")) is None
    assert to_int(True) is None


def test_to_text_strips_float_ids():
    assert to_text(1011.0) == "1011"
    assert to_text("  VAM1 ") == "VAM1"
    assert to_text("") is None


def test_json_loose_tolerates_fences_and_prose():
    raw = 'Here you go:\n```json\n[{"rrfId": "R1", "candidates": []}]\n```'
    assert json_loose(raw) == [{"rrfId": "R1", "candidates": []}]
    assert json_loose('{"summary": "ok"}') == {"summary": "ok"}


def test_json_loose_rejects_non_json():
    with pytest.raises(ValueError):
        json_loose("I cannot help with that.")
