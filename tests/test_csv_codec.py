"""CSV codec and date helpers."""

import os
from datetime import date, datetime

import pytest

from app.db import csv_codec
from app.db.csv_codec import field, join_ids, parse_bool, parse_int, read_records, split_ids, write_records
from app.utils.dates import format_date, format_datetime, parse_date, parse_datetime
from app.utils.ids import generate_application_id


def test_missing_file_reads_as_empty(tmp_path):
    assert read_records(tmp_path / "nope.csv") == []


def test_read_skips_blank_rows_and_strips_bom(tmp_path):
    path = tmp_path / "staff.csv"
    path.write_text("\ufeffStaffID,Name\nS1,Ann\n,\n\nS2,Ben\n", encoding="utf-8")

    records = read_records(path)

    assert [r["StaffID"] for r in records] == ["S1", "S2"]


def test_short_rows_leave_trailing_columns_missing(tmp_path):
    path = tmp_path / "staff.csv"
    path.write_text("StaffID,Name,Email\nS1,Ann\n", encoding="utf-8")

    record = read_records(path)[0]

    assert field(record, "Email", default="none") == "none"


def test_write_then_read(tmp_path):
    path = tmp_path / "nested" / "out.csv"
    write_records(path, ["ID", "Description"], [["1", "Paid, remote"], ["2", 'Says "hi"']])

    assert path.read_text(encoding="utf-8").splitlines()[0] == "ID,Description"
    assert read_records(path) == [
        {"ID": "1", "Description": "Paid, remote"},
        {"ID": "2", "Description": 'Says "hi"'},
    ]


def test_failed_replace_keeps_original_and_cleans_temp(tmp_path, monkeypatch):
    path = tmp_path / "out.csv"
    write_records(path, ["ID"], [["1"]])
    original = path.read_text(encoding="utf-8")

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(csv_codec.os, "replace", boom)
    with pytest.raises(OSError):
        write_records(path, ["ID"], [["1"], ["2"]])

    assert path.read_text(encoding="utf-8") == original
    assert os.listdir(tmp_path) == ["out.csv"]


def test_field_prefers_first_non_blank_name():
    record = {"CompanyRepID": "  ", "Email": "a@b.com"}
    assert field(record, "CompanyRepID", "Email") == "a@b.com"
    assert field(record, "Missing", default="x") == "x"


def test_scalar_parsers():
    assert parse_int(" 3 ", 1) == 3
    assert parse_int("three", 1) == 1
    assert parse_bool("TRUE") is True
    assert parse_bool("yes") is True
    assert parse_bool("no") is False
    assert parse_bool("", default=True) is True


def test_id_lists_keep_order():
    assert split_ids("b;a; c;;") == ["b", "a", "c"]
    assert split_ids("") == []
    assert join_ids(["b", "a", "c"]) == "b;a;c"


# ============================================================
# DATES & IDS
# ============================================================

def test_dates_accept_legacy_day_first_format():
    assert parse_date("2025-03-10") == date(2025, 3, 10)
    assert parse_date("10-03-2025") == date(2025, 3, 10)
    assert parse_date("  ") is None
    with pytest.raises(ValueError):
        parse_date("March 10")


def test_datetimes_accept_iso_and_bare_dates():
    assert parse_datetime("2025-03-10 09:30:00") == datetime(2025, 3, 10, 9, 30)
    assert parse_datetime("2025-03-10T09:30:00") == datetime(2025, 3, 10, 9, 30)
    assert parse_datetime("2025-03-10") == datetime(2025, 3, 10)


def test_formatting():
    assert format_date(date(2025, 1, 2)) == "2025-01-02"
    assert format_datetime(datetime(2025, 1, 2, 3, 4, 5)) == "2025-01-02 03:04:05"
    assert format_date(None) == ""


def test_generated_ids_have_prefix_timestamp_and_suffix():
    prefix, day, time_part, suffix = generate_application_id().split("-")
    assert prefix == "APP"
    assert len(day) == 8 and len(time_part) == 6
    assert len(suffix) == 8
