#!/usr/bin/env python3
"""
Test suite for filmlog/reader.py — archive decoding and role classification
"""

import io
import sys
import zipfile
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from filmlog.reader import (
    MalformedArchive, classify_role, parse_csv_text, read_export_path, read_export_zip,
)


class TestRoleClassification:
    """Role is a pure function of the lower-cased base name"""

    @pytest.mark.parametrize("name,role", [
        ("watched.csv", "watched"),
        ("ratings.csv", "ratings"),
        ("reviews.csv", "reviews"),
        ("diary.csv", "diary"),
        ("watchlist.csv", "watchlist"),
        ("profile.csv", "profile"),
        ("comments.csv", "comments"),
        ("likes.csv", "likes"),
        ("Watched.CSV", "watched"),
        ("extra.csv", "unknown"),
        ("watched-old.csv", "unknown"),
    ])
    def test_roles(self, name, role):
        assert classify_role(name) == role


class TestCsvDecoding:

    def test_header_driven_rows(self):
        rows = parse_csv_text("Name,Year\nHeat,1995\nRonin,1998\n")
        assert len(rows) == 2
        assert rows[0]["Name"] == "Heat"
        assert rows[1]["Year"] == "1998"

    def test_blank_lines_skipped(self):
        rows = parse_csv_text("\nName,Year\n\nHeat,1995\n,\n\n")
        assert len(rows) == 1

    def test_header_whitespace_trimmed(self):
        rows = parse_csv_text(" Name , Year \nHeat,1995\n")
        assert rows[0]["Name"] == "Heat"

    def test_quoted_commas_and_newlines(self):
        rows = parse_csv_text('Name,Review\nHeat,"Tense, long,\nand great"\n')
        assert rows[0]["Review"] == "Tense, long,\nand great"

    def test_empty_text(self):
        assert parse_csv_text("") == []

    def test_header_only(self):
        assert parse_csv_text("Name,Year\n") == []


class TestReadExportZip:
    """Archive-level behavior: roles, unknown tables, sub-paths, failure"""

    def test_known_tables_loaded(self, build_archive):
        data = build_archive({
            "watched.csv": [{"Name": "Heat", "Year": "1995"}],
            "ratings.csv": [{"Name": "Heat", "Year": "1995", "Rating": "4.5"}],
        })
        tables = read_export_zip(data)
        assert len(tables.rows("watched")) == 1
        assert tables.rows("ratings")[0]["Rating"] == "4.5"
        assert tables.rows("diary") == []

    def test_unknown_table_preserved(self, build_archive):
        data = build_archive({"extra.csv": [{"Name": "Heat"}]})
        tables = read_export_zip(data)
        assert "extra.csv" in tables.unknown
        assert len(tables.unknown["extra.csv"]) == 1
        assert tables.tables == {}

    def test_subpath_entries_skipped(self, build_archive):
        data = build_archive({
            "deleted/watched.csv": [{"Name": "Ghost"}],
            "watched.csv": [{"Name": "Heat"}],
        })
        tables = read_export_zip(data)
        assert len(tables.rows("watched")) == 1
        assert "deleted/watched.csv" in tables.skipped
        assert "deleted/watched.csv" in tables.files

    def test_non_csv_entries_ignored(self, build_archive):
        data = build_archive({"readme.txt": "hello", "watched.csv": [{"Name": "Heat"}]})
        tables = read_export_zip(data)
        assert tables.files == ["watched.csv"]

    def test_utf8_bom_stripped(self):
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as zf:
            zf.writestr("watched.csv", "\ufeffName,Year\nHeat,1995\n".encode("utf-8"))
        tables = read_export_zip(buf.getvalue())
        assert tables.rows("watched")[0]["Name"] == "Heat"

    def test_empty_archive(self, build_archive):
        tables = read_export_zip(build_archive({}))
        assert tables.files == []
        assert tables.tables == {}

    def test_not_a_zip(self):
        with pytest.raises(MalformedArchive):
            read_export_zip(b"this is not a zip archive")

    def test_truncated_zip(self, build_archive):
        data = build_archive({"watched.csv": [{"Name": "Heat"}] * 50})
        with pytest.raises(MalformedArchive):
            read_export_zip(data[: len(data) // 2])

    def test_undecodable_entry_fails_whole_read(self):
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as zf:
            zf.writestr("watched.csv", "Name\nHeat\n")
            zf.writestr("ratings.csv", b"Name\n\xff\xfe\xfa\n")
        with pytest.raises(MalformedArchive):
            read_export_zip(buf.getvalue())

    def test_read_from_path(self, build_archive, tmp_path):
        path = tmp_path / "export.zip"
        path.write_bytes(build_archive({"diary.csv": [{"Name": "Heat", "Watched Date": "2024-03-01"}]}))
        tables = read_export_path(path)
        assert len(tables.rows("diary")) == 1

    def test_missing_path(self, tmp_path):
        with pytest.raises(MalformedArchive):
            read_export_path(tmp_path / "missing.zip")

    def test_corrupt_compressed_entry(self):
        text = "Name,Year\n" + "".join(f"Film number {i},{1950 + i % 70}\n" for i in range(200))
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.writestr("watched.csv", text)
        data = bytearray(buf.getvalue())
        # Local file header is 30 bytes plus the entry name
        start = 30 + len("watched.csv")
        for i in range(start, start + 8):
            data[i] ^= 0xFF
        with pytest.raises(MalformedArchive):
            read_export_zip(bytes(data))
