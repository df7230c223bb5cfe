#!/usr/bin/env python3
"""
Test suite for filmlog/normalization.py and filmlog/rows.py — tolerant value parsing
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from filmlog.normalization import (
    get_decade, normalize_name, parse_bool, parse_date, parse_rating, parse_tags, parse_year,
)
from filmlog.rows import RawRow, get_date, get_field


class TestNameNormalization:
    """Name keys must be identical across tables for the same film"""

    def test_lowercase(self):
        assert normalize_name("Heat") == "heat"

    def test_collapses_whitespace(self):
        assert normalize_name("  The   Godfather  Part II ") == "the godfather part ii"

    def test_composed_and_decomposed_accents_match(self):
        composed = "Am\u00e9lie"
        decomposed = "Ame\u0301lie"
        assert normalize_name(composed) == normalize_name(decomposed)

    def test_keeps_punctuation(self):
        assert normalize_name("Mission: Impossible") == "mission: impossible"


class TestRatingParsing:
    """Ratings accept export variants and reject anything off the half-star scale"""

    @pytest.mark.parametrize("raw,expected", [
        ("4.5", 4.5),
        ("4,5", 4.5),
        ("3½", 3.5),
        ("½", 0.5),
        ("5", 5.0),
        (" 2.0 ", 2.0),
        ("★★★½", 3.5),
        ("★★★★★", 5.0),
    ])
    def test_accepted_forms(self, raw, expected):
        assert parse_rating(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "0", "7.5", "-1"])
    def test_rejected_forms(self, raw):
        assert parse_rating(raw) is None


class TestDateParsing:
    """All dates leave as ISO calendar dates, never with a time of day"""

    def test_iso_date(self):
        assert parse_date("2024-03-01") == "2024-03-01"

    def test_iso_datetime_drops_time(self):
        assert parse_date("2024-03-01 22:15:00") == "2024-03-01"

    def test_invalid_iso_calendar_date(self):
        assert parse_date("2024-02-30") is None

    def test_slash_format(self):
        assert parse_date("2024/03/01") == "2024-03-01"

    def test_day_month_name(self):
        assert parse_date("1 March 2024") == "2024-03-01"

    def test_month_name_first(self):
        assert parse_date("Mar 1, 2024") == "2024-03-01"

    @pytest.mark.parametrize("raw", [None, "", "yesterday", "13/13/2024"])
    def test_unparseable(self, raw):
        assert parse_date(raw) is None

    def test_slash_dates_are_day_first(self):
        assert parse_date("03/12/2024") == "2024-12-03"
        # Month-first US dates are not accepted
        assert parse_date("03/15/2024") is None


class TestSmallParsers:

    def test_year(self):
        assert parse_year("1995") == 1995
        assert parse_year("") is None
        assert parse_year("12") is None
        assert parse_year("3024") is None

    @pytest.mark.parametrize("raw", ["yes", "Yes", "TRUE", "1"])
    def test_truthy(self, raw):
        assert parse_bool(raw) is True

    @pytest.mark.parametrize("raw", [None, "", "no", "false", "0", "y"])
    def test_falsy(self, raw):
        assert parse_bool(raw) is False

    def test_tags(self):
        assert parse_tags("cinema, friends ,, imax") == ["cinema", "friends", "imax"]
        assert parse_tags(None) == []

    def test_decade(self):
        assert get_decade(1995) == "1990s"
        assert get_decade(2000) == "2000s"


class TestFieldLookup:
    """Column access ignores header case/whitespace and honors alias priority"""

    def test_case_and_whitespace_insensitive(self):
        row = RawRow([("  NAME ", "Heat"), ("year", "1995")])
        assert get_field(row, ("Name",)) == "Heat"
        assert get_field(row, ("Year",)) == "1995"

    def test_alias_priority(self):
        row = RawRow([("Title", "B"), ("Film", "A")])
        assert get_field(row, ("Name", "Film", "Title")) == "A"

    def test_blank_values_skipped(self):
        row = RawRow([("Name", "   "), ("Title", "Heat")])
        assert get_field(row, ("Name", "Title")) == "Heat"

    def test_missing_returns_none(self):
        row = RawRow([("Name", "Heat")])
        assert get_field(row, ("Rating",)) is None

    def test_value_trimmed(self):
        row = RawRow([("Name", "  Heat  ")])
        assert get_field(row, ("Name",)) == "Heat"

    def test_get_date_skips_unparseable_alias(self):
        row = RawRow([("Watched Date", "soon"), ("Date", "2024-01-02")])
        assert get_date(row, ("Watched Date", "Date")) == "2024-01-02"

    def test_row_is_mapping(self):
        row = RawRow([("Name", "Heat"), ("Year", "1995")])
        assert dict(row) == {"Name": "Heat", "Year": "1995"}
        assert len(row) == 2
