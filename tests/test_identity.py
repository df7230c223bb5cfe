#!/usr/bin/env python3
"""
Test suite for filmlog/identity.py — deduplication keys
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from filmlog.identity import (
    KIND_NAME_YEAR, KIND_RAW_URL, KIND_SHORT_LINK, KIND_SLUG, KIND_SYNTHETIC,
    extract_slug, name_year_key, resolve,
)
from filmlog.rows import RawRow


def row(**fields):
    return RawRow.from_dict({k.replace('_', ' '): v for k, v in fields.items()})


class TestExtractSlug:

    @pytest.mark.parametrize("url,expected", [
        ("https://letterboxd.com/film/heat-1995/", ("slug", "heat-1995")),
        ("https://letterboxd.com/film/Heat-1995", ("slug", "heat-1995")),
        ("https://letterboxd.com/someone/film/heat-1995/1/", ("slug", "heat-1995")),
        ("letterboxd.com/film/heat-1995/", ("slug", "heat-1995")),
        ("https://boxd.it/2aHi", ("short_link", "2aHi")),
        ("https://www.boxd.it/2aHi", ("short_link", "2aHi")),
    ])
    def test_recognized(self, url, expected):
        assert extract_slug(url) == expected

    @pytest.mark.parametrize("url", [
        "",
        "https://letterboxd.com/someone/",
        "https://letterboxd.com/film/",
        "https://boxd.it/",
        "https://boxd.it/a/b",
    ])
    def test_unrecognized(self, url):
        assert extract_slug(url) is None


class TestResolve:
    """Priority: slug > name+year > raw URL > synthetic"""

    def test_slug_wins_over_name(self):
        identity = resolve(row(Name="Heat", Year="1995",
                               Letterboxd_URI="https://letterboxd.com/film/heat-1995/"), 'watched', 0)
        assert identity.key == "film:heat-1995"
        assert identity.kind == KIND_SLUG
        assert identity.slug == "heat-1995"
        assert identity.name == "Heat"
        assert identity.year == 1995

    def test_short_link(self):
        identity = resolve(row(Name="Heat", Year="1995", Letterboxd_URI="https://boxd.it/2aHi"),
                           'ratings', 0)
        assert identity.key == "boxd:2aHi"
        assert identity.kind == KIND_SHORT_LINK
        assert identity.slug is None

    def test_name_year(self):
        identity = resolve(row(Name="  The  Thing ", Year="1982"), 'watched', 3)
        assert identity.key == "the thing::1982"
        assert identity.kind == KIND_NAME_YEAR

    def test_name_without_year(self):
        identity = resolve(row(Name="Heat"), 'watched', 0)
        assert identity.key == "heat::unknown"
        assert identity.year is None

    def test_same_name_different_year_stays_apart(self):
        a = resolve(row(Name="The Thing", Year="1982"), 'watched', 0)
        b = resolve(row(Name="The Thing", Year="2011"), 'watched', 1)
        assert a.key != b.key

    def test_unusable_url_falls_back_to_name(self):
        identity = resolve(row(Name="Heat", Year="1995", URI="https://example.com/heat"), 'watched', 0)
        assert identity.key == "heat::1995"

    def test_raw_url_only_without_name(self):
        identity = resolve(row(URI=" https://example.com/heat "), 'watched', 0)
        assert identity.key == "url:https://example.com/heat"
        assert identity.kind == KIND_RAW_URL

    def test_synthetic_key(self):
        identity = resolve(row(Rating="4"), 'ratings', 7)
        assert identity.key == "unknown:ratings:7"
        assert identity.kind == KIND_SYNTHETIC

    def test_alias_columns(self):
        identity = resolve(row(Title="Heat", Year="1995"), 'reviews', 0)
        assert identity.key == "heat::1995"

    def test_pure(self):
        r = row(Name="Heat", Year="1995")
        assert resolve(r, 'watched', 0) == resolve(r, 'watched', 0)


class TestNameYearKey:

    def test_format(self):
        assert name_year_key("Heat", 1995) == "heat::1995"
        assert name_year_key("Heat", None) == "heat::unknown"
