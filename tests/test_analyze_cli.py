#!/usr/bin/env python3
"""
Test suite for analyze.py — end-to-end run over an export archive
"""

import json
import sys
from pathlib import Path

import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from analyze import main


@pytest.fixture
def export_zip(build_archive, tmp_path):
    path = tmp_path / "export.zip"
    path.write_bytes(build_archive({
        "watched.csv": [
            {"Date": "2024-03-05", "Name": "Heat", "Year": "1995",
             "Letterboxd URI": "https://letterboxd.com/film/heat-1995/"},
            {"Date": "2024-03-05", "Name": "Ronin", "Year": "1998",
             "Letterboxd URI": "https://letterboxd.com/film/ronin/"},
        ],
        "ratings.csv": [
            {"Date": "2024-03-05", "Name": "Heat", "Year": "1995",
             "Letterboxd URI": "https://letterboxd.com/film/heat-1995/", "Rating": "4.5"},
        ],
        "diary.csv": [
            {"Date": "2024-03-05", "Name": "Heat", "Year": "1995",
             "Letterboxd URI": "https://letterboxd.com/someone/film/heat-1995/",
             "Rating": "4.5", "Rewatch": "", "Tags": "", "Watched Date": "2024-03-01"},
        ],
        "comments.csv": [{"Date": "2024-03-06", "Content": "Nice list"}],
        "extra.csv": [{"Anything": "1"}],
    }))
    return path


class TestAnalyzeMain:

    def test_writes_reports(self, export_zip, tmp_path):
        out = tmp_path / "out"
        assert main([str(export_zip), "--output", str(out), "--label", "Sam", "--seed", "1"]) == 0

        for name in ("stat_pack.json", "merge_summary.json", "dossier.json",
                     "films.csv", "monthly_trend.csv"):
            assert (out / name).exists()

        stats = json.loads((out / "stat_pack.json").read_text(encoding="utf-8"))
        assert stats["label"] == "Sam"
        assert stats["totals"]["films_watched"] == 2
        assert stats["totals"]["films_rated"] == 1

        summary = json.loads((out / "merge_summary.json").read_text(encoding="utf-8"))
        assert summary["debug"]["unknown_tables"] == ["extra.csv"]
        assert summary["anomaly"]["import_spike_detected"] is False

        films = pd.read_csv(out / "films.csv")
        assert sorted(films["key"]) == ["film:heat-1995", "film:ronin"]

    def test_missing_archive(self, tmp_path):
        assert main([str(tmp_path / "nope.zip"), "--output", str(tmp_path / "out")]) == 1

    def test_missing_config(self, export_zip, tmp_path):
        assert main([str(export_zip), "--config", str(tmp_path / "nope.yaml"),
                     "--output", str(tmp_path / "out")]) == 1

    def test_invalid_config(self, export_zip, tmp_path):
        config = tmp_path / "bad.yaml"
        config.write_text("- not a mapping\n")
        assert main([str(export_zip), "--config", str(config),
                     "--output", str(tmp_path / "out")]) == 1

    def test_malformed_archive(self, tmp_path):
        bad = tmp_path / "bad.zip"
        bad.write_bytes(b"definitely not a zip")
        out = tmp_path / "out"
        assert main([str(bad), "--output", str(out)]) == 2
        assert not (out / "stat_pack.json").exists()
