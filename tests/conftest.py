#!/usr/bin/env python3
"""Shared fixtures: in-memory export archives and merged tables"""

import csv
import io
import sys
import zipfile
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from filmlog.models import ExportTables
from filmlog.rows import RawRow


def csv_text(rows):
    """Render a list of dicts as CSV text (header from the first row's keys, in order)"""
    if not rows:
        return ''
    header = []
    for row in rows:
        for key in row:
            if key not in header:
                header.append(key)
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=header, lineterminator='\n')
    writer.writeheader()
    writer.writerows(rows)
    return buf.getvalue()


def zip_bytes(entries):
    """Build a ZIP archive from {entry name: text or list of row dicts}"""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, 'w') as zf:
        for name, content in entries.items():
            text = content if isinstance(content, str) else csv_text(content)
            zf.writestr(name, text)
    return buf.getvalue()


def tables_from(**roles):
    """ExportTables straight from row dicts, skipping the ZIP layer"""
    tables = ExportTables()
    for role, rows in roles.items():
        tables.files.append(f"{role}.csv")
        tables.tables[role] = [RawRow.from_dict(r) for r in rows]
    return tables


@pytest.fixture
def build_archive():
    return zip_bytes


@pytest.fixture
def build_tables():
    return tables_from
