#!/usr/bin/env python3
"""
Export archive reader

Pure PRECISION. Decompresses the ZIP, classifies each root-level .csv entry
by file name, and decodes rows. No merging, no interpretation of values.

Role classification is exact match on the lower-cased base name:
  watched.csv → watched, ratings.csv → ratings, ... (see constants.ROLE_FILENAMES)
Anything else at the archive root is kept under `unknown` (never merged).
Entries under a sub-path are recorded in `skipped` and not decoded.

A corrupt container or unreadable entry fails the whole read with
MalformedArchive - there is no partial success.
"""

import csv
import io
import logging
import lzma
import zipfile
import zlib
from pathlib import Path
from typing import List, Union

from filmlog.constants import ROLE_FILENAMES, UNKNOWN_ROLE
from filmlog.models import ExportTables
from filmlog.rows import RawRow

logger = logging.getLogger(__name__)


class MalformedArchive(Exception):
    """The archive container or one of its entries could not be read"""


def classify_role(entry_name: str) -> str:
    """Map an archive entry name to its table role ('unknown' if unrecognized)"""
    base = entry_name.replace('\\', '/').rsplit('/', 1)[-1].lower()
    return ROLE_FILENAMES.get(base, UNKNOWN_ROLE)


def is_root_csv(entry_name: str) -> bool:
    return entry_name.lower().endswith('.csv') and '/' not in entry_name and '\\' not in entry_name


def parse_csv_text(text: str) -> List[RawRow]:
    """
    Header-driven row decoding

    First non-blank line is the header. Blank lines are skipped and a row that
    decodes to zero columns is discarded. Header names are trimmed.
    """
    reader = csv.reader(io.StringIO(text))
    header = None
    rows: List[RawRow] = []
    for values in reader:
        if not values or all(not v.strip() for v in values):
            continue
        if header is None:
            header = [h.strip() for h in values]
            continue
        pairs = [(column, value) for column, value in zip(header, values) if column]
        if not pairs:
            continue
        rows.append(RawRow(pairs))
    return rows


def read_export_zip(data: bytes) -> ExportTables:
    """
    Read an export archive from bytes

    Raises:
        MalformedArchive: container is not a readable ZIP, or an entry cannot be decoded
    """
    tables = ExportTables()

    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            for info in zf.infolist():
                name = info.filename
                if info.is_dir() or not name.lower().endswith('.csv'):
                    continue
                tables.files.append(name)

                if not is_root_csv(name):
                    logger.debug(f"Skipping CSV under sub-path: {name}")
                    tables.skipped.append(name)
                    continue

                text = zf.read(info).decode('utf-8-sig')
                rows = parse_csv_text(text)
                role = classify_role(name)

                if role == UNKNOWN_ROLE:
                    logger.warning(f"Unrecognized table kept under 'unknown': {name} ({len(rows)} rows)")
                    tables.unknown[name] = rows
                else:
                    tables.tables.setdefault(role, []).extend(rows)
                    logger.info(f"Loaded {name} as '{role}' ({len(rows)} rows)")

    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, EOFError,
            zlib.error, lzma.LZMAError, UnicodeDecodeError, csv.Error, RuntimeError,
            NotImplementedError) as e:
        logger.error(f"Malformed archive: {e}")
        raise MalformedArchive(str(e)) from e

    logger.info(f"Archive contained {len(tables.files)} CSV entries, "
                f"{len(tables.tables)} recognized tables")
    return tables


def read_export_path(path: Union[str, Path]) -> ExportTables:
    """Read an export archive from disk"""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise MalformedArchive(f"Cannot read {path}: {e}") from e
    return read_export_zip(data)
