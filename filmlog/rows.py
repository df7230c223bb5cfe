#!/usr/bin/env python3
"""
Raw CSV rows with tolerant column access

Export versions disagree on header case, stray whitespace and column names.
RawRow keeps the row exactly as decoded; get_field() is the one place that
resolves a logical field against its alias list.
"""

from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, Optional, Sequence, Tuple

from filmlog.normalization import parse_date


def normalize_header(header: str) -> str:
    """Header key used for matching: trimmed, lower-cased, inner whitespace collapsed"""
    return ' '.join(str(header).split()).lower()


class RawRow(Mapping):
    """One decoded CSV line: ordered (column, value) pairs"""

    def __init__(self, pairs: Iterable[Tuple[str, str]]):
        self.pairs: Tuple[Tuple[str, str], ...] = tuple(
            (str(k), '' if v is None else str(v)) for k, v in pairs
        )
        self._by_name: Dict[str, str] = dict(self.pairs)
        self._by_key: Dict[str, str] = {}
        for column, value in self.pairs:
            # First column wins when two headers normalize to the same key
            self._by_key.setdefault(normalize_header(column), value)

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'RawRow':
        return cls(data.items())

    def lookup(self, column: str) -> Optional[str]:
        """Case/whitespace-insensitive column lookup"""
        return self._by_key.get(normalize_header(column))

    def __getitem__(self, column: str) -> str:
        return self._by_name[column]

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_name)

    def __len__(self) -> int:
        return len(self._by_name)

    def __repr__(self) -> str:
        return f"RawRow({dict(self.pairs)!r})"


def get_field(row: RawRow, aliases: Sequence[str]) -> Optional[str]:
    """
    Return the first non-empty value among the accepted column names

    Args:
        row: Decoded row
        aliases: Accepted column names in priority order (see constants.py)

    Returns:
        Trimmed value, or None if no alias carries a non-blank value
    """
    for alias in aliases:
        value = row.lookup(alias)
        if value is not None and value.strip():
            return value.strip()
    return None


def get_date(row: RawRow, aliases: Sequence[str]) -> Optional[str]:
    """First alias whose value parses as a calendar date (ISO), else None"""
    for alias in aliases:
        parsed = parse_date(get_field(row, (alias,)))
        if parsed:
            return parsed
    return None
