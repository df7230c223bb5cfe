#!/usr/bin/env python3
"""
Shared value normalization for export rows

CRITICAL: Identity keys are built from normalize_name(). The same normalization
MUST be used by every table that contributes to a film, otherwise rows for the
same film will not coalesce and the merge will silently split records.

All parsers here are total: a value that cannot be understood returns None
(or an empty list), never raises.
"""

import math
import re
import unicodedata
from datetime import date, datetime
from typing import List, Optional

from filmlog.constants import (
    DATE_FORMATS, HALF_GLYPH, MAX_RELEASE_YEAR, MIN_RELEASE_YEAR,
    RATING_MAX, RATING_MIN, STAR_GLYPH, TRUTHY_VALUES,
)

ISO_DATE_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})')
YEAR_RE = re.compile(r'\d{4}')
NUMBER_RE = re.compile(r'-?(?:\d+(?:\.\d+)?|\.\d+)')


def normalize_name(name: str) -> str:
    """
    Normalize a film name for identity matching

    Normalization steps:
    1. Unicode NFC (composed and decomposed accents compare equal)
    2. Lowercase
    3. Collapse internal whitespace

    Examples:
        >>> normalize_name("  The   Godfather ")
        'the godfather'
    """
    name = unicodedata.normalize('NFC', name)
    return ' '.join(name.lower().split())


def parse_rating(value: Optional[str]) -> Optional[float]:
    """
    Parse a rating value on the 0.5-5.0 half-star scale

    Accepts "4.5", "4,5", "3½", "½" and star glyphs ("★★★½").
    Values outside the scale are treated as absent.
    """
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None

    if STAR_GLYPH in s:
        rating = float(s.count(STAR_GLYPH))
        if HALF_GLYPH in s:
            rating += 0.5
    else:
        s = s.replace(HALF_GLYPH, '.5').replace(',', '.')
        match = NUMBER_RE.search(s)
        if not match:
            return None
        rating = float(match.group(0))

    if not math.isfinite(rating) or rating < RATING_MIN or rating > RATING_MAX:
        return None
    return rating


def parse_date(value: Optional[str]) -> Optional[str]:
    """
    Parse a date field to an ISO calendar date (YYYY-MM-DD)

    A leading YYYY-MM-DD wins (any time-of-day suffix is dropped). Otherwise
    the fixed DATE_FORMATS list is tried in order.
    """
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None

    match = ISO_DATE_RE.match(s)
    if match:
        try:
            return date(int(match.group(1)), int(match.group(2)), int(match.group(3))).isoformat()
        except ValueError:
            return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def parse_year(value: Optional[str]) -> Optional[int]:
    """Parse a release year; years outside the plausible window are absent"""
    if value is None:
        return None
    match = YEAR_RE.search(str(value))
    if not match:
        return None
    year = int(match.group(0))
    if MIN_RELEASE_YEAR <= year <= MAX_RELEASE_YEAR:
        return year
    return None


def parse_bool(value: Optional[str]) -> bool:
    return (value or '').strip().lower() in TRUTHY_VALUES


def parse_tags(value: Optional[str]) -> List[str]:
    """Split a tag field on commas (or pipes), dropping empties"""
    if not value:
        return []
    return [t.strip() for t in re.split(r'[|,]', value) if t.strip()]


def date_ordinal(iso_date: str) -> int:
    """Day index for an ISO date (consecutive days differ by exactly 1)"""
    return date.fromisoformat(iso_date).toordinal()


def month_key(iso_date: str) -> str:
    return iso_date[:7]


def get_decade(year: int) -> str:
    """Convert year to decade string"""
    return f"{(year // 10) * 10}s"
