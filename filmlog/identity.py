#!/usr/bin/env python3
"""
Film identity resolution

Derives the deduplication key that decides which rows describe the same film.

Resolution priority:
  1. Canonical slug from a film detail URL (".../film/<slug>/")  → film:<slug>
     or a short-link token ("boxd.it/<token>")                   → boxd:<token>
  2. Normalized name + year                                      → <name>::<year|unknown>
  3. Raw trimmed URL, only when the row has no name at all       → url:<raw>
  4. Synthetic per-row key (never coalesces with anything)       → unknown:<source>:<index>

resolve() is pure: the same row, source and index always give the same key.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import urlparse

from filmlog.constants import (
    FILM_PATH_SEGMENT, NAME_FIELDS, NAME_YEAR_SEPARATOR, RAW_URL_KEY_PREFIX,
    SHORT_LINK_HOSTS, SHORT_LINK_KEY_PREFIX, SLUG_KEY_PREFIX, SYNTHETIC_KEY_PREFIX,
    UNKNOWN_YEAR, URL_FIELDS, YEAR_FIELDS,
)
from filmlog.normalization import normalize_name, parse_year
from filmlog.rows import RawRow, get_field

KIND_SLUG = 'slug'
KIND_SHORT_LINK = 'short_link'
KIND_NAME_YEAR = 'name_year'
KIND_RAW_URL = 'raw_url'
KIND_SYNTHETIC = 'synthetic'


@dataclass(frozen=True)
class ResolvedIdentity:
    """Identity key plus the row fields it was derived from"""
    key: str
    kind: str
    slug: Optional[str]
    name: Optional[str]
    year: Optional[int]
    url: Optional[str]


def extract_slug(url: str) -> Optional[Tuple[str, str]]:
    """
    Extract (kind, token) from a film URL

    Examples:
        >>> extract_slug("https://letterboxd.com/film/heat-1995/")
        ('slug', 'heat-1995')
        >>> extract_slug("https://letterboxd.com/someone/film/heat-1995/1/")
        ('slug', 'heat-1995')
        >>> extract_slug("https://boxd.it/2aHi")
        ('short_link', '2aHi')
    """
    raw = url.strip()
    if not raw:
        return None
    if '://' not in raw:
        raw = 'https://' + raw

    parsed = urlparse(raw)
    host = (parsed.hostname or '').lower()
    if host.startswith('www.'):
        host = host[4:]
    segments = [s for s in parsed.path.split('/') if s]

    if host in SHORT_LINK_HOSTS:
        if len(segments) == 1:
            return KIND_SHORT_LINK, segments[0]
        return None

    for i, segment in enumerate(segments[:-1]):
        if segment.lower() == FILM_PATH_SEGMENT:
            return KIND_SLUG, segments[i + 1].lower()
    return None


def name_year_key(name: str, year: Optional[int]) -> str:
    return f"{normalize_name(name)}{NAME_YEAR_SEPARATOR}{year if year is not None else UNKNOWN_YEAR}"


def resolve(row: RawRow, source: str, row_index: int) -> ResolvedIdentity:
    """
    Resolve the identity key for one row

    Args:
        row: Decoded row
        source: Table role the row came from (used only for synthetic keys)
        row_index: Position of the row within its table (used only for synthetic keys)
    """
    name = get_field(row, NAME_FIELDS)
    year = parse_year(get_field(row, YEAR_FIELDS))
    url = get_field(row, URL_FIELDS)

    if url:
        extracted = extract_slug(url)
        if extracted:
            kind, token = extracted
            prefix = SLUG_KEY_PREFIX if kind == KIND_SLUG else SHORT_LINK_KEY_PREFIX
            slug = token if kind == KIND_SLUG else None
            return ResolvedIdentity(f"{prefix}{token}", kind, slug, name, year, url)

    if name and normalize_name(name):
        return ResolvedIdentity(name_year_key(name, year), KIND_NAME_YEAR, None, name, year, url)

    if url:
        return ResolvedIdentity(f"{RAW_URL_KEY_PREFIX}{url}", KIND_RAW_URL, None, None, year, url)

    return ResolvedIdentity(f"{SYNTHETIC_KEY_PREFIX}{source}:{row_index}", KIND_SYNTHETIC,
                            None, None, year, None)
