#!/usr/bin/env python3
"""
Record merger - folds every film-bearing table into one record per identity

Field ownership (a field is only ever written by its owning table):
  watched    → watched flag
  ratings    → rating, rated dates
  reviews    → review text samples, review count
  diary      → watched flag, watched dates (watched date, else logged date marked
               estimated), logged dates, rewatch count, tags, diary entries
  likes      → liked
  watchlist  → in_watchlist

  name/year/url/slug: first non-empty value wins, whichever table supplies it.

Every consumed row adds its role to the record's `sources`. profile.csv and
comments.csv carry no film references and are never merged; comment text in
particular must never reach review_text_samples.

The identity → builder map is private to one merge() call. Records leave the
call frozen; nothing can mutate them afterwards.
"""

import logging
import random
from typing import Dict, List, Optional

from filmlog.anomaly import summarize
from filmlog.config import AnalysisConfig
from filmlog.constants import (
    LOGGED_DATE_FIELDS, MERGED_ROLES, RATED_DATE_FIELDS, RATING_FIELDS,
    REVIEW_TEXT_FIELDS, REWATCH_FIELDS, TAG_FIELDS, UNKNOWN_NAME, WATCHED_DATE_FIELDS,
)
from filmlog.identity import KIND_RAW_URL, KIND_SYNTHETIC, ResolvedIdentity, resolve
from filmlog.models import DiaryEntry, ExportTables, FilmRecord, MergeResult
from filmlog.normalization import parse_bool, parse_rating, parse_tags
from filmlog.rows import RawRow, get_date, get_field

logger = logging.getLogger(__name__)


class _RecordBuilder:
    """Mutable accumulator for one film, owned by a single merge call"""

    def __init__(self, identity: ResolvedIdentity):
        self.key = identity.key
        self.slug = identity.slug
        self.name = identity.name
        self.year = identity.year
        self.url = identity.url

        self.watched = False
        self.watched_dates: List[str] = []
        self.logged_dates: List[str] = []
        self.rating: Optional[float] = None
        self.diary_rating: Optional[float] = None
        self.rated_dates: List[str] = []
        self.review_samples: List[str] = []
        self.review_count = 0
        self.rewatch_count = 0
        self.tags: List[str] = []
        self.liked = False
        self.in_watchlist = False
        self.sources = set()
        self.diary_entries: List[DiaryEntry] = []

    def absorb_identity(self, identity: ResolvedIdentity):
        """Fill descriptive fields still empty (first writer wins)"""
        if not self.name and identity.name:
            self.name = identity.name
        if self.year is None and identity.year is not None:
            self.year = identity.year
        if not self.url and identity.url:
            self.url = identity.url
        if not self.slug and identity.slug:
            self.slug = identity.slug

    def build(self, diary_sets_rating: bool) -> FilmRecord:
        rating = self.rating
        rating_source = 'ratings' if rating is not None else None
        if rating is None and diary_sets_rating and self.diary_rating is not None:
            rating = self.diary_rating
            rating_source = 'diary'

        return FilmRecord(
            key=self.key,
            slug=self.slug,
            name=self.name or UNKNOWN_NAME,
            year=self.year,
            url=self.url,
            watched=self.watched,
            watched_dates=tuple(sorted(set(self.watched_dates))),
            logged_dates=tuple(sorted(set(self.logged_dates))),
            rated=rating is not None,
            rating=rating,
            rating_source=rating_source,
            rated_dates=tuple(sorted(set(self.rated_dates))),
            review_text_samples=tuple(self.review_samples),
            review_count=self.review_count,
            rewatch_count=self.rewatch_count,
            tags=tuple(sorted(set(self.tags))),
            liked=self.liked,
            in_watchlist=self.in_watchlist,
            sources=frozenset(self.sources),
            diary_entries=tuple(self.diary_entries),
        )


class RecordMerger:
    """Merge all recognized tables of one export into canonical film records"""

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()
        self._records: Dict[str, _RecordBuilder] = {}
        self.stats = {'rows_consumed': 0, 'synthetic_keys': 0}

    def _upsert(self, row: RawRow, role: str, index: int) -> _RecordBuilder:
        identity = resolve(row, role, index)
        if identity.kind == KIND_SYNTHETIC:
            self.stats['synthetic_keys'] += 1
            logger.debug(f"No name or URL in {role} row {index}; using {identity.key}")
        elif identity.kind == KIND_RAW_URL:
            logger.debug(f"No name in {role} row {index}; keyed by raw URL {identity.url}")

        record = self._records.get(identity.key)
        if record is None:
            record = _RecordBuilder(identity)
            self._records[identity.key] = record
        else:
            record.absorb_identity(identity)

        record.sources.add(role)
        self.stats['rows_consumed'] += 1
        return record

    # --- per-role field rules --------------------------------------------

    def _apply_watched(self, record: _RecordBuilder, row: RawRow):
        record.watched = True

    def _apply_ratings(self, record: _RecordBuilder, row: RawRow):
        rating = parse_rating(get_field(row, RATING_FIELDS))
        if rating is not None:
            record.rating = rating
        rated_at = get_date(row, RATED_DATE_FIELDS)
        if rated_at:
            record.rated_dates.append(rated_at)

    def _apply_reviews(self, record: _RecordBuilder, row: RawRow):
        record.review_count += 1
        text = get_field(row, REVIEW_TEXT_FIELDS)
        sample = (text or '')[:max(self.config.review_sample_max_chars, 0)]
        if sample:
            record.review_samples.append(sample)

    def _apply_diary(self, record: _RecordBuilder, row: RawRow):
        record.watched = True

        watched_at = get_date(row, WATCHED_DATE_FIELDS)
        logged_at = get_date(row, LOGGED_DATE_FIELDS)
        effective = watched_at or logged_at
        estimated = watched_at is None and logged_at is not None
        rewatch = parse_bool(get_field(row, REWATCH_FIELDS))
        tags = parse_tags(get_field(row, TAG_FIELDS))
        rating = parse_rating(get_field(row, RATING_FIELDS))

        if effective:
            record.watched_dates.append(effective)
        if logged_at:
            record.logged_dates.append(logged_at)
        if rewatch:
            record.rewatch_count += 1
        if rating is not None:
            record.diary_rating = rating
        record.tags.extend(tags)

        record.diary_entries.append(DiaryEntry(
            effective_date=effective,
            estimated=estimated,
            watched_date=watched_at,
            logged_date=logged_at,
            rewatch=rewatch,
            rating=rating,
            tags=tuple(tags),
        ))

    def _apply_likes(self, record: _RecordBuilder, row: RawRow):
        record.liked = True

    def _apply_watchlist(self, record: _RecordBuilder, row: RawRow):
        record.in_watchlist = True

    # ---------------------------------------------------------------------

    def merge_films(self, tables: ExportTables) -> List[FilmRecord]:
        """Fold every merged role's rows into records; returns films in first-seen order"""
        if self._records:
            raise RuntimeError("RecordMerger instances are single-use")

        rules = {
            'watched': self._apply_watched,
            'ratings': self._apply_ratings,
            'reviews': self._apply_reviews,
            'diary': self._apply_diary,
            'likes': self._apply_likes,
            'watchlist': self._apply_watchlist,
        }

        for role in MERGED_ROLES:
            apply_rule = rules[role]
            for index, row in enumerate(tables.rows(role)):
                record = self._upsert(row, role, index)
                apply_rule(record, row)

        films = [b.build(self.config.diary_sets_rating) for b in self._records.values()]
        logger.info(f"Merged {self.stats['rows_consumed']} rows into {len(films)} films "
                    f"({self.stats['synthetic_keys']} synthetic identities)")
        return films


def merge(tables: ExportTables, config: Optional[AnalysisConfig] = None,
          rng: Optional[random.Random] = None) -> MergeResult:
    """
    Reconcile one export into canonical film records plus anomaly/debug summaries

    Args:
        tables: Decoded archive tables
        config: Thresholds and the diary-rating rule (defaults from constants.py)
        rng: Random source for the debug sample (unseeded when omitted)
    """
    config = config or AnalysisConfig()
    films = tuple(RecordMerger(config).merge_films(tables))
    anomaly, debug = summarize(tables, films, config=config, rng=rng)
    return MergeResult(films=films, anomaly=anomaly, debug=debug)
