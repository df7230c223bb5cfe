#!/usr/bin/env python3
"""
Anomaly and debug summaries for one merged export

Import spike: watched.csv's date column records when a row landed in the
account, not when the film was seen. When a large share of rows share one
calendar day while real diary activity spans years, the user bulk-imported
their history. Downstream consumers must not read that day as a binge;
this module only raises the flag, it never alters records.

Coverage and hit-rate counters let a human (or a test) see how well the
tables lined up during the merge.
"""

import logging
import random
from collections import Counter
from typing import Iterable, Optional, Sequence, Tuple

from filmlog.config import AnalysisConfig
from filmlog.constants import DAYS_PER_YEAR, IMPORT_DATE_FIELDS, ROLES, SYNTHETIC_KEY_PREFIX
from filmlog.models import AnomalySummary, DebugSummary, ExportTables, FilmRecord
from filmlog.normalization import date_ordinal
from filmlog.rows import get_date

logger = logging.getLogger(__name__)


def span_years(dates: Iterable[str]) -> int:
    """Year difference between earliest and latest ISO date (0 with fewer than 2 distinct years)"""
    years = {int(d[:4]) for d in dates if d}
    if len(years) < 2:
        return 0
    return max(years) - min(years)


def day_span(dates: Iterable[str]) -> int:
    """Days between earliest and latest ISO date (0 with fewer than 2 dates)"""
    ordinals = [date_ordinal(d) for d in dates if d]
    if len(ordinals) < 2:
        return 0
    return max(ordinals) - min(ordinals)


def import_day_counts(tables: ExportTables) -> Counter:
    """Count watched.csv rows per import calendar day"""
    counts: Counter = Counter()
    for row in tables.rows('watched'):
        day = get_date(row, IMPORT_DATE_FIELDS)
        if day:
            counts[day] += 1
    return counts


def largest_import_day(counts: Counter) -> Tuple[Optional[str], int]:
    """Busiest import day; ties go to the earliest date"""
    if not counts:
        return None, 0
    day, count = min(counts.items(), key=lambda item: (-item[1], item[0]))
    return day, count


def summarize_anomaly(tables: ExportTables, films: Sequence[FilmRecord],
                      config: Optional[AnalysisConfig] = None) -> AnomalySummary:
    config = config or AnalysisConfig()

    watched_rows = len(tables.rows('watched'))
    day, count = largest_import_day(import_day_counts(tables))
    share = count / watched_rows if watched_rows else 0.0

    watched_dates = [d for f in films for d in f.watched_dates]
    diary_dates = [e.logged_date or e.effective_date
                   for f in films for e in f.diary_entries
                   if e.logged_date or e.effective_date]
    watched_span = span_years(watched_dates)
    diary_span = span_years(diary_dates)
    activity_days = max(day_span(watched_dates), day_span(diary_dates))

    spike = (
        count >= config.import_spike_min_count
        and share >= config.import_spike_min_share
        and activity_days > DAYS_PER_YEAR * config.import_spike_min_span_years
    )
    if spike:
        logger.warning(f"Import spike detected: {count} of {watched_rows} watched rows "
                       f"recorded on {day} ({share:.0%}); activity spans "
                       f"{activity_days} days")
    else:
        logger.info(f"No import spike (busiest import day: {day} x {count})")

    return AnomalySummary(
        import_spike_detected=spike,
        largest_single_day_import_count=count,
        largest_single_day_import_date=day,
        import_spike_share=share,
        watched_date_span_years=watched_span,
        diary_entry_span_years=diary_span,
    )


def summarize_debug(tables: ExportTables, films: Sequence[FilmRecord],
                    config: Optional[AnalysisConfig] = None,
                    rng: Optional[random.Random] = None) -> DebugSummary:
    config = config or AnalysisConfig()
    rng = rng or random.Random()

    total = len(films)
    entries = [e for f in films for e in f.diary_entries]
    genuine = sum(1 for e in entries if e.effective_date and not e.estimated)

    counts = tables.row_counts()
    row_counts = tuple((role, counts[role]) for role in ROLES if role in counts)

    sample_size = min(config.debug_sample_size, total)
    samples = tuple(rng.sample(list(films), sample_size)) if sample_size > 0 else ()

    return DebugSummary(
        csv_detected=tuple(tables.files),
        row_counts=row_counts,
        unknown_tables=tuple(tables.unknown),
        merged_film_count=total,
        watched_true_count=sum(1 for f in films if f.watched),
        percent_with_watched_at=genuine / len(entries) if entries else 0.0,
        ratings_hit_rate=sum(1 for f in films if f.rating is not None) / total if total else 0.0,
        reviews_hit_rate=sum(1 for f in films if f.review_text_samples) / total if total else 0.0,
        only_in_ratings_not_in_watched=sum(
            1 for f in films if 'ratings' in f.sources and 'watched' not in f.sources),
        only_in_reviews_not_in_watched=sum(
            1 for f in films if 'reviews' in f.sources and 'watched' not in f.sources),
        synthetic_identity_count=sum(1 for f in films if f.key.startswith(SYNTHETIC_KEY_PREFIX)),
        random_film_samples=samples,
    )


def summarize(tables: ExportTables, films: Sequence[FilmRecord],
              config: Optional[AnalysisConfig] = None,
              rng: Optional[random.Random] = None) -> Tuple[AnomalySummary, DebugSummary]:
    """Compute both summaries; neither reads nor writes anything but its arguments"""
    return (summarize_anomaly(tables, films, config),
            summarize_debug(tables, films, config, rng))
