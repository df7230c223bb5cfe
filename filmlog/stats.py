#!/usr/bin/env python3
"""
Statistics engine

compute_stats() is a pure function of the merged film records and a label.
Every derived index is computed from the primitives in this module, never
sourced independently, so the numbers on a share card can always be traced
back to totals and rating distribution.

Statistic → input:
  totals, rating distribution      → all films (rating is owned by ratings.csv)
  activity, trends, correlation    → watched films placed on the timeline by best date
  release years / decades          → watched films with a known year
  text                             → review text samples (reviews.csv only)
"""

import logging
import math
from collections import Counter
from datetime import datetime, timezone
from statistics import mean, median, pstdev
from typing import List, Optional, Sequence, Tuple

from filmlog.config import AnalysisConfig
from filmlog.constants import (
    BADGE_BALANCED, BADGE_CASUAL, BADGE_DEDICATED, BADGE_PASSIONATE, BADGE_SILENT,
    BADGE_STEADY, BADGE_WILDCARD, COMFORT_ZONE_DECADES, DEFAULT_LABEL, INDECISIVE_BUCKETS,
    RATING_MAX, RATING_MIN, RATING_STEP, RECENT_LONG_MONTHS, RECENT_SHORT_MONTHS,
)
from filmlog.models import (
    Activity, DecadeCount, FilmRecord, Indices, RadarMetric, RatingBucket, RatingSummary,
    ReleaseYears, ShareText, StatPack, Totals, Trends, YearCount,
)
from filmlog.normalization import date_ordinal, get_decade, month_key
from filmlog.text_analysis import analyze_reviews
from filmlog.timeline import (
    TimelineRow, build_timeline, busiest_day, count_by_day, count_by_month,
    find_streaks, month_diff, recent_window, trend_series,
)

logger = logging.getLogger(__name__)


def clamp(n: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(high, max(low, n))


def snap_rating(rating: float) -> float:
    """Nearest half-star bucket, halves rounding up (4.25 → 4.5, 4.3 → 4.5)"""
    return math.floor(rating * 2 + 0.5) / 2


def rating_buckets() -> List[float]:
    steps = int(round((RATING_MAX - RATING_MIN) / RATING_STEP))
    return [RATING_MIN + i * RATING_STEP for i in range(steps + 1)]


def pearson(xs: Sequence[float], ys: Sequence[float]) -> Optional[float]:
    """Pearson correlation; None with fewer than 2 points or zero variance"""
    if len(xs) != len(ys) or len(xs) < 2:
        return None
    mx, my = mean(xs), mean(ys)
    num = dx = dy = 0.0
    for x, y in zip(xs, ys):
        a, b = x - mx, y - my
        num += a * b
        dx += a * a
        dy += b * b
    if dx == 0 or dy == 0:
        return None
    return num / math.sqrt(dx * dy)


def compute_totals(films: Sequence[FilmRecord]) -> Totals:
    watched = [f for f in films if f.watched]
    rated = [f for f in films if f.rating is not None]
    return Totals(
        films_watched=len(watched),
        films_rated=len(rated),
        films_reviewed=sum(1 for f in films if f.review_text_samples),
        unrated_watched=sum(1 for f in watched if f.rating is None),
        rated_share=len(rated) / len(watched) if watched else 0.0,
        diary_entries=sum(len(f.diary_entries) for f in films),
        rewatch_films=sum(1 for f in watched if any(e.rewatch for e in f.diary_entries)),
        liked_films=sum(1 for f in films if f.liked),
    )


def compute_rating_summary(films: Sequence[FilmRecord]) -> RatingSummary:
    ratings = [f.rating for f in films if f.rating is not None]

    buckets = rating_buckets()
    counts = Counter(snap_rating(r) for r in ratings)
    histogram = tuple(RatingBucket(b, counts.get(b, 0)) for b in buckets)

    mode = None
    best = 0
    for bucket in histogram:
        if bucket.count > best:
            mode, best = bucket.rating, bucket.count

    indecisive = sum(counts.get(b, 0) for b in INDECISIVE_BUCKETS)
    return RatingSummary(
        mean=mean(ratings) if ratings else None,
        median=median(ratings) if ratings else None,
        stddev=pstdev(ratings) if ratings else None,
        histogram=histogram,
        mode=mode,
        indecisive_share=indecisive / len(ratings) if ratings else 0.0,
    )


def rating_date_correlation(rows: Sequence[TimelineRow]) -> Optional[float]:
    points = [(date_ordinal(r.date), r.film.rating) for r in rows if r.film.rating is not None]
    return pearson([p[0] for p in points], [p[1] for p in points])


def compute_activity(rows: Sequence[TimelineRow], top_streaks: int) -> Activity:
    by_day = count_by_day(rows)
    streaks = find_streaks([r.date for r in rows])
    return Activity(
        by_day=by_day,
        by_month=count_by_month(rows),
        longest_streak_days=streaks[0].days if streaks else 0,
        top_streaks=tuple(streaks[:top_streaks]),
        busiest_day=busiest_day(by_day),
        rating_date_correlation=rating_date_correlation(rows),
        used_logged_fallback=any(r.used_fallback for r in rows),
    )


def compute_release_years(films: Sequence[FilmRecord], rows: Sequence[TimelineRow],
                          top_years: int) -> ReleaseYears:
    watched = [f for f in films if f.watched]
    years = Counter(f.year for f in watched if f.year is not None)
    decades = Counter(get_decade(f.year) for f in watched if f.year is not None)

    by_year = tuple(YearCount(y, years[y]) for y in sorted(years))
    ranked_years = sorted(years.items(), key=lambda item: (-item[1], item[0]))
    ranked_decades = sorted(decades.items(), key=lambda item: (-item[1], item[0]))

    comfort = sum(c for _, c in ranked_decades[:COMFORT_ZONE_DECADES])

    exploration = 0.0
    if rows and decades:
        latest = month_key(max(r.date for r in rows))
        recent = {get_decade(r.film.year) for r in rows
                  if r.film.year is not None
                  and month_diff(month_key(r.date), latest) <= RECENT_SHORT_MONTHS - 1}
        exploration = clamp(len(recent) / len(decades))

    return ReleaseYears(
        by_year=by_year,
        top_years=tuple(YearCount(y, c) for y, c in ranked_years[:top_years]),
        decades=tuple(DecadeCount(d, c) for d, c in ranked_decades),
        span_min=min(years) if years else None,
        span_max=max(years) if years else None,
        comfort_zone_return_rate=comfort / len(watched) if watched else 0.0,
        exploration_index=exploration,
    )


def classify_badge(commitment: float, volatility: Optional[float], has_ratings: bool,
                   config: AnalysisConfig) -> str:
    """
    Rule-based badge from commitment (rated/watched) and volatility (rating std dev)

    Rules, first match wins:
      no ratings                                     → Silent Watcher
      commitment >= high and volatility >= high      → Passionate Judge
      commitment >= high                             → Dedicated Rater
      commitment < low                               → Casual Viewer
      volatility >= high                             → Wildcard
      volatility <= low                              → Steady Hand
      otherwise                                      → Balanced Viewer
    """
    if not has_ratings or volatility is None:
        return BADGE_SILENT
    if commitment >= config.commitment_high and volatility >= config.volatility_high:
        return BADGE_PASSIONATE
    if commitment >= config.commitment_high:
        return BADGE_DEDICATED
    if commitment < config.commitment_low:
        return BADGE_CASUAL
    if volatility >= config.volatility_high:
        return BADGE_WILDCARD
    if volatility <= config.volatility_low:
        return BADGE_STEADY
    return BADGE_BALANCED


def compute_radar(totals: Totals, ratings: RatingSummary, release: ReleaseYears,
                  expression: float) -> Tuple[RadarMetric, ...]:
    strictness = clamp(1 - (ratings.mean or 0) / RATING_MAX) if ratings.mean is not None else 0.0
    diversity = clamp(len(release.decades) / 10)
    rewatch = totals.rewatch_films / totals.films_watched if totals.films_watched else 0.0
    unrated = totals.unrated_watched / totals.films_watched if totals.films_watched else 0.0
    concentration = clamp(1 - release.comfort_zone_return_rate)

    metrics = [
        ('strictness', 'Rating strictness', strictness),
        ('diversity', 'Diversity index', diversity),
        ('exploration', 'Exploration', release.exploration_index),
        ('rewatch', 'Rewatch tendency', rewatch),
        ('unrated', 'Unrated tendency', unrated),
        ('expression', 'Review intensity', expression),
        ('concentration', 'Concentration', concentration),
    ]
    return tuple(RadarMetric(key, label, int(round(value * 100))) for key, label, value in metrics)


def build_share_text(label: str, totals: Totals, ratings: RatingSummary,
                     longest_streak: int, genuine_share: float) -> ShareText:
    mean_text = f"{ratings.mean:.1f}" if ratings.mean is not None else 'n/a'
    short = f"{label}: {totals.films_watched:,} watched, mean {mean_text}"
    long = (f"{label} watched {totals.films_watched:,} films "
            f"({genuine_share:.0%} with real watched dates), rated {totals.films_rated:,}. "
            f"Longest streak {longest_streak} days.")
    return ShareText(short=short, long=long)


def compute_stats(films: Sequence[FilmRecord], label: Optional[str] = None,
                  config: Optional[AnalysisConfig] = None,
                  generated_at: Optional[str] = None) -> StatPack:
    """
    Compute the full statistics pack for one merged export

    Args:
        films: Merged, immutable film records
        label: Display label (blank → "You")
        config: Top-N sizes and badge thresholds
        generated_at: Timestamp override (ISO string); defaults to now, UTC

    Returns:
        StatPack - fully populated, possibly sparse (None means "no data")
    """
    config = config or AnalysisConfig()
    label = (label or '').strip() or DEFAULT_LABEL
    generated_at = generated_at or datetime.now(timezone.utc).isoformat(timespec='seconds')

    rows = build_timeline(films)
    totals = compute_totals(films)
    ratings = compute_rating_summary(films)
    activity = compute_activity(rows, config.top_streaks)

    timeline = trend_series(rows)
    trends = Trends(
        timeline=timeline,
        recent_12=recent_window(timeline, RECENT_SHORT_MONTHS),
        recent_24=recent_window(timeline, RECENT_LONG_MONTHS),
    )

    release = compute_release_years(films, rows, config.top_years)

    reviews = [t for f in films for t in f.review_text_samples]
    text = analyze_reviews(reviews, config.top_words, config.min_token_length)

    commitment = totals.rated_share
    indices = Indices(
        commitment_index=commitment,
        taste_volatility=ratings.stddev,
        badge=classify_badge(commitment, ratings.stddev, totals.films_rated > 0, config),
        radar=compute_radar(totals, ratings, release, text.expression_intensity),
    )

    watched = [f for f in films if f.watched]
    genuine_share = (sum(1 for f in watched if f.genuine_watched_dates) / len(watched)
                     if watched else 0.0)

    logger.info(f"Computed stats for '{label}': {totals.films_watched} watched, "
                f"{totals.films_rated} rated, {len(rows)} on timeline")

    return StatPack(
        label=label,
        generated_at=generated_at,
        totals=totals,
        ratings=ratings,
        activity=activity,
        trends=trends,
        release_years=release,
        text=text,
        indices=indices,
        share_text=build_share_text(label, totals, ratings, activity.longest_streak_days,
                                    genuine_share),
    )
