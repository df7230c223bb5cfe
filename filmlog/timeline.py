#!/usr/bin/env python3
"""
Viewing timeline: best-date placement, streaks and monthly trend series

Only watched films with a diary-derived best date are placed on the timeline
(see FilmRecord.best_date). Films without one are left out of every
date-bucketed statistic rather than guessed.
"""

from collections import Counter
from dataclasses import dataclass
from statistics import mean
from typing import Dict, List, Optional, Sequence, Tuple

from filmlog.models import FilmRecord, PeriodCount, Streak, TrendPoint
from filmlog.normalization import date_ordinal, month_key


@dataclass(frozen=True)
class TimelineRow:
    film: FilmRecord
    date: str
    used_fallback: bool


def build_timeline(films: Sequence[FilmRecord]) -> List[TimelineRow]:
    rows = []
    for film in films:
        if not film.watched:
            continue
        day, used_fallback = film.best_date()
        if day:
            rows.append(TimelineRow(film, day, used_fallback))
    return rows


def count_by_day(rows: Sequence[TimelineRow]) -> Tuple[PeriodCount, ...]:
    counts = Counter(r.date for r in rows)
    return tuple(PeriodCount(day, counts[day]) for day in sorted(counts))


def count_by_month(rows: Sequence[TimelineRow]) -> Tuple[PeriodCount, ...]:
    counts = Counter(month_key(r.date) for r in rows)
    return tuple(PeriodCount(month, counts[month]) for month in sorted(counts))


def busiest_day(by_day: Sequence[PeriodCount]) -> Optional[PeriodCount]:
    """Day with most films; ties go to the earliest day"""
    if not by_day:
        return None
    return min(by_day, key=lambda p: (-p.count, p.period))


def find_streaks(days: Sequence[str]) -> List[Streak]:
    """
    Maximal runs of calendar-consecutive days, longest first

    Duplicate days collapse to one timeline entry. Runs of equal length keep
    chronological order.

    Examples:
        >>> [s.days for s in find_streaks(["2024-01-01", "2024-01-02", "2024-01-03", "2024-01-10"])]
        [3, 1]
    """
    unique = sorted(set(days))
    if not unique:
        return []

    streaks = []
    start = prev = unique[0]
    for current in unique[1:]:
        if date_ordinal(current) == date_ordinal(prev) + 1:
            prev = current
            continue
        streaks.append(Streak(start, prev, date_ordinal(prev) - date_ordinal(start) + 1))
        start = prev = current
    streaks.append(Streak(start, prev, date_ordinal(prev) - date_ordinal(start) + 1))

    streaks.sort(key=lambda s: -s.days)
    return streaks


def longest_streak(days: Sequence[str]) -> int:
    streaks = find_streaks(days)
    return streaks[0].days if streaks else 0


def month_diff(a: str, b: str) -> int:
    """Whole months from YYYY-MM `a` to YYYY-MM `b`"""
    ay, am = int(a[:4]), int(a[5:7])
    by, bm = int(b[:4]), int(b[5:7])
    return (by - ay) * 12 + (bm - am)


def trend_series(rows: Sequence[TimelineRow]) -> Tuple[TrendPoint, ...]:
    """
    Per-month watched count and mean rating

    A month with no rated film reports mean_rating None, not zero.
    """
    buckets: Dict[str, List[Optional[float]]] = {}
    for row in rows:
        buckets.setdefault(month_key(row.date), []).append(row.film.rating)

    points = []
    for month in sorted(buckets):
        ratings = buckets[month]
        rated = [r for r in ratings if r is not None]
        points.append(TrendPoint(
            period=month,
            watched=len(ratings),
            mean_rating=mean(rated) if rated else None,
            unrated_share=(len(ratings) - len(rated)) / len(ratings),
        ))
    return tuple(points)


def recent_window(timeline: Sequence[TrendPoint], months: int) -> Tuple[TrendPoint, ...]:
    """Trend points within `months` calendar months ending at the latest month"""
    if not timeline:
        return ()
    latest = timeline[-1].period
    return tuple(p for p in timeline if month_diff(p.period, latest) <= months - 1)
