#!/usr/bin/env python3
"""
Report export: JSON-ready conversion and tabular views

Renderers and reports read these projections; they never re-derive merge
decisions. Collections become lists (frozensets sorted) so output is stable.
"""

import json
import math
from dataclasses import fields, is_dataclass
from pathlib import Path
from typing import Any, Sequence

import pandas as pd

from filmlog.models import FilmRecord, TrendPoint

FILM_COLUMNS = [
    'key', 'name', 'year', 'watched', 'rating', 'rating_source', 'best_date',
    'best_date_estimated', 'watched_dates', 'review_count', 'rewatch_count',
    'liked', 'in_watchlist', 'tags', 'sources', 'url',
]

TREND_COLUMNS = ['period', 'watched', 'mean_rating', 'unrated_share']


def to_jsonable(obj: Any) -> Any:
    """Convert result dataclasses into plain JSON-compatible structures"""
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, (set, frozenset)):
        return sorted(to_jsonable(v) for v in obj)
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, float) and not math.isfinite(obj):
        return None
    return obj


def write_json(obj: Any, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(to_jsonable(obj), f, indent=2, ensure_ascii=False)
    return path


def films_to_frame(films: Sequence[FilmRecord]) -> pd.DataFrame:
    """One row per merged film; multi-valued fields joined with '|'"""
    records = []
    for film in films:
        best, estimated = film.best_date()
        records.append({
            'key': film.key,
            'name': film.name,
            'year': film.year,
            'watched': film.watched,
            'rating': film.rating,
            'rating_source': film.rating_source,
            'best_date': best,
            'best_date_estimated': estimated if best else None,
            'watched_dates': '|'.join(film.watched_dates),
            'review_count': film.review_count,
            'rewatch_count': film.rewatch_count,
            'liked': film.liked,
            'in_watchlist': film.in_watchlist,
            'tags': '|'.join(film.tags),
            'sources': '|'.join(sorted(film.sources)),
            'url': film.url,
        })
    frame = pd.DataFrame(records, columns=FILM_COLUMNS)
    frame['year'] = frame['year'].astype('Int64')
    return frame


def trend_to_frame(timeline: Sequence[TrendPoint]) -> pd.DataFrame:
    return pd.DataFrame(
        [{'period': p.period, 'watched': p.watched, 'mean_rating': p.mean_rating,
          'unrated_share': p.unrated_share} for p in timeline],
        columns=TREND_COLUMNS,
    )
