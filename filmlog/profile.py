#!/usr/bin/env python3
"""
Consumer projections of a finished analysis

The commentary service receives a bounded, serialized dossier - never raw
rows. It is told through `hard_rules` that import-date spikes are not
viewing behavior; honoring that is the consumer's job, supplying the flag
is ours.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from filmlog.config import AnalysisConfig
from filmlog.constants import DOSSIER_REVIEW_SAMPLES
from filmlog.export import to_jsonable
from filmlog.models import AnomalySummary, FilmRecord, MergeResult, StatPack, Totals


@dataclass(frozen=True)
class ProfileSummary:
    label: str
    generated_at: str
    totals: Totals
    anomaly: AnomalySummary


def to_profile_summary(stats: StatPack, anomaly: AnomalySummary,
                       label: Optional[str] = None) -> ProfileSummary:
    return ProfileSummary(
        label=label or stats.label,
        generated_at=stats.generated_at,
        totals=stats.totals,
        anomaly=anomaly,
    )


def summary_to_text(summary: ProfileSummary) -> str:
    return '\n'.join([
        f"Label: {summary.label}",
        f"Watched films: {summary.totals.films_watched}",
        f"Rated films: {summary.totals.films_rated}",
        f"Import spike: {str(summary.anomaly.import_spike_detected).lower()}",
    ])


def _dossier_film(film: FilmRecord) -> Dict[str, Any]:
    best, estimated = film.best_date()
    return {
        'film_id': film.key,
        'name': film.name,
        'year': film.year,
        'watched': film.watched,
        'rating': film.rating,
        'watched_dates': list(film.watched_dates),
        'best_date': best,
        'best_date_estimated': estimated,
        'review_text': list(film.review_text_samples[:DOSSIER_REVIEW_SAMPLES]),
    }


def build_dossier(merged: MergeResult, stats: StatPack,
                  config: Optional[AnalysisConfig] = None) -> Dict[str, Any]:
    """
    JSON-ready payload for the commentary consumer

    At most `dossier_film_limit` films are included, in merge order.
    """
    config = config or AnalysisConfig()
    debug = to_jsonable(merged.debug)
    debug.pop('random_film_samples', None)

    return {
        'hard_rules': {
            'use_master_table_only': True,
            'no_import_date_for_pace': True,
            'if_spike_use_watched_or_logged_only': True,
            'import_spike_detected': merged.anomaly.import_spike_detected,
        },
        'label': stats.label,
        'generated_at': stats.generated_at,
        'anomaly': to_jsonable(merged.anomaly),
        'debug': debug,
        'totals': to_jsonable(stats.totals),
        'ratings': to_jsonable(stats.ratings),
        'indices': to_jsonable(stats.indices),
        'trends': to_jsonable(stats.trends),
        'text': to_jsonable(stats.text),
        'films': [_dossier_film(f) for f in merged.films[:config.dossier_film_limit]],
    }
