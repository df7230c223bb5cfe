#!/usr/bin/env python3
"""
Data model for reconciled film records and derived statistics

Everything produced by the merge and statistics stages is a frozen dataclass
holding tuples/frozensets, so downstream consumers can share one result without
any of them mutating it.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple

from filmlog.rows import RawRow


@dataclass
class ExportTables:
    """Decoded contents of one export archive"""
    files: List[str] = field(default_factory=list)               # every .csv entry seen
    tables: Dict[str, List[RawRow]] = field(default_factory=dict)  # role → rows
    unknown: Dict[str, List[RawRow]] = field(default_factory=dict)  # entry name → rows
    skipped: List[str] = field(default_factory=list)             # .csv entries under a sub-path

    def rows(self, role: str) -> List[RawRow]:
        """Rows for a role; an absent table is simply empty"""
        return self.tables.get(role, [])

    def row_counts(self) -> Dict[str, int]:
        return {role: len(rows) for role, rows in self.tables.items()}


@dataclass(frozen=True)
class DiaryEntry:
    """One diary.csv row as it bears on the viewing timeline"""
    effective_date: Optional[str]   # watched date, else logged date
    estimated: bool                 # True when effective_date came from the logged date
    watched_date: Optional[str]
    logged_date: Optional[str]
    rewatch: bool
    rating: Optional[float]
    tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FilmRecord:
    """Canonical per-film record, one per identity key"""
    key: str
    slug: Optional[str]
    name: str
    year: Optional[int]
    url: Optional[str]

    watched: bool = False
    watched_dates: Tuple[str, ...] = ()     # diary effective dates only
    logged_dates: Tuple[str, ...] = ()      # diary logged dates only

    rated: bool = False
    rating: Optional[float] = None
    rating_source: Optional[str] = None
    rated_dates: Tuple[str, ...] = ()

    review_text_samples: Tuple[str, ...] = ()
    review_count: int = 0

    rewatch_count: int = 0
    tags: Tuple[str, ...] = ()
    liked: bool = False
    in_watchlist: bool = False

    sources: FrozenSet[str] = frozenset()
    diary_entries: Tuple[DiaryEntry, ...] = ()

    @property
    def genuine_watched_dates(self) -> Tuple[str, ...]:
        """Effective dates backed by an explicit watched date"""
        return tuple(sorted({e.effective_date for e in self.diary_entries
                             if e.effective_date and not e.estimated}))

    @property
    def estimated_dates(self) -> Tuple[str, ...]:
        return tuple(sorted({e.effective_date for e in self.diary_entries
                             if e.effective_date and e.estimated}))

    def best_date(self) -> Tuple[Optional[str], bool]:
        """
        Date placing this film on the viewing timeline

        Latest genuine watched date, else latest logged-date fallback.

        Returns:
            (date or None, used_logged_fallback)
        """
        genuine = self.genuine_watched_dates
        if genuine:
            return genuine[-1], False
        estimated = self.estimated_dates
        if estimated:
            return estimated[-1], True
        return None, False


@dataclass(frozen=True)
class AnomalySummary:
    import_spike_detected: bool = False
    largest_single_day_import_count: int = 0
    largest_single_day_import_date: Optional[str] = None
    import_spike_share: float = 0.0
    watched_date_span_years: int = 0
    diary_entry_span_years: int = 0


@dataclass(frozen=True)
class DebugSummary:
    csv_detected: Tuple[str, ...] = ()
    row_counts: Tuple[Tuple[str, int], ...] = ()
    unknown_tables: Tuple[str, ...] = ()
    merged_film_count: int = 0
    watched_true_count: int = 0
    percent_with_watched_at: float = 0.0
    ratings_hit_rate: float = 0.0
    reviews_hit_rate: float = 0.0
    only_in_ratings_not_in_watched: int = 0
    only_in_reviews_not_in_watched: int = 0
    synthetic_identity_count: int = 0
    random_film_samples: Tuple[FilmRecord, ...] = ()


@dataclass(frozen=True)
class MergeResult:
    films: Tuple[FilmRecord, ...]
    anomaly: AnomalySummary
    debug: DebugSummary

    def by_key(self) -> Dict[str, FilmRecord]:
        return {f.key: f for f in self.films}


# ---------------------------------------------------------------------------
# Statistics result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Totals:
    films_watched: int
    films_rated: int
    films_reviewed: int
    unrated_watched: int
    rated_share: float
    diary_entries: int
    rewatch_films: int
    liked_films: int


@dataclass(frozen=True)
class RatingBucket:
    rating: float
    count: int


@dataclass(frozen=True)
class RatingSummary:
    mean: Optional[float]
    median: Optional[float]
    stddev: Optional[float]
    histogram: Tuple[RatingBucket, ...]
    mode: Optional[float]
    indecisive_share: float


@dataclass(frozen=True)
class Streak:
    start: str
    end: str
    days: int


@dataclass(frozen=True)
class PeriodCount:
    period: str     # YYYY-MM-DD or YYYY-MM
    count: int


@dataclass(frozen=True)
class Activity:
    by_day: Tuple[PeriodCount, ...]
    by_month: Tuple[PeriodCount, ...]
    longest_streak_days: int
    top_streaks: Tuple[Streak, ...]
    busiest_day: Optional[PeriodCount]
    rating_date_correlation: Optional[float]
    used_logged_fallback: bool


@dataclass(frozen=True)
class TrendPoint:
    period: str
    watched: int
    mean_rating: Optional[float]
    unrated_share: float


@dataclass(frozen=True)
class Trends:
    timeline: Tuple[TrendPoint, ...]
    recent_12: Tuple[TrendPoint, ...]
    recent_24: Tuple[TrendPoint, ...]


@dataclass(frozen=True)
class YearCount:
    year: int
    count: int


@dataclass(frozen=True)
class DecadeCount:
    decade: str
    count: int


@dataclass(frozen=True)
class ReleaseYears:
    by_year: Tuple[YearCount, ...]         # ascending year
    top_years: Tuple[YearCount, ...]       # most watched first
    decades: Tuple[DecadeCount, ...]       # most watched first
    span_min: Optional[int]
    span_max: Optional[int]
    comfort_zone_return_rate: float
    exploration_index: float


@dataclass(frozen=True)
class WordCount:
    word: str
    count: int


@dataclass(frozen=True)
class Persona:
    type: str
    reason: str


@dataclass(frozen=True)
class TextSummary:
    top_words: Tuple[WordCount, ...]
    avg_review_length: Optional[float]
    expression_intensity: float
    persona: Persona


@dataclass(frozen=True)
class RadarMetric:
    key: str
    label: str
    value: int      # 0-100


@dataclass(frozen=True)
class Indices:
    commitment_index: float
    taste_volatility: Optional[float]
    badge: str
    radar: Tuple[RadarMetric, ...]


@dataclass(frozen=True)
class ShareText:
    short: str
    long: str


@dataclass(frozen=True)
class StatPack:
    label: str
    generated_at: str
    totals: Totals
    ratings: RatingSummary
    activity: Activity
    trends: Trends
    release_years: ReleaseYears
    text: TextSummary
    indices: Indices
    share_text: ShareText
